"""Weekly challenge administration and winner selection.

Winner selection is a two-step flow:

1. Record ``winner_submission_id`` on the challenge and commit. A challenge gets
   at most one winner.
2. Award the winner bonus through the XP service. This step is retryable on its
   own: if it fails the winner stays recorded and the failure is returned as a
   warning.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field

import structlog

from rejection.challenges.week_utils import get_weeks_in_year
from rejection.errors import InvalidInput, NotFound, RejectionError, WinnerAlreadySelected
from rejection.gamification.ledger import LedgerRules, XPAction
from rejection.gamification.xp_service import AwardResult, XPUpdateService
from rejection.store.base import ChallengeRecord, NewChallenge, Store

logger = structlog.get_logger()

MIN_CHALLENGE_YEAR = 2024
TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 400


@dataclass
class WinnerSelection:
    challenge_id: uuid.UUID
    submission_id: uuid.UUID
    winner_user_id: uuid.UUID
    newly_selected: bool
    award: AwardResult | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def xp_awarded(self) -> bool:
        return self.award is not None


def validate_week(week: int, year: int) -> None:
    if year < MIN_CHALLENGE_YEAR:
        raise InvalidInput(f"Year must be {MIN_CHALLENGE_YEAR} or later")
    weeks = get_weeks_in_year(year)
    if not 1 <= week <= weeks:
        raise InvalidInput(f"Week must be between 1 and {weeks} for {year}")


def validate_text(title: str | None, description: str | None) -> None:
    if title is not None and not TITLE_MIN_LENGTH <= len(title.strip()) <= TITLE_MAX_LENGTH:
        raise InvalidInput(f"Title must be between {TITLE_MIN_LENGTH} and {TITLE_MAX_LENGTH} characters")
    if description is not None and len(description) > DESCRIPTION_MAX_LENGTH:
        raise InvalidInput(f"Description must be at most {DESCRIPTION_MAX_LENGTH} characters")


async def get_challenge(store: Store, challenge_id: uuid.UUID) -> ChallengeRecord:
    challenge = await store.challenges.get(challenge_id)
    if challenge is None:
        raise NotFound("Challenge not found")
    return challenge


async def create_challenge(store: Store, challenge: NewChallenge) -> ChallengeRecord:
    """Create a challenge; a second challenge for the same week raises ConflictDuplicate."""
    validate_week(challenge.week, challenge.year)
    validate_text(challenge.title, challenge.description)
    try:
        created = await store.challenges.insert(challenge)
        await store.commit()
    except Exception:
        await store.rollback()
        raise
    logger.info("challenge_created", challenge_id=str(created.id), week=created.week, year=created.year)
    return created


async def update_challenge(store: Store, challenge_id: uuid.UUID, changes: dict[str, object]) -> ChallengeRecord:
    if "title" in changes and changes["title"] is None:
        raise InvalidInput("Title cannot be empty")
    validate_text(changes.get("title"), changes.get("description"))  # type: ignore[arg-type]
    try:
        updated = await store.challenges.update(challenge_id, changes)
        if updated is None:
            raise NotFound("Challenge not found")
        await store.commit()
    except Exception:
        await store.rollback()
        raise
    return updated


async def delete_challenge(store: Store, challenge_id: uuid.UUID) -> None:
    try:
        if not await store.challenges.delete(challenge_id):
            raise NotFound("Challenge not found")
        await store.commit()
    except Exception:
        await store.rollback()
        raise
    logger.info("challenge_deleted", challenge_id=str(challenge_id))


async def select_winner(
    store: Store,
    rules: LedgerRules,
    challenge_id: uuid.UUID,
    submission_id: uuid.UUID,
) -> WinnerSelection:
    """Record the winning submission, then award the winner bonus."""
    submission = await store.submissions.get(submission_id)
    if submission is None:
        raise NotFound("Submission not found")
    challenge = await get_challenge(store, challenge_id)
    if submission.challenge_id != challenge.id:
        raise InvalidInput("Submission does not belong to this challenge")

    selection = WinnerSelection(
        challenge_id=challenge_id,
        submission_id=submission_id,
        winner_user_id=submission.user_id,
        newly_selected=False,
    )

    if challenge.winner_submission_id == submission_id:
        logger.info("winner_already_selected", challenge_id=str(challenge_id), submission_id=str(submission_id))
        return selection
    if challenge.winner_submission_id is not None:
        raise WinnerAlreadySelected()

    # Step 1: record the winner
    try:
        recorded = await store.challenges.set_winner_if_unset(challenge_id, submission_id)
        if recorded:
            await store.commit()
    except Exception:
        await store.rollback()
        raise
    if not recorded:
        # A concurrent request set the winner between our read and write
        await store.rollback()
        current = await get_challenge(store, challenge_id)
        if current.winner_submission_id == submission_id:
            return selection
        raise WinnerAlreadySelected()
    selection.newly_selected = True
    logger.info(
        "winner_selected",
        challenge_id=str(challenge_id),
        submission_id=str(submission_id),
        user_id=str(submission.user_id),
    )

    # Step 2: award the bonus; failure never undoes step 1
    try:
        selection.award = await XPUpdateService(store, rules).award(
            submission.user_id, XPAction.WIN_CHALLENGE, challenge_id
        )
    except RejectionError as exc:
        logger.warning(
            "winner_xp_award_failed",
            challenge_id=str(challenge_id),
            user_id=str(submission.user_id),
            error_kind=exc.kind,
            error=exc.message,
        )
        selection.warnings.append(f"Winner recorded but XP award failed: {exc.message}")

    return selection

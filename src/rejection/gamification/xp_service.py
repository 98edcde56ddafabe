"""XP award service with duplicate-completion detection.

Actions and their effect on a profile:

    complete_challenge  +completion XP, +1 challenges_completed (first time only)
    win_challenge       +win XP
    participate         +participation XP

A (user, challenge) pair is credited toward ``challenges_completed`` once. The
credit is tied to a completion-marker submission row that the datastore keeps
unique per pair. A repeated completion still receives the completion XP but
never moves the counter.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass

import structlog

from rejection.errors import ConflictDuplicate, InvalidInput, NotFound
from rejection.gamification.ledger import LedgerRules, XPAction, apply_award, parse_action
from rejection.gamification.profile_writer import persist_transition, require_profile
from rejection.store.base import NewSubmission, Store

logger = structlog.get_logger()

DUPLICATE_COMPLETION_MESSAGE = "Challenge was already completed - XP awarded but counter not incremented"


@dataclass(frozen=True)
class SubmissionDraft:
    """User-supplied submission content recorded alongside a completion."""

    comment: str | None = None
    video_url: str | None = None
    contact_method: str | None = None
    contact_value: str | None = None


@dataclass(frozen=True)
class AwardResult:
    new_xp: int
    new_rank: str
    new_challenges_completed: int
    xp_added: int
    first_completion: bool = False
    message: str | None = None
    submission_id: uuid.UUID | None = None


class XPUpdateService:
    """Decides how much XP an action is worth and persists the new profile state."""

    def __init__(self, store: Store, rules: LedgerRules) -> None:
        self._store = store
        self._rules = rules

    async def award(
        self,
        user_id: uuid.UUID,
        action: XPAction | str,
        challenge_id: uuid.UUID | None = None,
        submission: SubmissionDraft | None = None,
    ) -> AwardResult:
        """Award XP for ``action`` and commit.

        ``submission`` is only meaningful for complete_challenge: when given, the
        service records it (as the completion marker on a first completion, as an
        ordinary row otherwise) instead of inserting a bare marker.
        """
        action = parse_action(action)
        if action is XPAction.COMPLETE_CHALLENGE and challenge_id is None:
            raise InvalidInput("challengeId is required for complete_challenge")

        try:
            await require_profile(self._store, user_id)
            if action is XPAction.COMPLETE_CHALLENGE:
                result = await self._complete(user_id, challenge_id, submission)
            else:
                result = await self._flat_award(user_id, action)
            await self._store.commit()
        except Exception:
            await self._store.rollback()
            raise

        logger.info(
            "xp_awarded",
            user_id=str(user_id),
            action=action.value,
            challenge_id=str(challenge_id) if challenge_id else None,
            xp_added=result.xp_added,
            new_xp=result.new_xp,
            new_rank=result.new_rank,
            first_completion=result.first_completion,
        )
        return result

    async def _flat_award(self, user_id: uuid.UUID, action: XPAction) -> AwardResult:
        xp = self._rules.xp_for(action)
        _, state = await persist_transition(
            self._store,
            self._rules,
            user_id,
            lambda p: apply_award(
                self._rules, p.experience_points, p.challenges_completed, xp, count_completion=False
            ),
        )
        return AwardResult(
            new_xp=state.experience_points,
            new_rank=state.rank_level,
            new_challenges_completed=state.challenges_completed,
            xp_added=xp,
        )

    async def _complete(
        self,
        user_id: uuid.UUID,
        challenge_id: uuid.UUID,
        draft: SubmissionDraft | None,
    ) -> AwardResult:
        if await self._store.challenges.get(challenge_id) is None:
            raise NotFound("Challenge not found")

        xp = self._rules.challenge_completion
        existing = await self._store.submissions.count_for_pair(user_id, challenge_id)

        if existing == 0:
            try:
                marker = await self._store.submissions.insert(
                    self._new_submission(user_id, challenge_id, draft, is_completion=True)
                )
            except ConflictDuplicate:
                # Another request recorded the completion first
                logger.info("completion_race_lost", user_id=str(user_id), challenge_id=str(challenge_id))
            else:
                _, state = await persist_transition(
                    self._store,
                    self._rules,
                    user_id,
                    lambda p: apply_award(
                        self._rules, p.experience_points, p.challenges_completed, xp, count_completion=True
                    ),
                )
                return AwardResult(
                    new_xp=state.experience_points,
                    new_rank=state.rank_level,
                    new_challenges_completed=state.challenges_completed,
                    xp_added=xp,
                    first_completion=True,
                    submission_id=marker.id,
                )

        logger.info(
            "duplicate_completion",
            user_id=str(user_id),
            challenge_id=str(challenge_id),
            existing_submissions=existing,
        )
        submission_id = None
        if draft is not None:
            recorded = await self._store.submissions.insert(
                self._new_submission(user_id, challenge_id, draft, is_completion=False)
            )
            submission_id = recorded.id

        _, state = await persist_transition(
            self._store,
            self._rules,
            user_id,
            lambda p: apply_award(
                self._rules, p.experience_points, p.challenges_completed, xp, count_completion=False
            ),
        )
        return AwardResult(
            new_xp=state.experience_points,
            new_rank=state.rank_level,
            new_challenges_completed=state.challenges_completed,
            xp_added=xp,
            first_completion=False,
            message=DUPLICATE_COMPLETION_MESSAGE,
            submission_id=submission_id,
        )

    @staticmethod
    def _new_submission(
        user_id: uuid.UUID,
        challenge_id: uuid.UUID,
        draft: SubmissionDraft | None,
        *,
        is_completion: bool,
    ) -> NewSubmission:
        draft = draft or SubmissionDraft()
        return NewSubmission(
            challenge_id=challenge_id,
            user_id=user_id,
            comment=draft.comment,
            video_url=draft.video_url,
            contact_method=draft.contact_method,
            contact_value=draft.contact_value,
            completed=True,
            is_completion=is_completion,
        )

"""Submission deletion and XP/counter reconciliation."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum

import structlog

from rejection.auth.principal import Principal
from rejection.errors import InvalidInput, NotFound, PersistFailure
from rejection.gamification.ledger import LedgerRules, apply_removal
from rejection.gamification.profile_writer import persist_transition, require_profile
from rejection.store.base import Store, SubmissionRecord

logger = structlog.get_logger()


class CleanupMode(str, Enum):
    SINGLE = "single"
    ALL = "all"


def parse_cleanup_mode(value: object) -> CleanupMode:
    if value is None or value == "":
        return CleanupMode.SINGLE
    try:
        return CleanupMode(value)
    except ValueError:
        raise InvalidInput(f"Invalid cleanupMode: {value!r}") from None


@dataclass(frozen=True)
class DeletionResult:
    new_xp: int
    new_challenges_completed: int
    new_rank: str
    xp_removed: int
    submissions_deleted: int


class SubmissionReconciliationService:
    """Deletes submissions and rolls the owner's XP and counter back to match."""

    def __init__(self, store: Store, rules: LedgerRules) -> None:
        self._store = store
        self._rules = rules

    async def delete_submission(
        self,
        submission_id: uuid.UUID,
        cleanup_mode: CleanupMode | str = CleanupMode.SINGLE,
        *,
        actor: Principal | None = None,
    ) -> DeletionResult:
        """Delete a submission and reconcile its owner's profile.

        With ``all``, or when this is the owner's only submission for the
        challenge, every submission for the (user, challenge) pair is removed and
        the completed-challenge counter drops by one. Otherwise only this row is
        removed and the counter is left alone. The completion XP is always taken
        back. XP and counter never go below zero.
        """
        mode = parse_cleanup_mode(cleanup_mode)

        try:
            submission = await self._store.submissions.get(submission_id)
            if submission is None:
                raise NotFound("Submission not found")
            if actor is not None:
                actor.require_self_or_admin(submission.user_id, "Not authorized to delete this submission")

            await require_profile(self._store, submission.user_id, "User profile not found")
            count = await self._store.submissions.count_for_pair(submission.user_id, submission.challenge_id)
            remove_all = mode is CleanupMode.ALL or count <= 1

            deleted = await self._delete_rows(submission, remove_all)
            if deleted == 0:
                # Removed by a concurrent request; its reconciliation already ran
                raise NotFound("Submission not found")

            xp_removed = self._rules.challenge_completion
            _, state = await persist_transition(
                self._store,
                self._rules,
                submission.user_id,
                lambda p: apply_removal(
                    self._rules,
                    p.experience_points,
                    p.challenges_completed,
                    xp_removed,
                    uncount_completion=remove_all,
                ),
            )
            await self._store.commit()
        except Exception:
            await self._store.rollback()
            raise

        logger.info(
            "submission_deleted",
            submission_id=str(submission_id),
            user_id=str(submission.user_id),
            challenge_id=str(submission.challenge_id),
            cleanup_mode=mode.value,
            pair_count=count,
            submissions_deleted=deleted,
            counter_decremented=remove_all,
            new_xp=state.experience_points,
        )
        return DeletionResult(
            new_xp=state.experience_points,
            new_challenges_completed=state.challenges_completed,
            new_rank=state.rank_level,
            xp_removed=xp_removed,
            submissions_deleted=deleted,
        )

    async def _delete_rows(self, submission: SubmissionRecord, remove_all: bool) -> int:
        if not remove_all:
            return await self._store.submissions.delete(submission.id)
        try:
            return await self._store.submissions.delete_for_pair(submission.user_id, submission.challenge_id)
        except PersistFailure:
            logger.warning(
                "bulk_delete_failed",
                submission_id=str(submission.id),
                user_id=str(submission.user_id),
                challenge_id=str(submission.challenge_id),
                exc_info=True,
            )
            return await self._store.submissions.delete(submission.id)

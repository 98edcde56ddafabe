"""Submission creation and the daily submission limit guard."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

import structlog

from rejection.challenges.week_utils import get_day_window
from rejection.errors import DailyLimitExceeded, NotFound
from rejection.gamification.ledger import LedgerRules, XPAction
from rejection.gamification.xp_service import AwardResult, SubmissionDraft, XPUpdateService
from rejection.store.base import Store

logger = structlog.get_logger()


@dataclass(frozen=True)
class DailyLimitStatus:
    submissions_today: int
    max_daily_submissions: int
    reset_at: datetime
    reset_hours: int
    reset_minutes: int

    @property
    def submissions_remaining(self) -> int:
        return max(0, self.max_daily_submissions - self.submissions_today)

    @property
    def can_submit(self) -> bool:
        return self.submissions_today < self.max_daily_submissions


async def check_daily_limit(
    store: Store,
    user_id: uuid.UUID,
    max_daily: int,
    now: datetime | None = None,
) -> DailyLimitStatus:
    """Count today's submissions (UTC day) and time left until the window resets."""
    if now is None:
        now = datetime.now(timezone.utc)
    start, end = get_day_window(now)
    count = await store.submissions.count_created_between(user_id, start, end)

    minutes_left = max(0, int((end - now).total_seconds() // 60))
    return DailyLimitStatus(
        submissions_today=count,
        max_daily_submissions=max_daily,
        reset_at=end,
        reset_hours=minutes_left // 60,
        reset_minutes=minutes_left % 60,
    )


async def create_submission(
    store: Store,
    rules: LedgerRules,
    user_id: uuid.UUID,
    challenge_id: uuid.UUID,
    draft: SubmissionDraft,
    *,
    max_daily: int,
) -> AwardResult:
    """Record a submission and credit the completion.

    The XP service stores the submission itself so the row and the ledger
    update share one transaction. The profile row stays locked from the daily
    count until that transaction ends, so concurrent submissions from one user
    cannot overshoot the cap.
    """
    try:
        await store.profiles.lock(user_id)
        status = await check_daily_limit(store, user_id, max_daily)
        if not status.can_submit:
            logger.info("daily_limit_reached", user_id=str(user_id), submissions_today=status.submissions_today)
            raise DailyLimitExceeded(
                f"Daily submission limit reached ({status.max_daily_submissions} per day). "
                f"Try again in {status.reset_hours}h {status.reset_minutes}m."
            )

        if await store.challenges.get(challenge_id) is None:
            raise NotFound("Challenge not found")
    except Exception:
        await store.rollback()
        raise

    result = await XPUpdateService(store, rules).award(
        user_id, XPAction.COMPLETE_CHALLENGE, challenge_id, submission=draft
    )
    logger.info(
        "submission_created",
        user_id=str(user_id),
        challenge_id=str(challenge_id),
        submission_id=str(result.submission_id),
        first_completion=result.first_completion,
    )
    return result

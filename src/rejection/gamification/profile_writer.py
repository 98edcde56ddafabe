"""Conditional profile writes shared by the award and reconciliation paths."""

from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import datetime, timezone

import structlog

from rejection.errors import NotFound, TransientStoreError
from rejection.gamification.ledger import LedgerRules, LedgerState
from rejection.store.base import ProfileRecord, Store

logger = structlog.get_logger()


async def require_profile(store: Store, user_id: uuid.UUID, message: str = "User not found") -> ProfileRecord:
    profile = await store.profiles.get(user_id)
    if profile is None:
        raise NotFound(message)
    return profile


async def persist_transition(
    store: Store,
    rules: LedgerRules,
    user_id: uuid.UUID,
    transition: Callable[[ProfileRecord], LedgerState],
) -> tuple[ProfileRecord, LedgerState]:
    """Apply ``transition`` to the current profile and write it back atomically.

    XP, counter, rank and ``updated_at`` go out as one row update guarded by the
    previously read XP/counter. A lost race re-reads and recomputes, up to
    ``rules.max_write_attempts`` times.

    Returns (profile before, state written).
    """
    for attempt in range(1, rules.max_write_attempts + 1):
        profile = await require_profile(store, user_id)
        state = transition(profile)
        written = await store.profiles.compare_and_set(
            user_id,
            expected_xp=profile.experience_points,
            expected_completed=profile.challenges_completed,
            experience_points=state.experience_points,
            challenges_completed=state.challenges_completed,
            rank_level=state.rank_level,
            updated_at=datetime.now(timezone.utc),
        )
        if written:
            return profile, state
        logger.info("profile_write_contended", user_id=str(user_id), attempt=attempt)

    raise TransientStoreError("Profile is being updated concurrently, please retry")

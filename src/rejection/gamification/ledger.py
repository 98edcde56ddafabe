"""XP point values and the pure profile transitions built on them."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache

from rejection.config import get_settings
from rejection.errors import InvalidAction
from rejection.gamification.rank_table import DEFAULT_RANK_TABLE, RankTable


class XPAction(str, Enum):
    COMPLETE_CHALLENGE = "complete_challenge"
    WIN_CHALLENGE = "win_challenge"
    PARTICIPATE = "participate"


def parse_action(value: object) -> XPAction:
    """Parse an action tag, raising InvalidAction for anything unknown."""
    try:
        return XPAction(value)
    except ValueError:
        raise InvalidAction(f"Invalid action: {value!r}") from None


@dataclass(frozen=True)
class LedgerRules:
    """Rank table plus point values, shared by every service that moves XP."""

    rank_table: RankTable = field(default_factory=lambda: DEFAULT_RANK_TABLE)
    challenge_completion: int = 100
    challenge_win: int = 200
    challenge_participation: int = 10
    max_write_attempts: int = 5

    def xp_for(self, action: XPAction) -> int:
        return {
            XPAction.COMPLETE_CHALLENGE: self.challenge_completion,
            XPAction.WIN_CHALLENGE: self.challenge_win,
            XPAction.PARTICIPATE: self.challenge_participation,
        }[action]


@lru_cache
def get_ledger_rules() -> LedgerRules:
    """Build the ledger rules from application settings (cached)."""
    settings = get_settings()
    return LedgerRules(
        rank_table=DEFAULT_RANK_TABLE,
        challenge_completion=settings.xp_challenge_completion,
        challenge_win=settings.xp_challenge_win,
        challenge_participation=settings.xp_challenge_participation,
        max_write_attempts=settings.xp_max_write_attempts,
    )


@dataclass(frozen=True)
class LedgerState:
    """The three profile fields the ledger owns."""

    experience_points: int
    challenges_completed: int
    rank_level: str


def apply_award(
    rules: LedgerRules,
    experience_points: int,
    challenges_completed: int,
    xp: int,
    *,
    count_completion: bool,
) -> LedgerState:
    """State after adding ``xp`` and optionally crediting one completed challenge."""
    new_xp = max(0, experience_points) + xp
    new_count = max(0, challenges_completed) + (1 if count_completion else 0)
    return LedgerState(new_xp, new_count, rules.rank_table.rank_for(new_xp))


def apply_removal(
    rules: LedgerRules,
    experience_points: int,
    challenges_completed: int,
    xp: int,
    *,
    uncount_completion: bool,
) -> LedgerState:
    """State after removing ``xp`` and optionally one completion, both floored at 0."""
    new_xp = max(0, experience_points - xp)
    new_count = max(0, challenges_completed - 1) if uncount_completion else max(0, challenges_completed)
    return LedgerState(new_xp, new_count, rules.rank_table.rank_for(new_xp))

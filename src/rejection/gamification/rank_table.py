"""Rank thresholds and lookup.

This is the only rank table in the system. Every write path that changes
experience points recomputes ``rank_level`` through it.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass


@dataclass(frozen=True)
class Rank:
    name: str
    threshold: int


RANKS: tuple[Rank, ...] = (
    Rank("Novice", 0),
    Rank("Apprentice", 100),
    Rank("Bronze", 250),
    Rank("Bronze Elite", 500),
    Rank("Silver", 800),
    Rank("Silver Elite", 1200),
    Rank("Gold", 1800),
    Rank("Gold Elite", 2500),
    Rank("Platinum", 3500),
    Rank("Diamond", 5000),
    Rank("Master", 7000),
    Rank("Grand Master", 10000),
    Rank("Rejection Legend", 15000),
)


class RankTable:
    """Ordered (name, threshold) ladder mapping XP to a rank name."""

    def __init__(self, ranks: tuple[Rank, ...] = RANKS) -> None:
        if not ranks:
            raise ValueError("Rank table must contain at least one rank")
        if ranks[0].threshold != 0:
            raise ValueError("The base rank must start at 0 XP")
        for lower, upper in zip(ranks, ranks[1:]):
            if upper.threshold <= lower.threshold:
                raise ValueError(
                    f"Rank thresholds must be strictly ascending: "
                    f"{lower.name}({lower.threshold}) >= {upper.name}({upper.threshold})"
                )
        self._ranks = ranks
        self._thresholds = [r.threshold for r in ranks]

    @property
    def ranks(self) -> tuple[Rank, ...]:
        return self._ranks

    @property
    def base_rank(self) -> str:
        return self._ranks[0].name

    def _index_for(self, xp: int) -> int:
        return max(0, bisect_right(self._thresholds, xp) - 1)

    def rank_for(self, xp: int) -> str:
        """Name of the highest rank whose threshold is <= xp (base rank below 0)."""
        return self._ranks[self._index_for(xp)].name

    def next_rank(self, xp: int) -> Rank | None:
        """The next rank above the one held at ``xp``, or None at the top."""
        idx = self._index_for(xp)
        if idx + 1 >= len(self._ranks):
            return None
        return self._ranks[idx + 1]


DEFAULT_RANK_TABLE = RankTable()

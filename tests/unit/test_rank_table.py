"""Rank table lookup and validation."""

import pytest

from rejection.gamification.rank_table import DEFAULT_RANK_TABLE, RANKS, Rank, RankTable


class TestRankFor:
    """rank_for maps XP to the highest threshold at or below it."""

    @pytest.mark.parametrize(
        ("xp", "expected"),
        [
            (0, "Novice"),
            (99, "Novice"),
            (100, "Apprentice"),
            (249, "Apprentice"),
            (250, "Bronze"),
            (500, "Bronze Elite"),
            (1799, "Silver Elite"),
            (1800, "Gold"),
            (9999, "Master"),
            (10000, "Grand Master"),
            (15000, "Rejection Legend"),
            (1_000_000, "Rejection Legend"),
        ],
    )
    def test_thresholds(self, xp: int, expected: str) -> None:
        assert DEFAULT_RANK_TABLE.rank_for(xp) == expected

    def test_negative_xp_is_base_rank(self) -> None:
        assert DEFAULT_RANK_TABLE.rank_for(-50) == "Novice"

    def test_monotonic(self) -> None:
        """Rank index never decreases as XP grows."""
        names = [r.name for r in RANKS]
        previous = 0
        for xp in range(0, 16000, 25):
            idx = names.index(DEFAULT_RANK_TABLE.rank_for(xp))
            assert idx >= previous
            previous = idx

    def test_thirteen_tiers(self) -> None:
        assert len(DEFAULT_RANK_TABLE.ranks) == 13
        assert DEFAULT_RANK_TABLE.base_rank == "Novice"


class TestNextRank:
    def test_next_rank_from_zero(self) -> None:
        assert DEFAULT_RANK_TABLE.next_rank(0) == Rank("Apprentice", 100)

    def test_next_rank_mid_tier(self) -> None:
        assert DEFAULT_RANK_TABLE.next_rank(300) == Rank("Bronze Elite", 500)

    def test_top_rank_has_no_next(self) -> None:
        assert DEFAULT_RANK_TABLE.next_rank(20000) is None


class TestValidation:
    def test_empty_table_rejected(self) -> None:
        with pytest.raises(ValueError, match="at least one"):
            RankTable(())

    def test_must_start_at_zero(self) -> None:
        with pytest.raises(ValueError, match="start at 0"):
            RankTable((Rank("A", 10), Rank("B", 20)))

    def test_must_be_strictly_ascending(self) -> None:
        with pytest.raises(ValueError, match="strictly ascending"):
            RankTable((Rank("A", 0), Rank("B", 50), Rank("C", 50)))

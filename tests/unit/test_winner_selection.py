"""Winner selection: record the winner, then award the bonus."""

from __future__ import annotations

import uuid

import pytest

from rejection.challenges.service import select_winner
from rejection.errors import InvalidInput, NotFound, WinnerAlreadySelected
from rejection.gamification.ledger import LedgerRules
from tests.fakes import InMemoryDatabase


class TestSelectWinner:
    @pytest.mark.asyncio
    async def test_records_winner_and_awards(self, db: InMemoryDatabase, rules: LedgerRules) -> None:
        user = db.add_profile(xp=100, completed=1, rank="Apprentice")
        challenge = db.add_challenge()
        sub = db.add_submission(user.id, challenge.id, is_completion=True)

        selection = await select_winner(db.store(), rules, challenge.id, sub.id)

        assert selection.newly_selected is True
        assert selection.xp_awarded is True
        assert selection.warnings == []
        assert db.challenges[challenge.id].winner_submission_id == sub.id
        assert db.profiles[user.id].experience_points == 300
        assert db.profiles[user.id].challenges_completed == 1

    @pytest.mark.asyncio
    async def test_reselect_same_winner_does_not_award_again(
        self, db: InMemoryDatabase, rules: LedgerRules
    ) -> None:
        user = db.add_profile()
        challenge = db.add_challenge()
        sub = db.add_submission(user.id, challenge.id)

        await select_winner(db.store(), rules, challenge.id, sub.id)
        again = await select_winner(db.store(), rules, challenge.id, sub.id)

        assert again.newly_selected is False
        assert again.xp_awarded is False
        assert db.profiles[user.id].experience_points == 200

    @pytest.mark.asyncio
    async def test_different_winner_rejected(self, db: InMemoryDatabase, rules: LedgerRules) -> None:
        first_user = db.add_profile()
        second_user = db.add_profile()
        challenge = db.add_challenge()
        first = db.add_submission(first_user.id, challenge.id)
        second = db.add_submission(second_user.id, challenge.id)

        await select_winner(db.store(), rules, challenge.id, first.id)
        with pytest.raises(WinnerAlreadySelected):
            await select_winner(db.store(), rules, challenge.id, second.id)

        assert db.challenges[challenge.id].winner_submission_id == first.id
        assert db.profiles[second_user.id].experience_points == 0

    @pytest.mark.asyncio
    async def test_award_failure_is_a_warning(self, db: InMemoryDatabase, rules: LedgerRules) -> None:
        """The winner stays recorded when the XP award fails."""
        user = db.add_profile()
        challenge = db.add_challenge()
        sub = db.add_submission(user.id, challenge.id)
        db.fail_profile_writes = True

        selection = await select_winner(db.store(), rules, challenge.id, sub.id)

        assert selection.newly_selected is True
        assert selection.xp_awarded is False
        assert len(selection.warnings) == 1
        assert "XP award failed" in selection.warnings[0]
        assert db.challenges[challenge.id].winner_submission_id == sub.id
        assert db.profiles[user.id].experience_points == 0

    @pytest.mark.asyncio
    async def test_submission_from_other_challenge(self, db: InMemoryDatabase, rules: LedgerRules) -> None:
        user = db.add_profile()
        challenge = db.add_challenge()
        other = db.add_challenge(week=11)
        sub = db.add_submission(user.id, other.id)

        with pytest.raises(InvalidInput):
            await select_winner(db.store(), rules, challenge.id, sub.id)

    @pytest.mark.asyncio
    async def test_unknown_submission(self, db: InMemoryDatabase, rules: LedgerRules) -> None:
        challenge = db.add_challenge()
        with pytest.raises(NotFound):
            await select_winner(db.store(), rules, challenge.id, uuid.uuid4())

    @pytest.mark.asyncio
    async def test_unknown_challenge(self, db: InMemoryDatabase, rules: LedgerRules) -> None:
        user = db.add_profile()
        challenge = db.add_challenge()
        sub = db.add_submission(user.id, challenge.id)
        with pytest.raises(NotFound, match="Challenge not found"):
            await select_winner(db.store(), rules, uuid.uuid4(), sub.id)

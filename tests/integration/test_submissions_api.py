"""Submission endpoints: create, delete and the daily limit check."""

from __future__ import annotations

import uuid
from collections.abc import Callable

import pytest
from httpx import AsyncClient

from tests.fakes import InMemoryDatabase

Headers = Callable[[uuid.UUID], dict[str, str]]


def _payload(challenge_id: uuid.UUID, **overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "challengeId": str(challenge_id),
        "comment": "Asked a stranger for a high five",
        "contactMethod": "instagram",
        "contactValue": "@brave",
    }
    payload.update(overrides)
    return payload


class TestCreateSubmission:
    @pytest.mark.asyncio
    async def test_first_submission(self, client: AsyncClient, db: InMemoryDatabase, auth_headers: Headers) -> None:
        user = db.add_profile()
        challenge = db.add_challenge()

        response = await client.post("/api/v1/submissions", json=_payload(challenge.id), headers=auth_headers(user.id))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["firstCompletion"] is True
        assert data["newXP"] == 100
        assert data["newChallengesCompleted"] == 1
        row = db.submissions[uuid.UUID(data["submissionId"])]
        assert row.is_completion is True
        assert row.contact_value == "@brave"

    @pytest.mark.asyncio
    async def test_second_submission_is_duplicate(
        self, client: AsyncClient, db: InMemoryDatabase, auth_headers: Headers
    ) -> None:
        user = db.add_profile()
        challenge = db.add_challenge()
        headers = auth_headers(user.id)

        await client.post("/api/v1/submissions", json=_payload(challenge.id), headers=headers)
        response = await client.post("/api/v1/submissions", json=_payload(challenge.id), headers=headers)

        data = response.json()["data"]
        assert data["firstCompletion"] is False
        assert data["newXP"] == 200
        assert data["newChallengesCompleted"] == 1
        assert len(db.pair_rows(user.id, challenge.id)) == 2

    @pytest.mark.asyncio
    async def test_daily_limit(self, client: AsyncClient, db: InMemoryDatabase, auth_headers: Headers) -> None:
        user = db.add_profile()
        challenge = db.add_challenge()
        headers = auth_headers(user.id)
        for _ in range(3):
            ok = await client.post("/api/v1/submissions", json=_payload(challenge.id), headers=headers)
            assert ok.status_code == 200

        response = await client.post("/api/v1/submissions", json=_payload(challenge.id), headers=headers)

        assert response.status_code == 429
        assert response.json()["error"] == "daily_limit_exceeded"
        assert db.profiles[user.id].experience_points == 300

    @pytest.mark.asyncio
    async def test_unknown_challenge(self, client: AsyncClient, db: InMemoryDatabase, auth_headers: Headers) -> None:
        user = db.add_profile()
        response = await client.post("/api/v1/submissions", json=_payload(uuid.uuid4()), headers=auth_headers(user.id))
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_bad_contact_method(self, client: AsyncClient, db: InMemoryDatabase, auth_headers: Headers) -> None:
        user = db.add_profile()
        challenge = db.add_challenge()
        response = await client.post(
            "/api/v1/submissions", json=_payload(challenge.id, contactMethod="fax"), headers=auth_headers(user.id)
        )
        assert response.status_code == 422


class TestDeleteSubmission:
    @pytest.mark.asyncio
    async def test_json_client_gets_summary(
        self, client: AsyncClient, db: InMemoryDatabase, auth_headers: Headers
    ) -> None:
        user = db.add_profile(xp=100, completed=1, rank="Apprentice")
        challenge = db.add_challenge()
        sub = db.add_submission(user.id, challenge.id, is_completion=True)

        response = await client.post(
            "/api/v1/submissions/delete",
            json={"submissionId": str(sub.id)},
            headers={**auth_headers(user.id), "Accept": "application/json"},
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Submission deleted successfully",
            "data": {
                "newXP": 0,
                "newChallengesCompleted": 0,
                "newRank": "Novice",
                "xpRemoved": 100,
                "submissionsDeleted": 1,
            },
        }

    @pytest.mark.asyncio
    async def test_form_post_gets_message_only(
        self, client: AsyncClient, db: InMemoryDatabase, auth_headers: Headers
    ) -> None:
        user = db.add_profile(xp=200, completed=1, rank="Apprentice")
        challenge = db.add_challenge()
        db.add_submission(user.id, challenge.id, is_completion=True)
        extra = db.add_submission(user.id, challenge.id)

        response = await client.post(
            "/api/v1/submissions/delete",
            data={"submissionId": str(extra.id), "cleanupMode": "single"},
            headers={**auth_headers(user.id), "Accept": "text/html"},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Submission deleted successfully"}
        assert db.profiles[user.id].experience_points == 100
        assert db.profiles[user.id].challenges_completed == 1

    @pytest.mark.asyncio
    async def test_missing_id(self, client: AsyncClient, db: InMemoryDatabase, auth_headers: Headers) -> None:
        user = db.add_profile()
        response = await client.post("/api/v1/submissions/delete", json={}, headers=auth_headers(user.id))
        assert response.status_code == 400
        assert response.json()["detail"] == "Submission ID is required"

    @pytest.mark.asyncio
    async def test_malformed_id(self, client: AsyncClient, db: InMemoryDatabase, auth_headers: Headers) -> None:
        user = db.add_profile()
        response = await client.post(
            "/api/v1/submissions/delete",
            data={"submissionId": "not-a-uuid", "cleanupMode": "all"},
            headers=auth_headers(user.id),
        )
        assert response.status_code == 400
        assert response.json() == {"error": "validation_error", "detail": "Invalid submission ID"}

    @pytest.mark.asyncio
    async def test_invalid_mode(self, client: AsyncClient, db: InMemoryDatabase, auth_headers: Headers) -> None:
        user = db.add_profile()
        challenge = db.add_challenge()
        sub = db.add_submission(user.id, challenge.id)
        response = await client.post(
            "/api/v1/submissions/delete",
            json={"submissionId": str(sub.id), "cleanupMode": "nuke"},
            headers=auth_headers(user.id),
        )
        assert response.status_code == 400
        assert sub.id in db.submissions

    @pytest.mark.asyncio
    async def test_not_owner(self, client: AsyncClient, db: InMemoryDatabase, auth_headers: Headers) -> None:
        owner = db.add_profile(xp=100, completed=1)
        stranger = db.add_profile()
        challenge = db.add_challenge()
        sub = db.add_submission(owner.id, challenge.id, is_completion=True)

        response = await client.post(
            "/api/v1/submissions/delete", json={"submissionId": str(sub.id)}, headers=auth_headers(stranger.id)
        )

        assert response.status_code == 403
        assert sub.id in db.submissions

    @pytest.mark.asyncio
    async def test_unknown_submission(self, client: AsyncClient, db: InMemoryDatabase, auth_headers: Headers) -> None:
        user = db.add_profile()
        response = await client.post(
            "/api/v1/submissions/delete", json={"submissionId": str(uuid.uuid4())}, headers=auth_headers(user.id)
        )
        assert response.status_code == 404


class TestCheckDailyLimit:
    @pytest.mark.asyncio
    async def test_fresh_user(self, client: AsyncClient, db: InMemoryDatabase, auth_headers: Headers) -> None:
        user = db.add_profile()
        response = await client.post(
            "/api/v1/submissions/check-daily-limit", json={"userId": str(user.id)}, headers=auth_headers(user.id)
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["submissionsToday"] == 0
        assert data["submissionsRemaining"] == 3
        assert data["maxDailySubmissions"] == 3
        assert data["canSubmit"] is True
        assert set(data["resetTime"]) == {"date", "hours", "minutes"}
        assert 0 <= data["resetTime"]["hours"] <= 24

    @pytest.mark.asyncio
    async def test_other_user_forbidden(self, client: AsyncClient, db: InMemoryDatabase, auth_headers: Headers) -> None:
        caller = db.add_profile()
        other = db.add_profile()
        response = await client.post(
            "/api/v1/submissions/check-daily-limit", json={"userId": str(other.id)}, headers=auth_headers(caller.id)
        )
        assert response.status_code == 403

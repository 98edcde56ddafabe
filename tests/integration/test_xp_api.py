"""POST /api/v1/xp/update and the rank/profile read endpoints."""

from __future__ import annotations

import uuid
from collections.abc import Callable

import pytest
from httpx import AsyncClient

from tests.fakes import InMemoryDatabase

Headers = Callable[[uuid.UUID], dict[str, str]]


class TestXPUpdate:
    @pytest.mark.asyncio
    async def test_requires_token(self, client: AsyncClient) -> None:
        response = await client.post("/api/v1/xp/update", json={"userId": str(uuid.uuid4()), "action": "participate"})
        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"

    @pytest.mark.asyncio
    async def test_rejects_bad_token(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/v1/xp/update",
            json={"userId": str(uuid.uuid4()), "action": "participate"},
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_first_completion(self, client: AsyncClient, db: InMemoryDatabase, auth_headers: Headers) -> None:
        user = db.add_profile()
        challenge = db.add_challenge()

        response = await client.post(
            "/api/v1/xp/update",
            json={"userId": str(user.id), "action": "complete_challenge", "challengeId": str(challenge.id)},
            headers=auth_headers(user.id),
        )

        assert response.status_code == 200
        body = response.json()
        assert body == {
            "success": True,
            "data": {"newXP": 100, "newRank": "Apprentice", "newChallengesCompleted": 1, "xpAdded": 100},
        }

    @pytest.mark.asyncio
    async def test_duplicate_carries_message(
        self, client: AsyncClient, db: InMemoryDatabase, auth_headers: Headers
    ) -> None:
        user = db.add_profile(xp=100, completed=1, rank="Apprentice")
        challenge = db.add_challenge()
        db.add_submission(user.id, challenge.id, is_completion=True)

        response = await client.post(
            "/api/v1/xp/update",
            json={"userId": str(user.id), "action": "complete_challenge", "challengeId": str(challenge.id)},
            headers=auth_headers(user.id),
        )

        data = response.json()["data"]
        assert data["newXP"] == 200
        assert data["newChallengesCompleted"] == 1
        assert data["message"] == "Challenge was already completed - XP awarded but counter not incremented"

    @pytest.mark.asyncio
    async def test_other_user_forbidden(self, client: AsyncClient, db: InMemoryDatabase, auth_headers: Headers) -> None:
        caller = db.add_profile()
        target = db.add_profile()
        response = await client.post(
            "/api/v1/xp/update",
            json={"userId": str(target.id), "action": "participate"},
            headers=auth_headers(caller.id),
        )
        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"
        assert db.profiles[target.id].experience_points == 0

    @pytest.mark.asyncio
    async def test_admin_may_award_anyone(
        self, client: AsyncClient, db: InMemoryDatabase, auth_headers: Headers
    ) -> None:
        admin = db.add_profile(is_admin=True)
        target = db.add_profile()
        response = await client.post(
            "/api/v1/xp/update",
            json={"userId": str(target.id), "action": "win_challenge"},
            headers=auth_headers(admin.id),
        )
        assert response.status_code == 200
        assert response.json()["data"]["newXP"] == 200

    @pytest.mark.asyncio
    async def test_invalid_action(self, client: AsyncClient, db: InMemoryDatabase, auth_headers: Headers) -> None:
        user = db.add_profile()
        response = await client.post(
            "/api/v1/xp/update",
            json={"userId": str(user.id), "action": "hack"},
            headers=auth_headers(user.id),
        )
        assert response.status_code == 400
        assert response.json()["error"] == "invalid_action"

    @pytest.mark.asyncio
    async def test_missing_challenge_id(self, client: AsyncClient, db: InMemoryDatabase, auth_headers: Headers) -> None:
        user = db.add_profile()
        response = await client.post(
            "/api/v1/xp/update",
            json={"userId": str(user.id), "action": "complete_challenge"},
            headers=auth_headers(user.id),
        )
        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_unknown_challenge(self, client: AsyncClient, db: InMemoryDatabase, auth_headers: Headers) -> None:
        user = db.add_profile()
        response = await client.post(
            "/api/v1/xp/update",
            json={"userId": str(user.id), "action": "complete_challenge", "challengeId": str(uuid.uuid4())},
            headers=auth_headers(user.id),
        )
        assert response.status_code == 404
        assert response.json() == {"error": "not_found", "detail": "Challenge not found"}
        assert db.profiles[user.id].experience_points == 0
        assert db.submissions == {}

    @pytest.mark.asyncio
    async def test_unknown_user(self, client: AsyncClient, auth_headers: Headers) -> None:
        ghost = uuid.uuid4()
        response = await client.post(
            "/api/v1/xp/update",
            json={"userId": str(ghost), "action": "participate"},
            headers=auth_headers(ghost),
        )
        assert response.status_code == 404
        assert response.json() == {"error": "not_found", "detail": "User not found"}

    @pytest.mark.asyncio
    async def test_contention_is_retryable(
        self, client: AsyncClient, db: InMemoryDatabase, auth_headers: Headers
    ) -> None:
        user = db.add_profile()
        db.cas_conflicts_to_inject = 100
        response = await client.post(
            "/api/v1/xp/update",
            json={"userId": str(user.id), "action": "participate"},
            headers=auth_headers(user.id),
        )
        assert response.status_code == 503
        assert response.json()["retryable"] is True
        assert response.headers["Retry-After"] == "2"

    @pytest.mark.asyncio
    async def test_malformed_body(self, client: AsyncClient, db: InMemoryDatabase, auth_headers: Headers) -> None:
        user = db.add_profile()
        response = await client.post(
            "/api/v1/xp/update", json={"userId": "nope", "action": "participate"}, headers=auth_headers(user.id)
        )
        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"


class TestReadEndpoints:
    @pytest.mark.asyncio
    async def test_ranks(self, client: AsyncClient) -> None:
        response = await client.get("/api/v1/ranks")
        assert response.status_code == 200
        ranks = response.json()["ranks"]
        assert len(ranks) == 13
        assert ranks[0] == {"name": "Novice", "threshold": 0}
        assert ranks[-1] == {"name": "Rejection Legend", "threshold": 15000}

    @pytest.mark.asyncio
    async def test_my_xp(self, client: AsyncClient, db: InMemoryDatabase, auth_headers: Headers) -> None:
        user = db.add_profile(xp=300, completed=2, rank="Bronze")
        response = await client.get("/api/v1/profiles/me/xp", headers=auth_headers(user.id))
        assert response.status_code == 200
        assert response.json() == {
            "experiencePoints": 300,
            "rankLevel": "Bronze",
            "challengesCompleted": 2,
            "nextRank": "Bronze Elite",
            "xpToNextRank": 200,
        }

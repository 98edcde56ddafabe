"""Shared test fixtures.

The API runs against the in-memory store from ``tests/fakes.py``: ``get_store``
is overridden, so no database is needed.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import AsyncGenerator, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

os.environ["RJ_JWT_SECRET"] = "test-secret-for-rejection-therapy-api-0123456789"
os.environ["RJ_LOG_FORMAT"] = "console"

from rejection.auth.jwt import create_access_token  # noqa: E402
from rejection.config import get_settings  # noqa: E402
from rejection.dependencies import get_store  # noqa: E402
from rejection.gamification.ledger import LedgerRules, get_ledger_rules  # noqa: E402
from rejection.main import create_app  # noqa: E402
from tests.fakes import InMemoryDatabase  # noqa: E402

get_settings.cache_clear()
get_ledger_rules.cache_clear()


@pytest.fixture
def rules() -> LedgerRules:
    return LedgerRules()


@pytest.fixture
def db() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def auth_headers() -> Callable[[uuid.UUID], dict[str, str]]:
    """Build an Authorization header for a user id."""

    def _headers(user_id: uuid.UUID) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}

    return _headers


@pytest_asyncio.fixture
async def client(db: InMemoryDatabase) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client over the app, each request getting a fresh in-memory store."""
    app = create_app()
    app.dependency_overrides[get_store] = db.store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

"""Shared FastAPI dependencies."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rejection.config import Settings, get_settings
from rejection.database import get_session
from rejection.gamification.ledger import LedgerRules, get_ledger_rules
from rejection.store.base import Store
from rejection.store.sql import SqlStore


async def get_store(db: AsyncSession = Depends(get_session)) -> Store:  # noqa: B008
    """Repositories bound to the request's database session."""
    return SqlStore(db)


def get_rules() -> LedgerRules:
    """The rank table and point values shared by every XP write path."""
    return get_ledger_rules()


def get_app_settings() -> Settings:
    return get_settings()

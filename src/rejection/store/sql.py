"""PostgreSQL implementation of the repository interfaces."""

from __future__ import annotations

import functools
import uuid
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import ParamSpec, TypeVar

import structlog
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession

from rejection.db.models import (
    CHALLENGE_WEEK_CONSTRAINT_NAME,
    COMPLETION_INDEX_NAME,
    ChallengeSubmission,
    Profile,
    WeeklyChallenge,
)
from rejection.errors import ConflictDuplicate, PersistFailure, RejectionError, TransientStoreError
from rejection.store.base import (
    ChallengeRecord,
    NewChallenge,
    NewSubmission,
    ProfileRecord,
    SubmissionRecord,
)

logger = structlog.get_logger()

P = ParamSpec("P")
T = TypeVar("T")


def translate_store_errors(func_: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
    """Map SQLAlchemy/asyncpg failures onto TransientStoreError / PersistFailure."""

    @functools.wraps(func_)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        try:
            return await func_(*args, **kwargs)
        except RejectionError:
            raise
        except (TimeoutError, PoolTimeoutError) as exc:
            logger.warning("store_timeout", operation=func_.__qualname__)
            raise TransientStoreError("Datastore call timed out") from exc
        except (OperationalError, InterfaceError) as exc:
            logger.warning("store_unavailable", operation=func_.__qualname__, error=str(exc))
            raise TransientStoreError() from exc
        except DBAPIError as exc:
            if exc.connection_invalidated:
                logger.warning("store_connection_lost", operation=func_.__qualname__)
                raise TransientStoreError() from exc
            logger.error("store_write_rejected", operation=func_.__qualname__, error=str(exc))
            raise PersistFailure() from exc
        except SQLAlchemyError as exc:
            logger.error("store_error", operation=func_.__qualname__, error=str(exc))
            raise PersistFailure() from exc

    return wrapper


def _violated(exc: IntegrityError, constraint: str) -> bool:
    return constraint in str(exc.orig)


_PROFILE_COLUMNS = (
    Profile.id,
    Profile.experience_points,
    Profile.challenges_completed,
    Profile.rank_level,
    Profile.is_admin,
)

_SUBMISSION_COLUMNS = (
    ChallengeSubmission.id,
    ChallengeSubmission.challenge_id,
    ChallengeSubmission.user_id,
    ChallengeSubmission.created_at,
    ChallengeSubmission.comment,
    ChallengeSubmission.video_url,
    ChallengeSubmission.contact_method,
    ChallengeSubmission.contact_value,
    ChallengeSubmission.completed,
    ChallengeSubmission.is_completion,
)

_CHALLENGE_COLUMNS = (
    WeeklyChallenge.id,
    WeeklyChallenge.week,
    WeeklyChallenge.year,
    WeeklyChallenge.title,
    WeeklyChallenge.description,
    WeeklyChallenge.tiktok_link,
    WeeklyChallenge.winner_submission_id,
    WeeklyChallenge.created_at,
)


class SqlProfileRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @translate_store_errors
    async def get(self, user_id: uuid.UUID) -> ProfileRecord | None:
        result = await self._session.execute(select(*_PROFILE_COLUMNS).where(Profile.id == user_id))
        row = result.one_or_none()
        return ProfileRecord(**row._asdict()) if row else None

    @translate_store_errors
    async def is_admin(self, user_id: uuid.UUID) -> bool:
        result = await self._session.execute(select(Profile.is_admin).where(Profile.id == user_id))
        return bool(result.scalar_one_or_none())

    @translate_store_errors
    async def lock(self, user_id: uuid.UUID) -> bool:
        result = await self._session.execute(
            select(Profile.id).where(Profile.id == user_id).with_for_update()
        )
        return result.scalar_one_or_none() is not None

    @translate_store_errors
    async def compare_and_set(
        self,
        user_id: uuid.UUID,
        *,
        expected_xp: int,
        expected_completed: int,
        experience_points: int,
        challenges_completed: int,
        rank_level: str,
        updated_at: datetime,
    ) -> bool:
        result = await self._session.execute(
            update(Profile)
            .where(
                Profile.id == user_id,
                Profile.experience_points == expected_xp,
                Profile.challenges_completed == expected_completed,
            )
            .values(
                experience_points=experience_points,
                challenges_completed=challenges_completed,
                rank_level=rank_level,
                updated_at=updated_at,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1


class SqlSubmissionRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @translate_store_errors
    async def get(self, submission_id: uuid.UUID) -> SubmissionRecord | None:
        result = await self._session.execute(
            select(*_SUBMISSION_COLUMNS).where(ChallengeSubmission.id == submission_id)
        )
        row = result.one_or_none()
        return SubmissionRecord(**row._asdict()) if row else None

    @translate_store_errors
    async def count_for_pair(self, user_id: uuid.UUID, challenge_id: uuid.UUID) -> int:
        result = await self._session.execute(
            select(func.count())
            .select_from(ChallengeSubmission)
            .where(
                ChallengeSubmission.user_id == user_id,
                ChallengeSubmission.challenge_id == challenge_id,
            )
        )
        return result.scalar_one()

    @translate_store_errors
    async def count_created_between(self, user_id: uuid.UUID, start: datetime, end: datetime) -> int:
        result = await self._session.execute(
            select(func.count())
            .select_from(ChallengeSubmission)
            .where(
                ChallengeSubmission.user_id == user_id,
                ChallengeSubmission.created_at >= start,
                ChallengeSubmission.created_at < end,
            )
        )
        return result.scalar_one()

    @translate_store_errors
    async def list_for_challenge(
        self, challenge_id: uuid.UUID, *, newest_first: bool = True
    ) -> list[SubmissionRecord]:
        order = ChallengeSubmission.created_at.desc() if newest_first else ChallengeSubmission.created_at.asc()
        result = await self._session.execute(
            select(*_SUBMISSION_COLUMNS)
            .where(ChallengeSubmission.challenge_id == challenge_id)
            .order_by(order)
        )
        return [SubmissionRecord(**row._asdict()) for row in result]

    @translate_store_errors
    async def insert(self, submission: NewSubmission) -> SubmissionRecord:
        row = ChallengeSubmission(
            id=uuid.uuid4(),
            challenge_id=submission.challenge_id,
            user_id=submission.user_id,
            comment=submission.comment,
            video_url=submission.video_url,
            contact_method=submission.contact_method,
            contact_value=submission.contact_value,
            completed=submission.completed,
            is_completion=submission.is_completion,
            created_at=datetime.now(timezone.utc),
        )
        try:
            # Savepoint so a unique violation leaves the outer transaction usable
            async with self._session.begin_nested():
                self._session.add(row)
                await self._session.flush()
        except IntegrityError as exc:
            if _violated(exc, COMPLETION_INDEX_NAME):
                raise ConflictDuplicate("Completion already recorded for this challenge") from exc
            raise
        return SubmissionRecord(
            id=row.id,
            challenge_id=row.challenge_id,
            user_id=row.user_id,
            created_at=row.created_at,
            comment=row.comment,
            video_url=row.video_url,
            contact_method=row.contact_method,
            contact_value=row.contact_value,
            completed=row.completed,
            is_completion=row.is_completion,
        )

    @translate_store_errors
    async def delete(self, submission_id: uuid.UUID) -> int:
        result = await self._session.execute(
            delete(ChallengeSubmission).where(ChallengeSubmission.id == submission_id)
        )
        return result.rowcount

    @translate_store_errors
    async def delete_for_pair(self, user_id: uuid.UUID, challenge_id: uuid.UUID) -> int:
        async with self._session.begin_nested():
            result = await self._session.execute(
                delete(ChallengeSubmission).where(
                    ChallengeSubmission.user_id == user_id,
                    ChallengeSubmission.challenge_id == challenge_id,
                )
            )
        return result.rowcount


class SqlChallengeRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @translate_store_errors
    async def get(self, challenge_id: uuid.UUID) -> ChallengeRecord | None:
        result = await self._session.execute(
            select(*_CHALLENGE_COLUMNS).where(WeeklyChallenge.id == challenge_id)
        )
        row = result.one_or_none()
        return ChallengeRecord(**row._asdict()) if row else None

    @translate_store_errors
    async def get_by_week(self, week: int, year: int) -> ChallengeRecord | None:
        result = await self._session.execute(
            select(*_CHALLENGE_COLUMNS).where(WeeklyChallenge.week == week, WeeklyChallenge.year == year)
        )
        row = result.one_or_none()
        return ChallengeRecord(**row._asdict()) if row else None

    @translate_store_errors
    async def list_for_year(self, year: int) -> list[ChallengeRecord]:
        result = await self._session.execute(
            select(*_CHALLENGE_COLUMNS).where(WeeklyChallenge.year == year).order_by(WeeklyChallenge.week)
        )
        return [ChallengeRecord(**row._asdict()) for row in result]

    @translate_store_errors
    async def insert(self, challenge: NewChallenge) -> ChallengeRecord:
        now = datetime.now(timezone.utc)
        row = WeeklyChallenge(
            id=uuid.uuid4(),
            week=challenge.week,
            year=challenge.year,
            title=challenge.title,
            description=challenge.description,
            tiktok_link=challenge.tiktok_link,
            created_at=now,
            updated_at=now,
        )
        try:
            async with self._session.begin_nested():
                self._session.add(row)
                await self._session.flush()
        except IntegrityError as exc:
            if _violated(exc, CHALLENGE_WEEK_CONSTRAINT_NAME):
                raise ConflictDuplicate(
                    f"A challenge already exists for week {challenge.week}, {challenge.year}"
                ) from exc
            raise
        return ChallengeRecord(
            id=row.id,
            week=row.week,
            year=row.year,
            title=row.title,
            description=row.description,
            tiktok_link=row.tiktok_link,
            winner_submission_id=None,
            created_at=row.created_at,
        )

    @translate_store_errors
    async def update(self, challenge_id: uuid.UUID, changes: dict[str, object]) -> ChallengeRecord | None:
        if changes:
            await self._session.execute(
                update(WeeklyChallenge)
                .where(WeeklyChallenge.id == challenge_id)
                .values(**changes, updated_at=datetime.now(timezone.utc))
                .execution_options(synchronize_session=False)
            )
        return await self.get(challenge_id)

    @translate_store_errors
    async def delete(self, challenge_id: uuid.UUID) -> bool:
        result = await self._session.execute(delete(WeeklyChallenge).where(WeeklyChallenge.id == challenge_id))
        return result.rowcount > 0

    @translate_store_errors
    async def set_winner_if_unset(self, challenge_id: uuid.UUID, submission_id: uuid.UUID) -> bool:
        result = await self._session.execute(
            update(WeeklyChallenge)
            .where(
                WeeklyChallenge.id == challenge_id,
                WeeklyChallenge.winner_submission_id.is_(None),
            )
            .values(winner_submission_id=submission_id, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1


class SqlStore:
    """Repositories bound to one AsyncSession (one transaction per request)."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self.profiles = SqlProfileRepository(session)
        self.submissions = SqlSubmissionRepository(session)
        self.challenges = SqlChallengeRepository(session)

    @translate_store_errors
    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()

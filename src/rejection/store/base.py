"""Repository interfaces over the row store.

Services only talk to these Protocols, so any backend that honours the same
contracts can be swapped in:

* ``SubmissionRepository.insert`` raises ``ConflictDuplicate`` when a second
  completion marker is inserted for the same (user, challenge) pair.
* ``ProfileRepository.compare_and_set`` writes XP, counter, rank and timestamp
  as one row update, and only if the row still holds the expected XP/counter.
* ``ProfileRepository.lock`` holds the profile row until the unit of work
  commits or rolls back, serialising check-then-write sequences per user.
* Timeouts and connection failures surface as ``TransientStoreError``; other
  rejected writes as ``PersistFailure``.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class ProfileRecord:
    id: uuid.UUID
    experience_points: int
    challenges_completed: int
    rank_level: str
    is_admin: bool = False


@dataclass(frozen=True)
class SubmissionRecord:
    id: uuid.UUID
    challenge_id: uuid.UUID
    user_id: uuid.UUID
    created_at: datetime
    comment: str | None = None
    video_url: str | None = None
    contact_method: str | None = None
    contact_value: str | None = None
    completed: bool = True
    is_completion: bool = False


@dataclass(frozen=True)
class NewSubmission:
    challenge_id: uuid.UUID
    user_id: uuid.UUID
    comment: str | None = None
    video_url: str | None = None
    contact_method: str | None = None
    contact_value: str | None = None
    completed: bool = True
    is_completion: bool = False


@dataclass(frozen=True)
class ChallengeRecord:
    id: uuid.UUID
    week: int
    year: int
    title: str
    description: str | None = None
    tiktok_link: str | None = None
    winner_submission_id: uuid.UUID | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class NewChallenge:
    week: int
    year: int
    title: str
    description: str | None = None
    tiktok_link: str | None = None


class ProfileRepository(Protocol):
    async def get(self, user_id: uuid.UUID) -> ProfileRecord | None: ...

    async def is_admin(self, user_id: uuid.UUID) -> bool: ...

    async def lock(self, user_id: uuid.UUID) -> bool: ...

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
    ) -> bool: ...


class SubmissionRepository(Protocol):
    async def get(self, submission_id: uuid.UUID) -> SubmissionRecord | None: ...

    async def count_for_pair(self, user_id: uuid.UUID, challenge_id: uuid.UUID) -> int: ...

    async def count_created_between(self, user_id: uuid.UUID, start: datetime, end: datetime) -> int: ...

    async def list_for_challenge(
        self, challenge_id: uuid.UUID, *, newest_first: bool = True
    ) -> list[SubmissionRecord]: ...

    async def insert(self, submission: NewSubmission) -> SubmissionRecord: ...

    async def delete(self, submission_id: uuid.UUID) -> int: ...

    async def delete_for_pair(self, user_id: uuid.UUID, challenge_id: uuid.UUID) -> int: ...


class ChallengeRepository(Protocol):
    async def get(self, challenge_id: uuid.UUID) -> ChallengeRecord | None: ...

    async def get_by_week(self, week: int, year: int) -> ChallengeRecord | None: ...

    async def list_for_year(self, year: int) -> list[ChallengeRecord]: ...

    async def insert(self, challenge: NewChallenge) -> ChallengeRecord: ...

    async def update(self, challenge_id: uuid.UUID, changes: dict[str, object]) -> ChallengeRecord | None: ...

    async def delete(self, challenge_id: uuid.UUID) -> bool: ...

    async def set_winner_if_unset(self, challenge_id: uuid.UUID, submission_id: uuid.UUID) -> bool: ...


class Store(Protocol):
    """One unit of work: the three repositories sharing a transaction."""

    profiles: ProfileRepository
    submissions: SubmissionRepository
    challenges: ChallengeRepository

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...

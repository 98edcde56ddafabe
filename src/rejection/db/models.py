"""ORM models for profiles, weekly challenges and challenge submissions.

Table and column names match the schema created by alembic/versions/001_baseline.py.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from rejection.db.base import Base

COMPLETION_INDEX_NAME = "uq_challenge_submissions_completion"
CHALLENGE_WEEK_CONSTRAINT_NAME = "uq_weekly_challenges_week_year"


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


class Profile(Base):
    """One row per authenticated user; ``id`` is owned by the auth provider."""

    __tablename__ = "profiles"
    __table_args__ = (
        CheckConstraint("experience_points >= 0", name="ck_profiles_xp_non_negative"),
        CheckConstraint("challenges_completed >= 0", name="ck_profiles_completed_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True)
    username: Mapped[str | None] = mapped_column(String(64), nullable=True, unique=True)
    display_name: Mapped[str | None] = mapped_column(String(64), nullable=True)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="false")
    experience_points: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    challenges_completed: Mapped[int] = mapped_column(Integer, nullable=False, server_default="0")
    rank_level: Mapped[str] = mapped_column(String(64), nullable=False, server_default="Novice")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=text("NOW()"))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=text("NOW()"))


# ---------------------------------------------------------------------------
# Weekly challenges
# ---------------------------------------------------------------------------


class WeeklyChallenge(Base):
    __tablename__ = "weekly_challenges"
    __table_args__ = (
        UniqueConstraint("week", "year", name=CHALLENGE_WEEK_CONSTRAINT_NAME),
        CheckConstraint("week BETWEEN 1 AND 53", name="ck_weekly_challenges_week_range"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, server_default=text("gen_random_uuid()")
    )
    week: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(String(400), nullable=True)
    tiktok_link: Mapped[str | None] = mapped_column(Text, nullable=True)
    winner_submission_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("challenge_submissions.id", ondelete="SET NULL", use_alter=True),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=text("NOW()"))
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=text("NOW()"))


# ---------------------------------------------------------------------------
# Challenge submissions
# ---------------------------------------------------------------------------


class ChallengeSubmission(Base):
    """A user's proof of participation.

    At most one row per (user_id, challenge_id) has ``is_completion`` set; that
    row is the one credited toward ``profiles.challenges_completed``.
    """

    __tablename__ = "challenge_submissions"
    __table_args__ = (
        Index(
            COMPLETION_INDEX_NAME,
            "user_id",
            "challenge_id",
            unique=True,
            postgresql_where=text("is_completion"),
        ),
        Index("idx_challenge_submissions_user_created", "user_id", "created_at"),
        Index("idx_challenge_submissions_challenge", "challenge_id", "created_at"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, server_default=text("gen_random_uuid()")
    )
    challenge_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("weekly_challenges.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False
    )
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    video_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    contact_method: Mapped[str | None] = mapped_column(String(16), nullable=True)
    contact_value: Mapped[str | None] = mapped_column(String(256), nullable=True)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="true")
    is_completion: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="false")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=text("NOW()"))

"""Baseline: profiles, weekly challenges and challenge submissions.

The partial unique index on (user_id, challenge_id) WHERE is_completion keeps
at most one credited completion per user and challenge.

Revision ID: 001_baseline
Revises: None
Create Date: 2026-10-17
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_baseline"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    # --- Profiles ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS profiles (
            id UUID PRIMARY KEY,
            username VARCHAR(64) UNIQUE,
            display_name VARCHAR(64),
            is_admin BOOLEAN NOT NULL DEFAULT false,
            experience_points INTEGER NOT NULL DEFAULT 0,
            challenges_completed INTEGER NOT NULL DEFAULT 0,
            rank_level VARCHAR(64) NOT NULL DEFAULT 'Novice',
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_profiles_xp_non_negative CHECK (experience_points >= 0),
            CONSTRAINT ck_profiles_completed_non_negative CHECK (challenges_completed >= 0)
        )
    """)

    # --- Weekly Challenges ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS weekly_challenges (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            week INTEGER NOT NULL,
            year INTEGER NOT NULL,
            title VARCHAR(100) NOT NULL,
            description VARCHAR(400),
            tiktok_link TEXT,
            winner_submission_id UUID,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_weekly_challenges_week_year UNIQUE (week, year),
            CONSTRAINT ck_weekly_challenges_week_range CHECK (week BETWEEN 1 AND 53)
        )
    """)

    # --- Challenge Submissions ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS challenge_submissions (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            challenge_id UUID NOT NULL REFERENCES weekly_challenges(id) ON DELETE CASCADE,
            user_id UUID NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            comment TEXT,
            video_url TEXT,
            contact_method VARCHAR(16),
            contact_value VARCHAR(256),
            completed BOOLEAN NOT NULL DEFAULT true,
            is_completion BOOLEAN NOT NULL DEFAULT false,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE UNIQUE INDEX IF NOT EXISTS uq_challenge_submissions_completion
        ON challenge_submissions(user_id, challenge_id)
        WHERE is_completion
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_challenge_submissions_user_created
        ON challenge_submissions(user_id, created_at)
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_challenge_submissions_challenge
        ON challenge_submissions(challenge_id, created_at)
    """)

    op.execute("""
        ALTER TABLE weekly_challenges
        ADD CONSTRAINT weekly_challenges_winner_submission_id_fkey
        FOREIGN KEY (winner_submission_id) REFERENCES challenge_submissions(id) ON DELETE SET NULL
    """)


def downgrade() -> None:
    op.execute("ALTER TABLE weekly_challenges DROP CONSTRAINT IF EXISTS weekly_challenges_winner_submission_id_fkey")
    op.execute("DROP TABLE IF EXISTS challenge_submissions CASCADE")
    op.execute("DROP TABLE IF EXISTS weekly_challenges CASCADE")
    op.execute("DROP TABLE IF EXISTS profiles CASCADE")

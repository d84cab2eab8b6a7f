"""PostgreSQL schema for the engine's tables.

The engine shares the portal's issues, votes, status_updates and
user_badges tables. It needs three constraints the portal schema did not
declare: unique (issue_id, user_id) on votes, unique (user_id, badge_type)
on user_badges, and the escalation_tier column on issues.
"""

from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from structlog import get_logger

logger = get_logger(__name__)

SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS issues (
        id UUID PRIMARY KEY,
        ward_number TEXT NOT NULL,
        created_by UUID NULL,
        vis_score DOUBLE PRECISION NOT NULL DEFAULT 0,
        vote_count INTEGER NOT NULL DEFAULT 0 CHECK (vote_count >= 0),
        support_percentage DOUBLE PRECISION NOT NULL DEFAULT 0,
        escalation_tier TEXT NOT NULL DEFAULT 'none'
            CHECK (escalation_tier IN ('none', 'local', 'state', 'national')),
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at TIMESTAMPTZ NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS votes (
        issue_id UUID NOT NULL REFERENCES issues (id) ON DELETE CASCADE,
        user_id UUID NOT NULL,
        rating INTEGER NOT NULL CHECK (rating BETWEEN 1 AND 5),
        created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        updated_at TIMESTAMPTZ NULL,
        PRIMARY KEY (issue_id, user_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS status_updates (
        id UUID PRIMARY KEY,
        issue_id UUID NOT NULL REFERENCES issues (id) ON DELETE CASCADE,
        status TEXT NOT NULL,
        message TEXT NULL,
        created_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE INDEX IF NOT EXISTS status_updates_issue_idx
        ON status_updates (issue_id, created_at)
    """,
    """
    CREATE TABLE IF NOT EXISTS user_badges (
        user_id UUID NOT NULL,
        badge_type TEXT NOT NULL,
        badge_name TEXT NOT NULL,
        description TEXT NULL,
        earned_at TIMESTAMPTZ NOT NULL DEFAULT now(),
        PRIMARY KEY (user_id, badge_type)
    )
    """,
)


async def create_schema(session_factory: async_sessionmaker[AsyncSession]) -> None:
    """Create the engine's tables if they do not exist."""
    async with session_factory() as session:
        for statement in SCHEMA_STATEMENTS:
            await session.execute(text(statement))
        await session.commit()
    logger.info("vitality_schema_ensured", statements=len(SCHEMA_STATEMENTS))

"""PostgreSQL implementation of BadgeStoreProtocol.

Grants use INSERT ... ON CONFLICT DO NOTHING against the
(user_id, badge_type) primary key, so concurrent grants of the same
badge create exactly one row.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from issue_vitality.application.ports.badge_store import BadgeStoreProtocol
from issue_vitality.domain.models.badge import BadgeGrant
from issue_vitality.infrastructure.adapters.persistence.session import store_operation


class PostgresBadgeStore(BadgeStoreProtocol):
    """Badge store backed by the user_badges table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize with a SQLAlchemy async session factory."""
        self._session_factory = session_factory

    async def grant_badge_if_absent(
        self,
        user_id: UUID,
        badge_type: str,
        name: str,
        description: str,
    ) -> bool:
        """Grant a badge unless the user already holds it."""
        async with store_operation("grant_badge_if_absent"):
            async with self._session_factory() as session:
                result = await session.execute(
                    text("""
                        INSERT INTO user_badges (user_id, badge_type, badge_name, description, earned_at)
                        VALUES (:user_id, :badge_type, :name, :description, now())
                        ON CONFLICT (user_id, badge_type) DO NOTHING
                        RETURNING user_id
                    """),
                    {
                        "user_id": user_id,
                        "badge_type": badge_type,
                        "name": name,
                        "description": description,
                    },
                )
                granted = result.fetchone() is not None
                await session.commit()
        return granted

    async def list_badges(self, user_id: UUID) -> list[BadgeGrant]:
        """List the badges a user holds."""
        async with store_operation("list_badges"):
            async with self._session_factory() as session:
                result = await session.execute(
                    text("""
                        SELECT badge_type, badge_name, description, earned_at
                        FROM user_badges
                        WHERE user_id = :user_id
                        ORDER BY earned_at
                    """),
                    {"user_id": user_id},
                )
                rows = result.fetchall()
        return [
            BadgeGrant(
                user_id=user_id,
                badge_type=row.badge_type,
                name=row.badge_name,
                description=row.description or "",
                granted_at=row.earned_at,
            )
            for row in rows
        ]

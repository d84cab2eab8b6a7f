"""PostgreSQL implementation of StatusHistoryProtocol.

Escalation records share the status_updates table with the portal's
other status changes; they are the rows whose status starts with
"escalated_".
"""

from __future__ import annotations

from uuid import UUID, uuid4

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from issue_vitality.application.ports.status_history import StatusHistoryProtocol
from issue_vitality.domain.models.escalation_tier import EscalationTier
from issue_vitality.domain.models.status_update import StatusUpdate
from issue_vitality.infrastructure.adapters.persistence.session import store_operation

_ESCALATED_PREFIX = "escalated_"


class PostgresStatusHistory(StatusHistoryProtocol):
    """Status history backed by the status_updates table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize with a SQLAlchemy async session factory."""
        self._session_factory = session_factory

    async def append_status_update(
        self,
        issue_id: UUID,
        tier: EscalationTier,
        message: str,
    ) -> StatusUpdate:
        """Append an escalation record."""
        update_id = uuid4()
        async with store_operation("append_status_update", issue_id):
            async with self._session_factory() as session:
                result = await session.execute(
                    text("""
                        INSERT INTO status_updates (id, issue_id, status, message, created_at)
                        VALUES (:id, :issue_id, :status, :message, now())
                        RETURNING created_at
                    """),
                    {
                        "id": update_id,
                        "issue_id": issue_id,
                        "status": tier.status_code,
                        "message": message,
                    },
                )
                created_at = result.scalar_one()
                await session.commit()
        return StatusUpdate(
            update_id=update_id,
            issue_id=issue_id,
            tier=tier,
            message=message,
            created_at=created_at,
        )

    async def list_status_updates(self, issue_id: UUID) -> list[StatusUpdate]:
        """List an issue's escalation records in append order."""
        async with store_operation("list_status_updates", issue_id):
            async with self._session_factory() as session:
                result = await session.execute(
                    text("""
                        SELECT id, status, message, created_at
                        FROM status_updates
                        WHERE issue_id = :issue_id AND status LIKE 'escalated\\_%'
                        ORDER BY created_at, id
                    """),
                    {"issue_id": issue_id},
                )
                rows = result.fetchall()
        return [
            StatusUpdate(
                update_id=row.id,
                issue_id=issue_id,
                tier=EscalationTier.parse(row.status.removeprefix(_ESCALATED_PREFIX)),
                message=row.message or "",
                created_at=row.created_at,
            )
            for row in rows
        ]

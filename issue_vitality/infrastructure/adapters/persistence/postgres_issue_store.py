"""PostgreSQL implementation of IssueStoreProtocol.

The tier update is conditional on rank inside the UPDATE itself, so
writers in different processes can never lower a tier or raise it twice:
only the statement that actually changed the row reports success.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from issue_vitality.application.ports.issue_store import IssueStoreProtocol
from issue_vitality.domain.errors.issue import IssueNotFoundError
from issue_vitality.domain.models.escalation_tier import EscalationTier
from issue_vitality.domain.models.issue_aggregate import (
    AggregateUpdate,
    IssueAggregate,
    IssueMeta,
)
from issue_vitality.infrastructure.adapters.persistence.session import store_operation

_AGGREGATE_COLUMNS = """
    id, created_at, ward_number, vote_count, vis_score,
    support_percentage, escalation_tier, updated_at
"""

_TIER_RANK_SQL = """
    CASE escalation_tier
        WHEN 'none' THEN 0
        WHEN 'local' THEN 1
        WHEN 'state' THEN 2
        WHEN 'national' THEN 3
    END
"""


def _row_to_aggregate(row: Any) -> IssueAggregate:
    return IssueAggregate(
        issue_id=row.id,
        created_at=row.created_at,
        ward_id=row.ward_number,
        vote_count=row.vote_count,
        vitality_score=float(row.vis_score),
        support_percentage=float(row.support_percentage),
        escalation_tier=EscalationTier.parse(row.escalation_tier),
        updated_at=row.updated_at,
    )


class PostgresIssueStore(IssueStoreProtocol):
    """Issue store backed by the issues table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize with a SQLAlchemy async session factory."""
        self._session_factory = session_factory

    async def get_issue_meta(self, issue_id: UUID) -> IssueMeta | None:
        """Get the immutable facts of an issue."""
        async with store_operation("get_issue_meta", issue_id):
            async with self._session_factory() as session:
                result = await session.execute(
                    text("""
                        SELECT id, created_at, ward_number, created_by
                        FROM issues
                        WHERE id = :issue_id
                    """),
                    {"issue_id": issue_id},
                )
                row = result.fetchone()
        if row is None:
            return None
        return IssueMeta(
            issue_id=row.id,
            created_at=row.created_at,
            ward_id=row.ward_number,
            created_by=row.created_by,
        )

    async def get_aggregate(self, issue_id: UUID) -> IssueAggregate | None:
        """Get the current aggregate of an issue."""
        async with store_operation("get_aggregate", issue_id):
            async with self._session_factory() as session:
                result = await session.execute(
                    text(f"SELECT {_AGGREGATE_COLUMNS} FROM issues WHERE id = :issue_id"),
                    {"issue_id": issue_id},
                )
                row = result.fetchone()
        return _row_to_aggregate(row) if row is not None else None

    async def write_aggregate(
        self,
        issue_id: UUID,
        update: AggregateUpdate,
    ) -> IssueAggregate:
        """Write vote_count, vis_score and support_percentage in one UPDATE."""
        async with store_operation("write_aggregate", issue_id):
            async with self._session_factory() as session:
                result = await session.execute(
                    text(f"""
                        UPDATE issues
                        SET vote_count = :vote_count,
                            vis_score = :vitality_score,
                            support_percentage = :support_percentage,
                            updated_at = now()
                        WHERE id = :issue_id
                        RETURNING {_AGGREGATE_COLUMNS}
                    """),
                    {
                        "issue_id": issue_id,
                        "vote_count": update.vote_count,
                        "vitality_score": update.vitality_score,
                        "support_percentage": update.support_percentage,
                    },
                )
                row = result.fetchone()
                await session.commit()
        if row is None:
            raise IssueNotFoundError(issue_id)
        return _row_to_aggregate(row)

    async def get_escalation_tier(self, issue_id: UUID) -> EscalationTier:
        """Get the stored escalation tier."""
        async with store_operation("get_escalation_tier", issue_id):
            async with self._session_factory() as session:
                result = await session.execute(
                    text("SELECT escalation_tier FROM issues WHERE id = :issue_id"),
                    {"issue_id": issue_id},
                )
                row = result.fetchone()
        if row is None:
            raise IssueNotFoundError(issue_id)
        return EscalationTier.parse(row.escalation_tier)

    async def set_escalation_tier(self, issue_id: UUID, tier: EscalationTier) -> bool:
        """Raise the stored tier only if `tier` outranks it.

        SQL Pattern:
            UPDATE issues SET escalation_tier = :tier
            WHERE id = :issue_id AND <rank of stored tier> < :rank
        """
        async with store_operation("set_escalation_tier", issue_id):
            async with self._session_factory() as session:
                result = await session.execute(
                    text(f"""
                        UPDATE issues
                        SET escalation_tier = :tier, updated_at = now()
                        WHERE id = :issue_id AND {_TIER_RANK_SQL} < :rank
                        RETURNING id
                    """),
                    {"issue_id": issue_id, "tier": tier.value, "rank": tier.rank},
                )
                raised = result.fetchone() is not None
                if not raised:
                    exists = await session.execute(
                        text("SELECT 1 FROM issues WHERE id = :issue_id"),
                        {"issue_id": issue_id},
                    )
                    if exists.fetchone() is None:
                        raise IssueNotFoundError(issue_id)
                await session.commit()
        return raised

    async def list_aggregates(
        self,
        ward_id: str | None = None,
    ) -> list[IssueAggregate]:
        """List aggregates, optionally filtered to one ward."""
        async with store_operation("list_aggregates"):
            async with self._session_factory() as session:
                if ward_id is None:
                    result = await session.execute(
                        text(f"SELECT {_AGGREGATE_COLUMNS} FROM issues")
                    )
                else:
                    result = await session.execute(
                        text(
                            f"SELECT {_AGGREGATE_COLUMNS} FROM issues "
                            "WHERE ward_number = :ward_id"
                        ),
                        {"ward_id": ward_id},
                    )
                rows = result.fetchall()
        return [_row_to_aggregate(row) for row in rows]

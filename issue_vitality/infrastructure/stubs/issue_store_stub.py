"""In-memory stub for IssueStoreProtocol.

Holds issue meta and aggregates in dictionaries. The tier update mirrors
the conditional SQL update of the PostgreSQL adapter: it only writes when
the new tier outranks the stored one.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from uuid import UUID

from issue_vitality.application.ports.issue_store import IssueStoreProtocol
from issue_vitality.application.ports.time_authority import TimeAuthorityProtocol
from issue_vitality.domain.errors.issue import IssueNotFoundError
from issue_vitality.domain.models.escalation_tier import EscalationTier
from issue_vitality.domain.models.issue_aggregate import (
    AggregateUpdate,
    IssueAggregate,
    IssueMeta,
)
from issue_vitality.infrastructure.stubs.store_faults import StoreFaultInjector


class IssueStoreStub(IssueStoreProtocol):
    """In-memory issue store.

    Attributes:
        faults: Failure switches, see StoreFaultInjector.
        write_count: Number of successful write_aggregate calls.
    """

    def __init__(self, time_authority: TimeAuthorityProtocol | None = None) -> None:
        """Initialize empty stub."""
        self._time = time_authority
        self._meta: dict[UUID, IssueMeta] = {}
        self._aggregates: dict[UUID, IssueAggregate] = {}
        self.faults = StoreFaultInjector()
        self.write_count = 0

    def _now(self) -> datetime:
        if self._time is None:
            return datetime.now(timezone.utc)
        return self._time.utcnow()

    def _require(self, issue_id: UUID) -> IssueAggregate:
        aggregate = self._aggregates.get(issue_id)
        if aggregate is None:
            raise IssueNotFoundError(issue_id)
        return aggregate

    async def get_issue_meta(self, issue_id: UUID) -> IssueMeta | None:
        """Get the immutable facts of an issue."""
        await asyncio.sleep(0)
        self.faults.check("get_issue_meta", issue_id)
        return self._meta.get(issue_id)

    async def get_aggregate(self, issue_id: UUID) -> IssueAggregate | None:
        """Get the current aggregate of an issue."""
        await asyncio.sleep(0)
        self.faults.check("get_aggregate", issue_id)
        return self._aggregates.get(issue_id)

    async def write_aggregate(
        self,
        issue_id: UUID,
        update: AggregateUpdate,
    ) -> IssueAggregate:
        """Atomically write the recomputed aggregate fields."""
        await asyncio.sleep(0)
        self.faults.check("write_aggregate", issue_id)
        aggregate = self._require(issue_id).apply(update, updated_at=self._now())
        self._aggregates[issue_id] = aggregate
        self.write_count += 1
        return aggregate

    async def get_escalation_tier(self, issue_id: UUID) -> EscalationTier:
        """Get the stored escalation tier."""
        await asyncio.sleep(0)
        self.faults.check("get_escalation_tier", issue_id)
        return self._require(issue_id).escalation_tier

    async def set_escalation_tier(self, issue_id: UUID, tier: EscalationTier) -> bool:
        """Raise the stored escalation tier if `tier` outranks it."""
        await asyncio.sleep(0)
        self.faults.check("set_escalation_tier", issue_id)
        aggregate = self._require(issue_id)
        if not tier.outranks(aggregate.escalation_tier):
            return False
        self._aggregates[issue_id] = aggregate.with_tier(tier)
        return True

    async def list_aggregates(
        self,
        ward_id: str | None = None,
    ) -> list[IssueAggregate]:
        """List aggregates, optionally filtered to one ward."""
        await asyncio.sleep(0)
        self.faults.check("list_aggregates")
        return [
            aggregate
            for aggregate in self._aggregates.values()
            if ward_id is None or aggregate.ward_id == ward_id
        ]

    # Test helper methods

    def add_issue(self, meta: IssueMeta) -> IssueAggregate:
        """Register an issue with a zeroed aggregate.

        Call this in tests before voting on or recomputing an issue.
        """
        self._meta[meta.issue_id] = meta
        aggregate = IssueAggregate(
            issue_id=meta.issue_id,
            created_at=meta.created_at,
            ward_id=meta.ward_id,
        )
        self._aggregates[meta.issue_id] = aggregate
        return aggregate

    def force_aggregate(self, aggregate: IssueAggregate) -> None:
        """Overwrite an aggregate directly (e.g. to seed support or tier)."""
        self._aggregates[aggregate.issue_id] = aggregate

    def reset(self) -> None:
        """Reset all stored data and failure switches."""
        self._meta.clear()
        self._aggregates.clear()
        self.faults.clear()
        self.write_count = 0

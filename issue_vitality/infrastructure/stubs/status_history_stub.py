"""In-memory stub for StatusHistoryProtocol."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from uuid import UUID, uuid4

from issue_vitality.application.ports.status_history import StatusHistoryProtocol
from issue_vitality.application.ports.time_authority import TimeAuthorityProtocol
from issue_vitality.domain.models.escalation_tier import EscalationTier
from issue_vitality.domain.models.status_update import StatusUpdate
from issue_vitality.infrastructure.stubs.store_faults import StoreFaultInjector


class StatusHistoryStub(StatusHistoryProtocol):
    """Append-only in-memory status history.

    Attributes:
        faults: Failure switches, see StoreFaultInjector.
    """

    def __init__(self, time_authority: TimeAuthorityProtocol | None = None) -> None:
        """Initialize empty stub."""
        self._time = time_authority
        self._updates: list[StatusUpdate] = []
        self.faults = StoreFaultInjector()

    async def append_status_update(
        self,
        issue_id: UUID,
        tier: EscalationTier,
        message: str,
    ) -> StatusUpdate:
        """Append an escalation record."""
        await asyncio.sleep(0)
        self.faults.check("append_status_update", issue_id)
        created_at = (
            self._time.utcnow() if self._time is not None else datetime.now(timezone.utc)
        )
        update = StatusUpdate(
            update_id=uuid4(),
            issue_id=issue_id,
            tier=tier,
            message=message,
            created_at=created_at,
        )
        self._updates.append(update)
        return update

    async def list_status_updates(self, issue_id: UUID) -> list[StatusUpdate]:
        """List an issue's escalation records in append order."""
        await asyncio.sleep(0)
        self.faults.check("list_status_updates", issue_id)
        return [update for update in self._updates if update.issue_id == issue_id]

    # Test helper methods

    def tiers_for(self, issue_id: UUID) -> list[EscalationTier]:
        """Tiers recorded for an issue, in append order."""
        return [update.tier for update in self._updates if update.issue_id == issue_id]

    def reset(self) -> None:
        """Reset all stored data and failure switches."""
        self._updates.clear()
        self.faults.clear()

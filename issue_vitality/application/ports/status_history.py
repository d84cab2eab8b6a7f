"""Status history port.

Append-only audit trail of escalation transitions. Records are never
mutated or deleted.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol
from uuid import UUID

from issue_vitality.domain.models.escalation_tier import EscalationTier
from issue_vitality.domain.models.status_update import StatusUpdate


class StatusHistoryProtocol(Protocol):
    """Repository protocol for escalation status records.

    Raises:
        TransientStoreError: From any method when the store fails.
    """

    @abstractmethod
    async def append_status_update(
        self,
        issue_id: UUID,
        tier: EscalationTier,
        message: str,
    ) -> StatusUpdate:
        """Append an escalation record.

        Args:
            issue_id: The escalated issue.
            tier: The tier the issue entered.
            message: Human-readable reason.

        Returns:
            The stored record.
        """
        ...

    @abstractmethod
    async def list_status_updates(self, issue_id: UUID) -> list[StatusUpdate]:
        """List an issue's escalation records in append order."""
        ...

"""Issue store port.

The issue store holds each issue's immutable meta and its mutable vitality
aggregate. Only the aggregate updater writes the aggregate, and only the
escalation state machine writes the tier, both under the per-issue lock.

Developer Golden Rules:
1. ATOMIC WRITE - write_aggregate changes vote_count, vitality_score and
   support_percentage together or not at all
2. MONOTONIC TIER - set_escalation_tier never lowers a stored tier
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol
from uuid import UUID

from issue_vitality.domain.models.escalation_tier import EscalationTier
from issue_vitality.domain.models.issue_aggregate import (
    AggregateUpdate,
    IssueAggregate,
    IssueMeta,
)


class IssueStoreProtocol(Protocol):
    """Repository protocol for issue meta and aggregates.

    Raises:
        TransientStoreError: From any method when the store fails.
    """

    @abstractmethod
    async def get_issue_meta(self, issue_id: UUID) -> IssueMeta | None:
        """Get the immutable facts of an issue.

        Returns:
            IssueMeta, or None if the issue does not exist.
        """
        ...

    @abstractmethod
    async def get_aggregate(self, issue_id: UUID) -> IssueAggregate | None:
        """Get the current aggregate of an issue.

        Returns:
            IssueAggregate, or None if the issue does not exist.
        """
        ...

    @abstractmethod
    async def write_aggregate(
        self,
        issue_id: UUID,
        update: AggregateUpdate,
    ) -> IssueAggregate:
        """Atomically write the recomputed aggregate fields.

        Args:
            issue_id: The issue to update.
            update: vote_count, vitality_score and support_percentage.

        Returns:
            The aggregate as stored after the write.

        Raises:
            IssueNotFoundError: If the issue does not exist.
        """
        ...

    @abstractmethod
    async def get_escalation_tier(self, issue_id: UUID) -> EscalationTier:
        """Get the stored escalation tier.

        Raises:
            IssueNotFoundError: If the issue does not exist.
        """
        ...

    @abstractmethod
    async def set_escalation_tier(self, issue_id: UUID, tier: EscalationTier) -> bool:
        """Raise the stored escalation tier.

        Args:
            issue_id: The issue to update.
            tier: The new tier.

        Returns:
            True if the tier was raised, False if the stored tier already
            ranks at or above `tier` (nothing is written).

        Raises:
            IssueNotFoundError: If the issue does not exist.
        """
        ...

    @abstractmethod
    async def list_aggregates(
        self,
        ward_id: str | None = None,
    ) -> list[IssueAggregate]:
        """List aggregates, optionally filtered to one ward.

        Returns:
            Aggregates in no particular order.
        """
        ...

"""Issue escalation event payloads.

An IssueEscalatedEvent is published to connected observers each time an
issue enters a higher escalation tier.

Developer Golden Rules:
1. USE to_dict() - Never use asdict() for event serialization
2. INCLUDE schema_version - All event payloads carry schema_version
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

from issue_vitality.domain.models.escalation_tier import EscalationTier

ISSUE_ESCALATED_EVENT_TYPE: str = "escalation"

ESCALATION_EVENT_SCHEMA_VERSION: int = 1


@dataclass(frozen=True, eq=True)
class IssueEscalatedEvent:
    """Event payload for an escalation tier transition.

    Attributes:
        event_id: Unique identifier for this event.
        issue_id: The escalated issue.
        tier: The tier the issue entered.
        previous_tier: The tier the issue held before.
        support_percentage: Support at the moment of the transition.
        occurred_at: When the transition fired (UTC).
        schema_version: Payload schema version.
    """

    event_id: UUID
    issue_id: UUID
    tier: EscalationTier
    previous_tier: EscalationTier
    support_percentage: float
    occurred_at: datetime
    schema_version: int = ESCALATION_EVENT_SCHEMA_VERSION

    @property
    def event_type(self) -> str:
        """Event type key used by the fan-out."""
        return ISSUE_ESCALATED_EVENT_TYPE

    def to_dict(self) -> dict[str, Any]:
        """Convert payload to dict for publication.

        Returns:
            Dict representation with string UUIDs and ISO timestamps.
        """
        return {
            "type": ISSUE_ESCALATED_EVENT_TYPE,
            "event_id": str(self.event_id),
            "issue_id": str(self.issue_id),
            "tier": self.tier.value,
            "previous_tier": self.previous_tier.value,
            "support_percentage": self.support_percentage,
            "occurred_at": self.occurred_at.isoformat(),
            "schema_version": self.schema_version,
        }

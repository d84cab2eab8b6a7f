"""Status history record for escalations.

StatusUpdate records are append-only. One is written for each tier an
issue enters and is never changed or removed afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from issue_vitality.domain.models.escalation_tier import EscalationTier


@dataclass(frozen=True, eq=True)
class StatusUpdate:
    """An escalation entry in an issue's status history.

    Attributes:
        update_id: Unique identifier for this record.
        issue_id: The escalated issue.
        tier: The tier the issue entered.
        message: Human-readable reason shown to citizens and staff.
        created_at: When the record was appended (UTC).
    """

    update_id: UUID
    issue_id: UUID
    tier: EscalationTier
    message: str
    created_at: datetime

    def __post_init__(self) -> None:
        """Reject records for the NONE tier.

        Raises:
            ValueError: If tier is NONE.
        """
        if self.tier is EscalationTier.NONE:
            raise ValueError("status updates are only recorded for escalated tiers")

    @property
    def status(self) -> str:
        """Status code in the portal's status vocabulary (e.g. escalated_state)."""
        # NONE is rejected in __post_init__
        return self.tier.status_code or ""

    def to_dict(self) -> dict:
        """Serialize to dictionary for API payloads."""
        return {
            "update_id": str(self.update_id),
            "issue_id": str(self.issue_id),
            "tier": self.tier.value,
            "status": self.status,
            "message": self.message,
            "created_at": self.created_at.isoformat(),
        }

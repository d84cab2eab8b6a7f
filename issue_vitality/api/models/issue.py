"""Issue vitality API response models."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from pydantic import BaseModel, Field, PlainSerializer

from issue_vitality.domain.models.issue_aggregate import IssueAggregate
from issue_vitality.domain.models.status_update import StatusUpdate

# ISO 8601 with Z suffix
DateTimeWithZ = Annotated[
    datetime,
    PlainSerializer(
        lambda v: v.isoformat().replace("+00:00", "Z") if v else None, return_type=str
    ),
]


class IssueVitalityResponse(BaseModel):
    """An issue's vitality aggregate.

    Attributes:
        issue_id: The issue.
        ward_id: The issue's ward.
        vote_count: Distinct voters.
        vitality_score: Composite score (0..157).
        support_percentage: Share of the ward that voted, not clamped.
        escalation_tier: none, local, state or national.
        created_at: Issue creation time.
        updated_at: Last aggregate write.
    """

    issue_id: UUID
    ward_id: str
    vote_count: int = Field(ge=0)
    vitality_score: float = Field(ge=0)
    support_percentage: float = Field(ge=0)
    escalation_tier: str
    created_at: DateTimeWithZ
    updated_at: Optional[DateTimeWithZ] = None

    @classmethod
    def from_aggregate(cls, aggregate: IssueAggregate) -> IssueVitalityResponse:
        """Build the response from a domain aggregate."""
        return cls(
            issue_id=aggregate.issue_id,
            ward_id=aggregate.ward_id,
            vote_count=aggregate.vote_count,
            vitality_score=aggregate.vitality_score,
            support_percentage=aggregate.support_percentage,
            escalation_tier=aggregate.escalation_tier.value,
            created_at=aggregate.created_at,
            updated_at=aggregate.updated_at,
        )


class IssueListResponse(BaseModel):
    """A ranked list of issues."""

    issues: list[IssueVitalityResponse]
    count: int = Field(ge=0)


class StatusUpdateResponse(BaseModel):
    """One escalation record."""

    update_id: UUID
    tier: str
    status: str
    message: str
    created_at: DateTimeWithZ

    @classmethod
    def from_status_update(cls, update: StatusUpdate) -> StatusUpdateResponse:
        """Build the response from a domain record."""
        return cls(
            update_id=update.update_id,
            tier=update.tier.value,
            status=update.status,
            message=update.message,
            created_at=update.created_at,
        )


class StatusHistoryResponse(BaseModel):
    """An issue's escalation history in append order."""

    issue_id: UUID
    updates: list[StatusUpdateResponse]

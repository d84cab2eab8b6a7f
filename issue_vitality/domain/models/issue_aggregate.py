"""Issue aggregate domain models.

This module defines the summary the engine maintains for each issue:
- IssueMeta: Immutable facts about an issue (creation time, ward, creator)
- AggregateUpdate: The fields one recompute writes together
- IssueAggregate: The full persisted summary, including escalation tier

The aggregate is written only by the aggregate updater. Vote count,
vitality score and support percentage always change together.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID

from issue_vitality.domain.errors.invariant import NegativeVoteCountError
from issue_vitality.domain.models.escalation_tier import EscalationTier


@dataclass(frozen=True, eq=True)
class IssueMeta:
    """Immutable facts about an issue that scoring depends on.

    Attributes:
        issue_id: Opaque issue identifier.
        created_at: Creation timestamp (UTC timezone-aware), drives time decay.
        ward_id: Ward whose population is the support denominator.
        created_by: Creator's user id, or None for system-filed issues.
    """

    issue_id: UUID
    created_at: datetime
    ward_id: str
    created_by: Optional[UUID] = field(default=None)

    def __post_init__(self) -> None:
        """Validate meta fields.

        Raises:
            ValueError: If created_at is naive or ward_id is empty.
        """
        if self.created_at.tzinfo is None:
            raise ValueError("created_at must be timezone-aware (UTC)")
        if not self.ward_id:
            raise ValueError("ward_id must not be empty")


@dataclass(frozen=True, eq=True)
class AggregateUpdate:
    """Fields written atomically by one recompute.

    Attributes:
        vote_count: Count of distinct voters.
        vitality_score: Composite score, non-negative.
        support_percentage: Share of the ward that voted, in percent.
    """

    vote_count: int
    vitality_score: float
    support_percentage: float

    def __post_init__(self) -> None:
        """Reject negative values.

        Raises:
            NegativeVoteCountError: If vote_count is negative.
            ValueError: If score or percentage is negative.
        """
        if self.vote_count < 0:
            raise NegativeVoteCountError(self.vote_count)
        if self.vitality_score < 0:
            raise ValueError(
                f"vitality_score must be non-negative, got {self.vitality_score}"
            )
        if self.support_percentage < 0:
            raise ValueError(
                f"support_percentage must be non-negative, got {self.support_percentage}"
            )


@dataclass(frozen=True, eq=True)
class IssueAggregate:
    """Persisted vitality summary of an issue.

    Attributes:
        issue_id: Opaque issue identifier.
        created_at: Issue creation timestamp.
        ward_id: The issue's ward.
        vote_count: Count of distinct voters.
        vitality_score: Composite score.
        support_percentage: Share of the ward that voted, in percent.
        escalation_tier: Highest tier ever reached; never lowered.
        updated_at: When the aggregate was last written, if ever.
    """

    issue_id: UUID
    created_at: datetime
    ward_id: str
    vote_count: int = 0
    vitality_score: float = 0.0
    support_percentage: float = 0.0
    escalation_tier: EscalationTier = EscalationTier.NONE
    updated_at: Optional[datetime] = None

    def apply(self, update: AggregateUpdate, updated_at: datetime) -> IssueAggregate:
        """Return a copy with the recomputed fields applied.

        The escalation tier is carried over untouched.

        Args:
            update: Freshly computed fields.
            updated_at: Write timestamp.

        Returns:
            The updated aggregate.
        """
        return IssueAggregate(
            issue_id=self.issue_id,
            created_at=self.created_at,
            ward_id=self.ward_id,
            vote_count=update.vote_count,
            vitality_score=update.vitality_score,
            support_percentage=update.support_percentage,
            escalation_tier=self.escalation_tier,
            updated_at=updated_at,
        )

    def with_tier(self, tier: EscalationTier) -> IssueAggregate:
        """Return a copy carrying a new escalation tier."""
        return IssueAggregate(
            issue_id=self.issue_id,
            created_at=self.created_at,
            ward_id=self.ward_id,
            vote_count=self.vote_count,
            vitality_score=self.vitality_score,
            support_percentage=self.support_percentage,
            escalation_tier=tier,
            updated_at=self.updated_at,
        )

    def to_dict(self) -> dict:
        """Serialize to dictionary for events and API payloads."""
        return {
            "issue_id": str(self.issue_id),
            "created_at": self.created_at.isoformat(),
            "ward_id": self.ward_id,
            "vote_count": self.vote_count,
            "vitality_score": self.vitality_score,
            "support_percentage": self.support_percentage,
            "escalation_tier": self.escalation_tier.value,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

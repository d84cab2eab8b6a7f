"""Domain models for the Issue Vitality engine."""

from issue_vitality.domain.models.badge import (
    VOICE_HERO_BADGE,
    BadgeDefinition,
    BadgeGrant,
)
from issue_vitality.domain.models.escalation_tier import ESCALATED_TIERS, EscalationTier
from issue_vitality.domain.models.issue_aggregate import (
    AggregateUpdate,
    IssueAggregate,
    IssueMeta,
)
from issue_vitality.domain.models.status_update import StatusUpdate
from issue_vitality.domain.models.vote import RatingSample, Vote

__all__: list[str] = [
    "AggregateUpdate",
    "BadgeDefinition",
    "BadgeGrant",
    "ESCALATED_TIERS",
    "EscalationTier",
    "IssueAggregate",
    "IssueMeta",
    "RatingSample",
    "StatusUpdate",
    "VOICE_HERO_BADGE",
    "Vote",
]

"""Badge API response models."""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, Field

from issue_vitality.api.models.issue import DateTimeWithZ
from issue_vitality.domain.models.badge import BadgeGrant


class BadgeResponse(BaseModel):
    """One badge held by a user."""

    badge_type: str
    name: str
    description: str
    granted_at: DateTimeWithZ

    @classmethod
    def from_grant(cls, grant: BadgeGrant) -> BadgeResponse:
        """Build the response from a stored grant."""
        return cls(
            badge_type=grant.badge_type,
            name=grant.name,
            description=grant.description,
            granted_at=grant.granted_at,
        )


class BadgeListResponse(BaseModel):
    """Badges held by one user, oldest grant first."""

    user_id: UUID
    badges: list[BadgeResponse]
    count: int = Field(ge=0)

"""Badge domain models.

A badge is granted at most once per (user_id, badge_type). Re-evaluating
a condition the user already satisfies never creates a second grant.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, eq=True)
class BadgeDefinition:
    """Static description of a badge.

    Attributes:
        badge_type: Stable machine identifier, unique per user.
        name: Display name.
        description: Why the badge is awarded.
    """

    badge_type: str
    name: str
    description: str


@dataclass(frozen=True, eq=True)
class BadgeGrant:
    """A badge held by a user.

    Attributes:
        user_id: The holder.
        badge_type: Which badge.
        name: Display name at grant time.
        description: Description at grant time.
        granted_at: When the badge was granted (UTC).
    """

    user_id: UUID
    badge_type: str
    name: str
    description: str
    granted_at: datetime


VOICE_HERO_BADGE = BadgeDefinition(
    badge_type="voice_hero",
    name="Voice Hero",
    description="Created an issue with 20%+ community support",
)

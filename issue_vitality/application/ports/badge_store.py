"""Badge store port.

Badges are granted with an atomic check-and-insert. Granting a badge the
user already holds is a no-op, never an error.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Protocol
from uuid import UUID

from issue_vitality.domain.models.badge import BadgeGrant


class BadgeStoreProtocol(Protocol):
    """Repository protocol for user badges.

    Implementations must make grant_badge_if_absent atomic (for example a
    unique constraint on (user_id, badge_type) with insert-or-ignore), not
    a read followed by a separate insert.

    Raises:
        TransientStoreError: From any method when the store fails.
    """

    @abstractmethod
    async def grant_badge_if_absent(
        self,
        user_id: UUID,
        badge_type: str,
        name: str,
        description: str,
    ) -> bool:
        """Grant a badge unless the user already holds it.

        Returns:
            True if a new grant was created, False if it already existed.
        """
        ...

    @abstractmethod
    async def list_badges(self, user_id: UUID) -> list[BadgeGrant]:
        """List the badges a user holds."""
        ...

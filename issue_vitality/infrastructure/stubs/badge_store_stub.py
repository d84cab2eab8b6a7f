"""In-memory stub for BadgeStoreProtocol.

Simulates the unique (user_id, badge_type) constraint. The check and the
insert happen without yielding to the event loop in between, so they are
atomic the way INSERT ... ON CONFLICT DO NOTHING is.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from uuid import UUID

from issue_vitality.application.ports.badge_store import BadgeStoreProtocol
from issue_vitality.application.ports.time_authority import TimeAuthorityProtocol
from issue_vitality.domain.models.badge import BadgeGrant
from issue_vitality.infrastructure.stubs.store_faults import StoreFaultInjector


class BadgeStoreStub(BadgeStoreProtocol):
    """In-memory badge store keyed by (user_id, badge_type).

    Attributes:
        faults: Failure switches, see StoreFaultInjector.
    """

    def __init__(self, time_authority: TimeAuthorityProtocol | None = None) -> None:
        """Initialize empty stub."""
        self._time = time_authority
        self._grants: dict[tuple[UUID, str], BadgeGrant] = {}
        self.faults = StoreFaultInjector()

    async def grant_badge_if_absent(
        self,
        user_id: UUID,
        badge_type: str,
        name: str,
        description: str,
    ) -> bool:
        """Grant a badge unless the user already holds it."""
        await asyncio.sleep(0)
        self.faults.check("grant_badge_if_absent")
        key = (user_id, badge_type)
        if key in self._grants:
            return False
        granted_at = (
            self._time.utcnow() if self._time is not None else datetime.now(timezone.utc)
        )
        self._grants[key] = BadgeGrant(
            user_id=user_id,
            badge_type=badge_type,
            name=name,
            description=description,
            granted_at=granted_at,
        )
        return True

    async def list_badges(self, user_id: UUID) -> list[BadgeGrant]:
        """List the badges a user holds."""
        await asyncio.sleep(0)
        self.faults.check("list_badges")
        return [grant for (holder, _), grant in self._grants.items() if holder == user_id]

    # Test helper methods

    def grant_count(self, user_id: UUID | None = None) -> int:
        """Count stored grants, optionally for one user."""
        if user_id is None:
            return len(self._grants)
        return sum(1 for holder, _ in self._grants if holder == user_id)

    def reset(self) -> None:
        """Reset all stored data and failure switches."""
        self._grants.clear()
        self.faults.clear()

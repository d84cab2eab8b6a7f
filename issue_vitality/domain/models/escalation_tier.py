"""Escalation tier model.

An issue earns administrative attention in four ordered tiers:

    NONE < LOCAL < STATE < NATIONAL

Tiers only ever move upward for a given issue. The numeric rank drives
every comparison so the order never depends on string values.
"""

from __future__ import annotations

from enum import Enum


class EscalationTier(Enum):
    """Administrative attention level an issue has earned.

    Tiers:
        NONE: Not escalated
        LOCAL: Local representatives notified
        STATE: State-level attention
        NATIONAL: National-level attention
    """

    NONE = "none"
    LOCAL = "local"
    STATE = "state"
    NATIONAL = "national"

    @property
    def rank(self) -> int:
        """Position of this tier in the total order (NONE is 0)."""
        return _TIER_ORDER.index(self)

    @property
    def status_code(self) -> str | None:
        """Status-history code recorded when an issue enters this tier.

        Returns:
            "escalated_<tier>" for escalated tiers, None for NONE.
        """
        if self is EscalationTier.NONE:
            return None
        return f"escalated_{self.value}"

    def outranks(self, other: EscalationTier) -> bool:
        """Check if this tier ranks strictly higher than another.

        Args:
            other: The tier to compare against.

        Returns:
            True if this tier is strictly higher.
        """
        return self.rank > other.rank

    @classmethod
    def parse(cls, value: str | None) -> EscalationTier:
        """Parse a stored tier value, treating missing values as NONE.

        Args:
            value: Stored tier string (case-insensitive) or None.

        Returns:
            The matching tier.

        Raises:
            ValueError: If the value names no tier.
        """
        if value is None or value == "":
            return cls.NONE
        return cls(value.lower())


_TIER_ORDER: tuple[EscalationTier, ...] = (
    EscalationTier.NONE,
    EscalationTier.LOCAL,
    EscalationTier.STATE,
    EscalationTier.NATIONAL,
)

ESCALATED_TIERS: frozenset[EscalationTier] = frozenset(
    {EscalationTier.LOCAL, EscalationTier.STATE, EscalationTier.NATIONAL}
)

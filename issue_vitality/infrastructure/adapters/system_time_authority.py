"""System clock implementation of TimeAuthorityProtocol."""

from __future__ import annotations

import time
from datetime import datetime, timezone

from issue_vitality.application.ports.time_authority import TimeAuthorityProtocol


class SystemTimeAuthority(TimeAuthorityProtocol):
    """Time authority backed by the host clock.

    All wall-clock values are UTC and timezone-aware.
    """

    def now(self) -> datetime:
        """Return current time (UTC, timezone-aware)."""
        return datetime.now(timezone.utc)

    def utcnow(self) -> datetime:
        """Return current UTC time (timezone-aware)."""
        return datetime.now(timezone.utc)

    def monotonic(self) -> float:
        """Return the host monotonic clock."""
        return time.monotonic()

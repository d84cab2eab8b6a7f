"""FakeTimeAuthority - controllable clock for deterministic tests.

The vitality score's recency term and the recompute duration metric both
read the injected clock, so tests freeze and advance it explicitly.

Usage:
    >>> fake_time = FakeTimeAuthority(frozen_at=datetime(2026, 1, 15, tzinfo=timezone.utc))
    >>> fake_time.advance(seconds=3600)
    >>> fake_time.utcnow().hour
    1

The monotonic clock moves only with advance(); set_time() jumps the wall
clock without touching it.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from issue_vitality.application.ports.time_authority import TimeAuthorityProtocol

DEFAULT_FROZEN_AT = datetime(2026, 1, 1, 0, 0, 0, tzinfo=timezone.utc)


def _aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)


class FakeTimeAuthority(TimeAuthorityProtocol):
    """Time authority that only moves when a test moves it."""

    def __init__(
        self,
        frozen_at: datetime | None = None,
        *,
        start_monotonic: float = 0.0,
    ) -> None:
        """Initialize the fake clock.

        Args:
            frozen_at: Wall clock start. Defaults to 2026-01-01T00:00Z.
                Naive datetimes are taken as UTC.
            start_monotonic: Starting monotonic value.
        """
        self._current_time = _aware(frozen_at or DEFAULT_FROZEN_AT)
        self._monotonic_base = start_monotonic
        self._monotonic_advances = 0.0

    def now(self) -> datetime:
        return self._current_time

    def utcnow(self) -> datetime:
        return self._current_time

    def monotonic(self) -> float:
        return self._monotonic_base + self._monotonic_advances

    def advance(
        self,
        seconds: float | int | None = None,
        delta: timedelta | None = None,
    ) -> None:
        """Move both clocks forward.

        Raises:
            ValueError: If no amount is given or the amount is negative.
        """
        if delta is not None:
            amount = delta.total_seconds()
        elif seconds is not None:
            amount = float(seconds)
        else:
            raise ValueError("Must provide either 'seconds' or 'delta' argument")
        if amount < 0:
            raise ValueError(f"Cannot advance time backwards, got {amount} seconds")

        self._current_time += timedelta(seconds=amount)
        self._monotonic_advances += amount

    def set_time(self, dt: datetime) -> None:
        """Jump the wall clock. The monotonic clock is unchanged."""
        self._current_time = _aware(dt)

    def reset(self, to: datetime | None = None) -> None:
        """Return to the given time (or the default) and zero the monotonic clock."""
        self._current_time = _aware(to or DEFAULT_FROZEN_AT)
        self._monotonic_advances = 0.0

    def __repr__(self) -> str:
        return (
            f"FakeTimeAuthority(current_time={self._current_time.isoformat()}, "
            f"monotonic={self.monotonic():.3f})"
        )

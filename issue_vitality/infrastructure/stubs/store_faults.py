"""Fault injection shared by the in-memory store stubs.

Tests arm an operation name (e.g. "write_aggregate") to make the next N
calls of that operation raise TransientStoreError, which is how a real
adapter reports a failed read or write.
"""

from __future__ import annotations

from uuid import UUID

from issue_vitality.domain.errors.store import TransientStoreError

ALWAYS = -1


class StoreFaultInjector:
    """Per-operation failure switches for a stub.

    Example:
        >>> faults = StoreFaultInjector()
        >>> faults.fail("list_ratings", times=2)
        >>> faults.check("list_ratings")  # raises TransientStoreError
    """

    def __init__(self) -> None:
        """Initialize with no armed failures."""
        self._remaining: dict[str, int] = {}
        self.calls: dict[str, int] = {}

    def fail(self, operation: str, times: int = ALWAYS) -> None:
        """Arm an operation to fail.

        Args:
            operation: Store method name.
            times: Number of calls to fail, or ALWAYS.
        """
        self._remaining[operation] = times

    def clear(self) -> None:
        """Disarm all failures and reset call counts."""
        self._remaining.clear()
        self.calls.clear()

    def check(self, operation: str, issue_id: UUID | None = None) -> None:
        """Record a call and raise if the operation is armed.

        Raises:
            TransientStoreError: If the operation is armed.
        """
        self.calls[operation] = self.calls.get(operation, 0) + 1
        remaining = self._remaining.get(operation)
        if remaining is None or remaining == 0:
            return
        if remaining > 0:
            self._remaining[operation] = remaining - 1
        raise TransientStoreError(operation, issue_id=issue_id, reason="injected failure")

"""Keyed asyncio lock for per-issue serialization.

One asyncio.Lock exists per issue while at least one task holds or waits
for it. Entries are reference counted and dropped when the last user
leaves, so the table does not grow with the number of issues ever seen.

The lock is scoped to one event loop in one process. Writers in other
processes are kept consistent by the database (conditional tier update,
unique badge constraint), not by this lock.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from uuid import UUID

from issue_vitality.application.ports.issue_lock import IssueLockProtocol


@dataclass
class _LockEntry:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class KeyedAsyncLock(IssueLockProtocol):
    """Per-issue mutual exclusion.

    Example:
        >>> locks = KeyedAsyncLock()
        >>> async with locks.hold(issue_id):
        ...     ...  # no other task holds issue_id's lock here
    """

    def __init__(self) -> None:
        """Initialize with no entries."""
        self._entries: dict[UUID, _LockEntry] = {}

    @asynccontextmanager
    async def hold(self, issue_id: UUID) -> AsyncIterator[None]:
        """Hold the issue's lock for the duration of the block.

        Released on normal exit, on exception and on cancellation.
        """
        entry = self._entries.get(issue_id)
        if entry is None:
            entry = _LockEntry()
            self._entries[issue_id] = entry
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._entries[issue_id]

    def is_held(self, issue_id: UUID) -> bool:
        """Check whether any task currently holds the issue's lock."""
        entry = self._entries.get(issue_id)
        return entry is not None and entry.lock.locked()

    def active_keys(self) -> int:
        """Number of issues with a holder or waiter."""
        return len(self._entries)

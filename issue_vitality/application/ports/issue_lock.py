"""Per-issue lock port.

Serializes every read-modify-write of one issue's aggregate. Holding the
lock for one issue never blocks work on another issue.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Protocol
from uuid import UUID


class IssueLockProtocol(Protocol):
    """Keyed mutual exclusion scoped to a single issue.

    Example:
        >>> async with issue_lock.hold(issue_id):
        ...     ratings = await ledger.list_ratings(issue_id)
        ...     await store.write_aggregate(issue_id, update)
    """

    def hold(self, issue_id: UUID) -> AbstractAsyncContextManager[None]:
        """Return a context manager that holds the issue's lock.

        The lock is released on exit, including when the body raises or
        is cancelled.
        """
        ...

    def is_held(self, issue_id: UUID) -> bool:
        """Check whether any task currently holds the issue's lock."""
        ...

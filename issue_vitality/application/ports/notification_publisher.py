"""Notification publisher port.

Port interface for publishing engine events to connected observers.
Delivery is best-effort and unacknowledged; callers never wait on
observers.
"""

from __future__ import annotations

from typing import Any, Protocol


class PublishableEvent(Protocol):
    """Structural type of events the fan-out accepts."""

    @property
    def event_type(self) -> str:
        """Event type key (e.g. "escalation", "vote_update")."""
        ...

    def to_dict(self) -> dict[str, Any]:
        """Serialize the event payload."""
        ...


class NotificationPublisherProtocol(Protocol):
    """Port for publishing event notifications.

    Implementations push the event to every registered observer
    connection whose subscription matches.

    Note:
        - Delivery failures should be logged but not raised
        - Observer registration is owned by the implementation
    """

    async def publish(self, event: PublishableEvent) -> int:
        """Publish an event to connected observers.

        Args:
            event: The event to publish.

        Returns:
            Number of observer connections the event was queued for.
        """
        ...

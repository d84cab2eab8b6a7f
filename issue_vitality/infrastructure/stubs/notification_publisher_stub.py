"""Recording stub for NotificationPublisherProtocol.

Captures published events for assertions and can be switched to fail,
to exercise the dispatcher's best-effort publish path.
"""

from __future__ import annotations

from issue_vitality.application.ports.notification_publisher import (
    NotificationPublisherProtocol,
    PublishableEvent,
)


class NotificationPublisherStub(NotificationPublisherProtocol):
    """Records every published event.

    Attributes:
        published: Events in publish order.
        fail_with: If set, publish raises this exception.
    """

    def __init__(self) -> None:
        """Initialize with no recorded events."""
        self.published: list[PublishableEvent] = []
        self.fail_with: Exception | None = None

    async def publish(self, event: PublishableEvent) -> int:
        """Record the event, or raise the configured failure."""
        if self.fail_with is not None:
            raise self.fail_with
        self.published.append(event)
        return 1

    # Test helper methods

    def events_of_type(self, event_type: str) -> list[PublishableEvent]:
        """Recorded events with the given type key."""
        return [event for event in self.published if event.event_type == event_type]

    def reset(self) -> None:
        """Clear recorded events and the failure switch."""
        self.published.clear()
        self.fail_with = None

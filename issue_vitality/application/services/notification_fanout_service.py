"""Notification fan-out service.

Holds one bounded asyncio.Queue per connected observer (the SSE route
drains it) and pushes every published event to each matching queue.

Delivery is best-effort: a full queue drops the message for that
observer only, and publish never waits on a slow observer.
"""

from __future__ import annotations

import asyncio
from uuid import UUID, uuid4

from structlog import get_logger

from issue_vitality.application.dtos.notification import (
    FanoutMessage,
    NotificationEventType,
)
from issue_vitality.application.ports.notification_publisher import (
    NotificationPublisherProtocol,
    PublishableEvent,
)
from issue_vitality.infrastructure.monitoring.vitality_metrics import (
    VitalityMetricsCollector,
)

logger = get_logger(__name__)


class NotificationFanoutService(NotificationPublisherProtocol):
    """In-process fan-out of engine events to observer connections.

    This service manages:
    - Observer connections (registration, removal)
    - Event distribution to every matching connection
    """

    def __init__(
        self,
        queue_size: int = 100,
        metrics: VitalityMetricsCollector | None = None,
    ) -> None:
        """Initialize the fan-out.

        Args:
            queue_size: Capacity of each observer queue.
            metrics: Optional metrics collector.
        """
        self._queue_size = queue_size
        self._metrics = metrics
        self._connections: dict[
            UUID, tuple[frozenset[str], asyncio.Queue[FanoutMessage]]
        ] = {}

    def register_connection(
        self,
        event_types: list[NotificationEventType] | None = None,
    ) -> tuple[UUID, asyncio.Queue[FanoutMessage]]:
        """Register a new observer connection.

        Args:
            event_types: Event types to receive. None or ALL receives
                everything.

        Returns:
            Tuple of (connection_id, event_queue).
        """
        if not event_types or NotificationEventType.ALL in event_types:
            subscribed = frozenset({NotificationEventType.ALL.value})
        else:
            subscribed = frozenset(event_type.value for event_type in event_types)

        connection_id = uuid4()
        queue: asyncio.Queue[FanoutMessage] = asyncio.Queue(maxsize=self._queue_size)
        self._connections[connection_id] = (subscribed, queue)
        self._update_connection_gauge()

        logger.info(
            "observer_connection_registered",
            connection_id=str(connection_id),
            event_types=sorted(subscribed),
        )
        return connection_id, queue

    def unregister_connection(self, connection_id: UUID) -> None:
        """Remove an observer connection. Unknown ids are ignored."""
        if self._connections.pop(connection_id, None) is not None:
            self._update_connection_gauge()
            logger.info("observer_connection_closed", connection_id=str(connection_id))

    def get_active_connection_count(self) -> int:
        """Get count of open observer connections."""
        return len(self._connections)

    async def publish(self, event: PublishableEvent) -> int:
        """Queue an event for every matching observer.

        Args:
            event: The event to publish.

        Returns:
            Number of connections the event was queued for.
        """
        message = FanoutMessage(event_type=event.event_type, data=event.to_dict())
        delivered = 0
        for connection_id, (subscribed, queue) in list(self._connections.items()):
            if (
                NotificationEventType.ALL.value not in subscribed
                and event.event_type not in subscribed
            ):
                continue
            try:
                queue.put_nowait(message)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning(
                    "observer_queue_full",
                    connection_id=str(connection_id),
                    event_type=event.event_type,
                )
                if self._metrics is not None:
                    self._metrics.record_fanout_drop(event.event_type)

        logger.debug(
            "notification_published",
            event_type=event.event_type,
            connections=delivered,
        )
        return delivered

    def _update_connection_gauge(self) -> None:
        if self._metrics is not None:
            self._metrics.set_fanout_connections(len(self._connections))

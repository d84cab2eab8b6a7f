"""Real-time notification stream.

Observers open GET /v1/notifications/stream and receive escalation and
vote update events as Server-Sent Events.

Constraints:
- Keepalive comment every 30 seconds so proxies keep the connection open
- A slow observer's queue overflows and drops events; the engine never
  waits on it
"""

from __future__ import annotations

import asyncio
from typing import AsyncGenerator, Optional

from fastapi import APIRouter, Depends, Query, Request
from sse_starlette.sse import EventSourceResponse
from structlog import get_logger

from issue_vitality.api.dependencies.vitality import get_notification_fanout
from issue_vitality.application.dtos.notification import NotificationEventType
from issue_vitality.application.services.notification_fanout_service import (
    NotificationFanoutService,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/v1/notifications", tags=["notifications"])

KEEPALIVE_INTERVAL_SECONDS = 30.0


def parse_event_types(raw: Optional[str]) -> list[NotificationEventType]:
    """Parse a comma-separated event type filter.

    Unknown entries are skipped. An empty or missing filter means ALL.
    """
    if not raw:
        return [NotificationEventType.ALL]

    event_types: list[NotificationEventType] = []
    for part in raw.split(","):
        part = part.strip().lower()
        if not part:
            continue
        try:
            event_types.append(NotificationEventType(part))
        except ValueError:
            logger.debug("unknown_event_type_ignored", event_type=part)
    return event_types or [NotificationEventType.ALL]


@router.get(
    "/stream",
    summary="Stream engine events",
    description=(
        "Server-Sent Events stream of escalation and vote_update events. "
        "Filter with ?event_types=escalation,vote_update."
    ),
    responses={
        200: {
            "description": "SSE event stream",
            "content": {"text/event-stream": {}},
        },
    },
)
async def stream_notifications(
    request: Request,
    event_types: Optional[str] = Query(
        default=None,
        description="Comma-separated event types (escalation, vote_update, all)",
    ),
    fanout: NotificationFanoutService = Depends(get_notification_fanout),
) -> EventSourceResponse:
    """Open an SSE stream of engine events."""
    connection_id, queue = fanout.register_connection(parse_event_types(event_types))

    async def event_generator() -> AsyncGenerator[dict, None]:
        try:
            while True:
                if await request.is_disconnected():
                    break
                try:
                    message = await asyncio.wait_for(
                        queue.get(), timeout=KEEPALIVE_INTERVAL_SECONDS
                    )
                except asyncio.TimeoutError:
                    yield {"comment": "keepalive"}
                    continue
                yield {
                    "event": message.event_type,
                    "data": message.model_dump_json(),
                    "id": str(message.notification_id),
                }
        finally:
            fanout.unregister_connection(connection_id)

    return EventSourceResponse(
        event_generator(),
        headers={
            "X-Accel-Buffering": "no",
            "Cache-Control": "no-cache",
        },
    )

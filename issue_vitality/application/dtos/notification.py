"""Notification fan-out DTOs.

Pydantic models shared by the fan-out service and the SSE route. They
live in the application layer so the dependency flows inward
(API -> Application).
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class NotificationEventType(str, Enum):
    """Event types an observer can subscribe to."""

    ALL = "all"
    ESCALATION = "escalation"
    VOTE_UPDATE = "vote_update"


class FanoutMessage(BaseModel):
    """One event queued for one observer connection.

    Attributes:
        notification_id: Unique ID for this notification.
        event_type: Type key of the source event.
        data: The source event's payload.
        timestamp: When the notification was generated.
    """

    notification_id: UUID = Field(default_factory=uuid4)
    event_type: str
    data: dict[str, Any]
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_sse_format(self) -> str:
        """Format the notification as a raw SSE frame."""
        return f"event: {self.event_type}\ndata: {json.dumps(self.data)}\n\n"

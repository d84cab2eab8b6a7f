"""Vote update event payloads.

A VoteUpdatedEvent tells connected observers that an issue's ratings
changed. It is published best-effort and carries the vote as recorded,
not the recomputed aggregate.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

VOTE_UPDATED_EVENT_TYPE: str = "vote_update"

VOTE_EVENT_SCHEMA_VERSION: int = 1


@dataclass(frozen=True, eq=True)
class VoteUpdatedEvent:
    """Event payload for a cast, replaced or withdrawn vote.

    Attributes:
        event_id: Unique identifier for this event.
        issue_id: The rated issue.
        user_id: The voter.
        rating: The recorded rating, or None when the vote was withdrawn.
        replaced: True if an earlier rating by the same user was replaced.
        occurred_at: When the vote was recorded (UTC).
        schema_version: Payload schema version.
    """

    event_id: UUID
    issue_id: UUID
    user_id: UUID
    rating: int | None
    replaced: bool
    occurred_at: datetime
    schema_version: int = VOTE_EVENT_SCHEMA_VERSION

    @property
    def event_type(self) -> str:
        """Event type key used by the fan-out."""
        return VOTE_UPDATED_EVENT_TYPE

    def to_dict(self) -> dict[str, Any]:
        """Convert payload to dict for publication."""
        return {
            "type": VOTE_UPDATED_EVENT_TYPE,
            "event_id": str(self.event_id),
            "issue_id": str(self.issue_id),
            "user_id": str(self.user_id),
            "rating": self.rating,
            "replaced": self.replaced,
            "occurred_at": self.occurred_at.isoformat(),
            "schema_version": self.schema_version,
        }

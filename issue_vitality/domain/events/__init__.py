"""Domain events published by the Issue Vitality engine."""

from issue_vitality.domain.events.escalation import (
    ISSUE_ESCALATED_EVENT_TYPE,
    IssueEscalatedEvent,
)
from issue_vitality.domain.events.vote import VOTE_UPDATED_EVENT_TYPE, VoteUpdatedEvent

__all__: list[str] = [
    "ISSUE_ESCALATED_EVENT_TYPE",
    "IssueEscalatedEvent",
    "VOTE_UPDATED_EVENT_TYPE",
    "VoteUpdatedEvent",
]

"""Application-layer DTOs."""

from issue_vitality.application.dtos.notification import (
    FanoutMessage,
    NotificationEventType,
)
from issue_vitality.application.dtos.results import (
    DispatchOutcome,
    EscalationEvaluation,
    RecomputeResult,
    VoteSubmissionResult,
)

__all__: list[str] = [
    "DispatchOutcome",
    "EscalationEvaluation",
    "FanoutMessage",
    "NotificationEventType",
    "RecomputeResult",
    "VoteSubmissionResult",
]

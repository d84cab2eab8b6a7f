"""API request/response models."""

from issue_vitality.api.models.badge import BadgeListResponse, BadgeResponse
from issue_vitality.api.models.issue import (
    IssueListResponse,
    IssueVitalityResponse,
    StatusHistoryResponse,
    StatusUpdateResponse,
)
from issue_vitality.api.models.vote import (
    ProblemDetail,
    VoteRequest,
    VoteResponse,
    VoteWithdrawResponse,
)

__all__: list[str] = [
    "BadgeListResponse",
    "BadgeResponse",
    "IssueListResponse",
    "IssueVitalityResponse",
    "ProblemDetail",
    "StatusHistoryResponse",
    "StatusUpdateResponse",
    "VoteRequest",
    "VoteResponse",
    "VoteWithdrawResponse",
]

"""Vote API request/response models.

Developer Golden Rules:
1. VALIDATE EARLY - Pydantic rejects ratings outside 1..5 with 422
2. FAIL LOUD - Service errors map to RFC 7807 bodies
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from issue_vitality.api.models.issue import IssueVitalityResponse


class VoteRequest(BaseModel):
    """Request to cast or replace a vote.

    Attributes:
        user_id: The voter.
        rating: Star rating, 1 to 5.
    """

    user_id: UUID = Field(..., description="UUID of the voting user")
    rating: int = Field(..., ge=1, le=5, strict=True, description="Star rating 1..5")


class VoteResponse(BaseModel):
    """Result of a vote cast or replace.

    Attributes:
        issue_id: The rated issue.
        user_id: The voter.
        rating: The stored rating.
        replaced: True if an earlier rating was replaced.
        deferred: True if the recompute runs in the background; aggregate
            is then omitted.
        escalated: True if this vote raised the escalation tier.
        aggregate: The recomputed aggregate.
    """

    issue_id: UUID
    user_id: UUID
    rating: int
    replaced: bool
    deferred: bool
    escalated: bool = False
    aggregate: Optional[IssueVitalityResponse] = None


class VoteWithdrawResponse(BaseModel):
    """Result of a vote withdrawal."""

    issue_id: UUID
    user_id: UUID
    removed: bool
    deferred: bool
    aggregate: Optional[IssueVitalityResponse] = None


class ProblemDetail(BaseModel):
    """RFC 7807 problem details body."""

    type: str
    title: str
    status: int
    detail: str
    instance: Optional[str] = None

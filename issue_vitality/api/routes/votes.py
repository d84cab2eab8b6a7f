"""Vote endpoints.

POST   /v1/issues/{issue_id}/votes            cast or replace a vote
DELETE /v1/issues/{issue_id}/votes/{user_id}  withdraw a vote

Error mapping (RFC 7807 bodies):
- 404: issue not found
- 422: rating outside 1..5 or another invariant violation
- 503: transient store failure, the client may retry
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from issue_vitality.api.dependencies.vitality import get_vote_submission_service
from issue_vitality.api.models.issue import IssueVitalityResponse
from issue_vitality.api.models.vote import (
    VoteRequest,
    VoteResponse,
    VoteWithdrawResponse,
)
from issue_vitality.api.problem import problem_exception
from issue_vitality.application.services.vote_submission_service import (
    VoteSubmissionService,
)
from issue_vitality.domain.errors import (
    InvariantViolationError,
    IssueNotFoundError,
    TransientStoreError,
)

router = APIRouter(prefix="/v1/issues", tags=["votes"])

_ERROR_RESPONSES: dict = {
    404: {"description": "Issue not found"},
    422: {"description": "Rating outside 1..5"},
    503: {"description": "Store temporarily unavailable"},
}


@router.post(
    "/{issue_id}/votes",
    response_model=VoteResponse,
    status_code=status.HTTP_200_OK,
    responses=_ERROR_RESPONSES,
    summary="Cast or replace a vote",
)
async def submit_vote(
    issue_id: UUID,
    body: VoteRequest,
    request: Request,
    service: VoteSubmissionService = Depends(get_vote_submission_service),
) -> VoteResponse:
    """Cast a vote, or replace the caller's earlier vote on the issue.

    The aggregate is recomputed before the response in sync mode. In
    deferred mode, or when the inline recompute times out, the response
    carries deferred=true and no aggregate.
    """
    try:
        result = await service.submit_vote(issue_id, body.user_id, body.rating)
    except (IssueNotFoundError, InvariantViolationError, TransientStoreError) as e:
        raise problem_exception(e, request) from None

    aggregate = result.aggregate
    return VoteResponse(
        issue_id=result.issue_id,
        user_id=result.user_id,
        rating=body.rating,
        replaced=result.replaced,
        deferred=result.deferred,
        escalated=result.recompute.escalated if result.recompute else False,
        aggregate=IssueVitalityResponse.from_aggregate(aggregate) if aggregate else None,
    )


@router.delete(
    "/{issue_id}/votes/{user_id}",
    response_model=VoteWithdrawResponse,
    status_code=status.HTTP_200_OK,
    responses=_ERROR_RESPONSES,
    summary="Withdraw a vote",
)
async def withdraw_vote(
    issue_id: UUID,
    user_id: UUID,
    request: Request,
    service: VoteSubmissionService = Depends(get_vote_submission_service),
) -> VoteWithdrawResponse:
    """Withdraw a vote. Withdrawing a vote that does not exist is a no-op."""
    try:
        result = await service.withdraw_vote(issue_id, user_id)
    except (IssueNotFoundError, InvariantViolationError, TransientStoreError) as e:
        raise problem_exception(e, request) from None

    aggregate = result.aggregate
    return VoteWithdrawResponse(
        issue_id=result.issue_id,
        user_id=result.user_id,
        removed=result.removed,
        deferred=result.deferred,
        aggregate=IssueVitalityResponse.from_aggregate(aggregate) if aggregate else None,
    )

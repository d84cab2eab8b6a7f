"""Issue vitality read endpoints."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from issue_vitality.api.dependencies.vitality import get_issue_ranking_service
from issue_vitality.api.models.issue import (
    IssueListResponse,
    IssueVitalityResponse,
    StatusHistoryResponse,
    StatusUpdateResponse,
)
from issue_vitality.api.problem import problem_exception
from issue_vitality.application.services.issue_ranking_service import (
    DEFAULT_LIST_LIMIT,
    IssueRankingService,
)
from issue_vitality.domain.errors import IssueNotFoundError, TransientStoreError
from issue_vitality.domain.models.issue_aggregate import IssueAggregate

router = APIRouter(prefix="/v1/issues", tags=["issues"])


def _to_list(aggregates: list[IssueAggregate]) -> IssueListResponse:
    return IssueListResponse(
        issues=[IssueVitalityResponse.from_aggregate(a) for a in aggregates],
        count=len(aggregates),
    )


@router.get(
    "/hot",
    response_model=IssueListResponse,
    responses={503: {"description": "Store temporarily unavailable"}},
    summary="Hot issues by support percentage",
)
async def hot_issues(
    request: Request,
    ward_id: Optional[str] = Query(default=None, description="Restrict to one ward"),
    limit: int = Query(default=DEFAULT_LIST_LIMIT, ge=1, le=100),
    service: IssueRankingService = Depends(get_issue_ranking_service),
) -> IssueListResponse:
    """Issues whose support meets the hot threshold, most supported first."""
    try:
        aggregates = await service.hot_issues(ward_id=ward_id, limit=limit)
    except TransientStoreError as e:
        raise problem_exception(e, request) from None
    return _to_list(aggregates)


@router.get(
    "/priority",
    response_model=IssueListResponse,
    responses={503: {"description": "Store temporarily unavailable"}},
    summary="Issues by vitality score",
)
async def priority_issues(
    request: Request,
    ward_id: Optional[str] = Query(default=None, description="Restrict to one ward"),
    limit: int = Query(default=DEFAULT_LIST_LIMIT, ge=1, le=100),
    service: IssueRankingService = Depends(get_issue_ranking_service),
) -> IssueListResponse:
    """Issues ordered by vitality score, highest first."""
    try:
        aggregates = await service.priority_issues(ward_id=ward_id, limit=limit)
    except TransientStoreError as e:
        raise problem_exception(e, request) from None
    return _to_list(aggregates)


@router.get(
    "/{issue_id}/vitality",
    response_model=IssueVitalityResponse,
    responses={
        404: {"description": "Issue not found"},
        503: {"description": "Store temporarily unavailable"},
    },
    summary="Get an issue's vitality aggregate",
)
async def get_issue_vitality(
    issue_id: UUID,
    request: Request,
    service: IssueRankingService = Depends(get_issue_ranking_service),
) -> IssueVitalityResponse:
    """Get the stored aggregate for one issue."""
    try:
        aggregate = await service.get_issue_vitality(issue_id)
    except (IssueNotFoundError, TransientStoreError) as e:
        raise problem_exception(e, request) from None
    return IssueVitalityResponse.from_aggregate(aggregate)


@router.get(
    "/{issue_id}/status-history",
    response_model=StatusHistoryResponse,
    responses={
        404: {"description": "Issue not found"},
        503: {"description": "Store temporarily unavailable"},
    },
    summary="Get an issue's escalation history",
)
async def get_status_history(
    issue_id: UUID,
    request: Request,
    service: IssueRankingService = Depends(get_issue_ranking_service),
) -> StatusHistoryResponse:
    """Escalation records for one issue in the order they were written."""
    try:
        updates = await service.get_status_history(issue_id)
    except (IssueNotFoundError, TransientStoreError) as e:
        raise problem_exception(e, request) from None
    return StatusHistoryResponse(
        issue_id=issue_id,
        updates=[StatusUpdateResponse.from_status_update(u) for u in updates],
    )

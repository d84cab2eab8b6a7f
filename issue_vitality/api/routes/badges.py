"""User badge endpoints."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Request

from issue_vitality.api.dependencies.vitality import get_badge_store
from issue_vitality.api.models.badge import BadgeListResponse, BadgeResponse
from issue_vitality.api.problem import problem_exception
from issue_vitality.application.ports.badge_store import BadgeStoreProtocol
from issue_vitality.domain.errors import TransientStoreError

router = APIRouter(prefix="/v1/users", tags=["badges"])


@router.get(
    "/{user_id}/badges",
    response_model=BadgeListResponse,
    responses={503: {"description": "Store temporarily unavailable"}},
    summary="List a user's badges",
)
async def list_user_badges(
    user_id: UUID,
    request: Request,
    store: BadgeStoreProtocol = Depends(get_badge_store),
) -> BadgeListResponse:
    """Badges the user holds. Unknown users have none."""
    try:
        grants = await store.list_badges(user_id)
    except TransientStoreError as e:
        raise problem_exception(e, request) from None
    return BadgeListResponse(
        user_id=user_id,
        badges=[BadgeResponse.from_grant(g) for g in grants],
        count=len(grants),
    )

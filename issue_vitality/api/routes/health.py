"""Liveness endpoint."""

from fastapi import APIRouter

from issue_vitality.api.dependencies.vitality import get_notification_fanout

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict:
    """Report process liveness and open observer connections."""
    return {
        "status": "healthy",
        "observer_connections": get_notification_fanout().get_active_connection_count(),
    }

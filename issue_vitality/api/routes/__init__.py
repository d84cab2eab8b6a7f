"""API routes."""

from issue_vitality.api.routes.badges import router as badges_router
from issue_vitality.api.routes.health import router as health_router
from issue_vitality.api.routes.issues import router as issues_router
from issue_vitality.api.routes.metrics import router as metrics_router
from issue_vitality.api.routes.notifications import router as notifications_router
from issue_vitality.api.routes.votes import router as votes_router

__all__: list[str] = [
    "badges_router",
    "health_router",
    "issues_router",
    "metrics_router",
    "notifications_router",
    "votes_router",
]

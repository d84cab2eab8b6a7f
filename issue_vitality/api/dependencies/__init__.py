"""FastAPI dependencies."""

from issue_vitality.api.dependencies.vitality import (
    get_badge_store,
    get_issue_ranking_service,
    get_notification_fanout,
    get_vote_submission_service,
)

__all__: list[str] = [
    "get_badge_store",
    "get_issue_ranking_service",
    "get_notification_fanout",
    "get_vote_submission_service",
]

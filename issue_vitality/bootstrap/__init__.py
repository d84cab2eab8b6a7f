"""Bootstrap wiring: singleton getters, test setters and resets."""

from issue_vitality.bootstrap.vitality import (
    get_issue_ranking_service,
    get_notification_fanout,
    get_recompute_scheduler,
    get_vote_submission_service,
    reset_vitality_dependencies,
)

__all__: list[str] = [
    "get_issue_ranking_service",
    "get_notification_fanout",
    "get_recompute_scheduler",
    "get_vote_submission_service",
    "reset_vitality_dependencies",
]

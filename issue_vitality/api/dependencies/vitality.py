"""Issue vitality API dependencies.

Thin FastAPI dependency wrappers over the bootstrap singletons. Tests
swap implementations with the bootstrap set_* functions or with
app.dependency_overrides.
"""

from issue_vitality.application.ports.badge_store import BadgeStoreProtocol
from issue_vitality.application.services.issue_ranking_service import (
    IssueRankingService,
)
from issue_vitality.application.services.notification_fanout_service import (
    NotificationFanoutService,
)
from issue_vitality.application.services.vote_submission_service import (
    VoteSubmissionService,
)
from issue_vitality.bootstrap.vitality import get_badge_store as _get_badge_store
from issue_vitality.bootstrap.vitality import (
    get_issue_ranking_service as _get_issue_ranking_service,
)
from issue_vitality.bootstrap.vitality import (
    get_notification_fanout as _get_notification_fanout,
)
from issue_vitality.bootstrap.vitality import (
    get_vote_submission_service as _get_vote_submission_service,
)


def get_vote_submission_service() -> VoteSubmissionService:
    """Get the vote submission service."""
    return _get_vote_submission_service()


def get_issue_ranking_service() -> IssueRankingService:
    """Get the issue ranking service."""
    return _get_issue_ranking_service()


def get_notification_fanout() -> NotificationFanoutService:
    """Get the notification fan-out."""
    return _get_notification_fanout()


def get_badge_store() -> BadgeStoreProtocol:
    """Get the badge store."""
    return _get_badge_store()

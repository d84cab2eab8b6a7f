"""Application services for the Issue Vitality engine."""

from issue_vitality.application.services.escalation_side_effect_dispatcher import (
    EscalationSideEffectDispatcher,
)
from issue_vitality.application.services.escalation_state_machine import (
    EscalationStateMachine,
)
from issue_vitality.application.services.issue_aggregate_updater import (
    IssueAggregateUpdater,
)
from issue_vitality.application.services.issue_ranking_service import (
    IssueRankingService,
)
from issue_vitality.application.services.notification_fanout_service import (
    NotificationFanoutService,
)
from issue_vitality.application.services.recompute_scheduler import (
    DeferredRecomputeScheduler,
)
from issue_vitality.application.services.vote_submission_service import (
    VoteSubmissionService,
)

__all__: list[str] = [
    "DeferredRecomputeScheduler",
    "EscalationSideEffectDispatcher",
    "EscalationStateMachine",
    "IssueAggregateUpdater",
    "IssueRankingService",
    "NotificationFanoutService",
    "VoteSubmissionService",
]

"""Application ports (interfaces) for the Issue Vitality engine.

Ports define the seams to external collaborators. Infrastructure provides
the adapters: in-memory stubs for development and tests, PostgreSQL
adapters for production.
"""

from issue_vitality.application.ports.badge_store import BadgeStoreProtocol
from issue_vitality.application.ports.issue_lock import IssueLockProtocol
from issue_vitality.application.ports.issue_store import IssueStoreProtocol
from issue_vitality.application.ports.notification_publisher import (
    NotificationPublisherProtocol,
    PublishableEvent,
)
from issue_vitality.application.ports.status_history import StatusHistoryProtocol
from issue_vitality.application.ports.time_authority import TimeAuthorityProtocol
from issue_vitality.application.ports.vote_ledger import (
    VoteLedgerProtocol,
    VoteUpsertResult,
)

__all__: list[str] = [
    "BadgeStoreProtocol",
    "IssueLockProtocol",
    "IssueStoreProtocol",
    "NotificationPublisherProtocol",
    "PublishableEvent",
    "StatusHistoryProtocol",
    "TimeAuthorityProtocol",
    "VoteLedgerProtocol",
    "VoteUpsertResult",
]

"""In-memory stub implementations of the engine's ports.

For development and testing only. Production wiring uses the PostgreSQL
adapters when DATABASE_URL is set.
"""

from issue_vitality.infrastructure.stubs.badge_store_stub import BadgeStoreStub
from issue_vitality.infrastructure.stubs.issue_store_stub import IssueStoreStub
from issue_vitality.infrastructure.stubs.notification_publisher_stub import (
    NotificationPublisherStub,
)
from issue_vitality.infrastructure.stubs.status_history_stub import StatusHistoryStub
from issue_vitality.infrastructure.stubs.store_faults import ALWAYS, StoreFaultInjector
from issue_vitality.infrastructure.stubs.vote_ledger_stub import VoteLedgerStub

__all__: list[str] = [
    "ALWAYS",
    "BadgeStoreStub",
    "IssueStoreStub",
    "NotificationPublisherStub",
    "StatusHistoryStub",
    "StoreFaultInjector",
    "VoteLedgerStub",
]

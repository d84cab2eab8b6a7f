"""Bootstrap wiring for the Issue Vitality engine.

Ports default to in-memory stubs; when DATABASE_URL is set the vote
ledger, issue store, status history and badge store use the PostgreSQL
adapters. Services are built lazily from the current ports and rebuilt
after any set_* call.
"""

from __future__ import annotations

from issue_vitality.application.ports.badge_store import BadgeStoreProtocol
from issue_vitality.application.ports.issue_lock import IssueLockProtocol
from issue_vitality.application.ports.issue_store import IssueStoreProtocol
from issue_vitality.application.ports.status_history import StatusHistoryProtocol
from issue_vitality.application.ports.time_authority import TimeAuthorityProtocol
from issue_vitality.application.ports.vote_ledger import VoteLedgerProtocol
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
from issue_vitality.bootstrap.database import get_session_factory, is_database_configured
from issue_vitality.config.vitality_config import VitalityConfig
from issue_vitality.infrastructure.adapters.keyed_lock import KeyedAsyncLock
from issue_vitality.infrastructure.adapters.persistence import (
    PostgresBadgeStore,
    PostgresIssueStore,
    PostgresStatusHistory,
    PostgresVoteLedger,
)
from issue_vitality.infrastructure.adapters.system_time_authority import (
    SystemTimeAuthority,
)
from issue_vitality.infrastructure.monitoring.vitality_metrics import (
    get_vitality_metrics_collector,
)
from issue_vitality.infrastructure.stubs.badge_store_stub import BadgeStoreStub
from issue_vitality.infrastructure.stubs.issue_store_stub import IssueStoreStub
from issue_vitality.infrastructure.stubs.status_history_stub import StatusHistoryStub
from issue_vitality.infrastructure.stubs.vote_ledger_stub import VoteLedgerStub

_config: VitalityConfig | None = None
_time_authority: TimeAuthorityProtocol | None = None
_vote_ledger: VoteLedgerProtocol | None = None
_issue_store: IssueStoreProtocol | None = None
_status_history: StatusHistoryProtocol | None = None
_badge_store: BadgeStoreProtocol | None = None
_issue_lock: IssueLockProtocol | None = None
_fanout: NotificationFanoutService | None = None

_updater: IssueAggregateUpdater | None = None
_scheduler: DeferredRecomputeScheduler | None = None
_vote_submission: VoteSubmissionService | None = None
_ranking: IssueRankingService | None = None


def get_vitality_config() -> VitalityConfig:
    """Get engine configuration (from environment on first use)."""
    global _config
    if _config is None:
        _config = VitalityConfig.from_environment()
    return _config


def get_time_authority() -> TimeAuthorityProtocol:
    """Get the time authority."""
    global _time_authority
    if _time_authority is None:
        _time_authority = SystemTimeAuthority()
    return _time_authority


def get_vote_ledger() -> VoteLedgerProtocol:
    """Get vote ledger instance."""
    global _vote_ledger
    if _vote_ledger is None:
        if is_database_configured():
            _vote_ledger = PostgresVoteLedger(get_session_factory())
        else:
            _vote_ledger = VoteLedgerStub(get_time_authority())
    return _vote_ledger


def get_issue_store() -> IssueStoreProtocol:
    """Get issue store instance."""
    global _issue_store
    if _issue_store is None:
        if is_database_configured():
            _issue_store = PostgresIssueStore(get_session_factory())
        else:
            _issue_store = IssueStoreStub(get_time_authority())
    return _issue_store


def get_status_history() -> StatusHistoryProtocol:
    """Get status history instance."""
    global _status_history
    if _status_history is None:
        if is_database_configured():
            _status_history = PostgresStatusHistory(get_session_factory())
        else:
            _status_history = StatusHistoryStub(get_time_authority())
    return _status_history


def get_badge_store() -> BadgeStoreProtocol:
    """Get badge store instance."""
    global _badge_store
    if _badge_store is None:
        if is_database_configured():
            _badge_store = PostgresBadgeStore(get_session_factory())
        else:
            _badge_store = BadgeStoreStub(get_time_authority())
    return _badge_store


def get_issue_lock() -> IssueLockProtocol:
    """Get the per-issue lock."""
    global _issue_lock
    if _issue_lock is None:
        _issue_lock = KeyedAsyncLock()
    return _issue_lock


def get_notification_fanout() -> NotificationFanoutService:
    """Get the notification fan-out."""
    global _fanout
    if _fanout is None:
        _fanout = NotificationFanoutService(
            queue_size=get_vitality_config().fanout_queue_size,
            metrics=get_vitality_metrics_collector(),
        )
    return _fanout


def get_aggregate_updater() -> IssueAggregateUpdater:
    """Get the aggregate updater, wiring the escalation chain."""
    global _updater
    if _updater is None:
        config = get_vitality_config()
        metrics = get_vitality_metrics_collector()
        dispatcher = EscalationSideEffectDispatcher(
            status_history=get_status_history(),
            badge_store=get_badge_store(),
            issue_store=get_issue_store(),
            publisher=get_notification_fanout(),
            time_authority=get_time_authority(),
            config=config,
            metrics=metrics,
        )
        state_machine = EscalationStateMachine(
            issue_store=get_issue_store(),
            dispatcher=dispatcher,
            thresholds=config.thresholds,
            metrics=metrics,
        )
        _updater = IssueAggregateUpdater(
            vote_ledger=get_vote_ledger(),
            issue_store=get_issue_store(),
            state_machine=state_machine,
            issue_lock=get_issue_lock(),
            time_authority=get_time_authority(),
            populations=config.populations,
            metrics=metrics,
        )
    return _updater


def get_recompute_scheduler() -> DeferredRecomputeScheduler:
    """Get the deferred recompute scheduler."""
    global _scheduler
    if _scheduler is None:
        _scheduler = DeferredRecomputeScheduler(
            updater=get_aggregate_updater(),
            max_retries=get_vitality_config().recompute_max_retries,
        )
    return _scheduler


def get_vote_submission_service() -> VoteSubmissionService:
    """Get the vote submission service."""
    global _vote_submission
    if _vote_submission is None:
        _vote_submission = VoteSubmissionService(
            vote_ledger=get_vote_ledger(),
            issue_store=get_issue_store(),
            updater=get_aggregate_updater(),
            scheduler=get_recompute_scheduler(),
            publisher=get_notification_fanout(),
            time_authority=get_time_authority(),
            config=get_vitality_config(),
            metrics=get_vitality_metrics_collector(),
        )
    return _vote_submission


def get_issue_ranking_service() -> IssueRankingService:
    """Get the issue ranking service."""
    global _ranking
    if _ranking is None:
        _ranking = IssueRankingService(
            issue_store=get_issue_store(),
            status_history=get_status_history(),
            hot_issue_threshold=get_vitality_config().hot_issue_threshold,
        )
    return _ranking


def _reset_services() -> None:
    global _updater, _scheduler, _vote_submission, _ranking
    _updater = None
    _scheduler = None
    _vote_submission = None
    _ranking = None


def reset_vitality_dependencies() -> None:
    """Reset all singleton instances for testing."""
    global _config
    global _time_authority
    global _vote_ledger
    global _issue_store
    global _status_history
    global _badge_store
    global _issue_lock
    global _fanout

    _config = None
    _time_authority = None
    _vote_ledger = None
    _issue_store = None
    _status_history = None
    _badge_store = None
    _issue_lock = None
    _fanout = None
    _reset_services()


def set_vitality_config(config: VitalityConfig) -> None:
    """Set custom configuration for testing."""
    global _config, _fanout
    _config = config
    _fanout = None
    _reset_services()


def set_time_authority(time_authority: TimeAuthorityProtocol) -> None:
    """Set custom time authority for testing."""
    global _time_authority
    _time_authority = time_authority
    _reset_services()


def set_vote_ledger(ledger: VoteLedgerProtocol) -> None:
    """Set custom vote ledger for testing."""
    global _vote_ledger
    _vote_ledger = ledger
    _reset_services()


def set_issue_store(store: IssueStoreProtocol) -> None:
    """Set custom issue store for testing."""
    global _issue_store
    _issue_store = store
    _reset_services()


def set_status_history(history: StatusHistoryProtocol) -> None:
    """Set custom status history for testing."""
    global _status_history
    _status_history = history
    _reset_services()


def set_badge_store(store: BadgeStoreProtocol) -> None:
    """Set custom badge store for testing."""
    global _badge_store
    _badge_store = store
    _reset_services()

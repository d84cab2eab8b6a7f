"""Vote submission service.

Entry point for casting, replacing and withdrawing votes. The vote is
durable once the ledger accepted it; everything after that (vote event,
recompute, escalation) is downstream and never fails the vote.

Recompute modes:
- SYNC: await the recompute within recompute_timeout_seconds. On timeout
  or a transient store failure the issue is handed to the deferred
  scheduler and the vote still succeeds. A recompute still running when
  the caller gives up (timeout or cancellation) is adopted by the
  scheduler and finishes in the background.
- DEFERRED: schedule the recompute and return immediately.
"""

from __future__ import annotations

import asyncio
from uuid import UUID, uuid4

from structlog import get_logger
from structlog.typing import FilteringBoundLogger

from issue_vitality.application.dtos.results import (
    RecomputeResult,
    VoteSubmissionResult,
)
from issue_vitality.application.ports.issue_store import IssueStoreProtocol
from issue_vitality.application.ports.notification_publisher import (
    NotificationPublisherProtocol,
)
from issue_vitality.application.ports.time_authority import TimeAuthorityProtocol
from issue_vitality.application.ports.vote_ledger import VoteLedgerProtocol
from issue_vitality.application.services.issue_aggregate_updater import (
    IssueAggregateUpdater,
)
from issue_vitality.application.services.recompute_scheduler import (
    DeferredRecomputeScheduler,
)
from issue_vitality.config.vitality_config import RecomputeMode, VitalityConfig
from issue_vitality.domain.errors.invariant import validate_rating
from issue_vitality.domain.errors.issue import IssueNotFoundError
from issue_vitality.domain.errors.store import TransientStoreError
from issue_vitality.domain.events.vote import VoteUpdatedEvent
from issue_vitality.infrastructure.monitoring.vitality_metrics import (
    VitalityMetricsCollector,
)

logger = get_logger(__name__)


class VoteSubmissionService:
    """Records votes and triggers the aggregate recompute."""

    def __init__(
        self,
        vote_ledger: VoteLedgerProtocol,
        issue_store: IssueStoreProtocol,
        updater: IssueAggregateUpdater,
        scheduler: DeferredRecomputeScheduler,
        publisher: NotificationPublisherProtocol,
        time_authority: TimeAuthorityProtocol,
        config: VitalityConfig,
        metrics: VitalityMetricsCollector | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            vote_ledger: Durable vote storage.
            issue_store: Used to check the issue exists before voting.
            updater: Inline recompute.
            scheduler: Background recompute fallback.
            publisher: Fan-out for vote_update events.
            time_authority: Clock for event timestamps.
            config: Recompute mode and timeout.
            metrics: Optional metrics collector.
        """
        self._vote_ledger = vote_ledger
        self._issue_store = issue_store
        self._updater = updater
        self._scheduler = scheduler
        self._publisher = publisher
        self._time = time_authority
        self._config = config
        self._metrics = metrics

    async def submit_vote(
        self,
        issue_id: UUID,
        user_id: UUID,
        rating: int,
    ) -> VoteSubmissionResult:
        """Cast or replace a user's vote on an issue.

        Args:
            issue_id: The issue being rated.
            user_id: The voter.
            rating: Star rating in 1..5.

        Returns:
            VoteSubmissionResult with the stored vote and, in sync mode,
            the recompute result.

        Raises:
            InvalidRatingError: If rating is outside 1..5.
            IssueNotFoundError: If the issue does not exist.
            TransientStoreError: If the ledger rejected the write.
        """
        validate_rating(rating)
        log = logger.bind(issue_id=str(issue_id), user_id=str(user_id))

        await self._require_issue(issue_id, log)
        upsert = await self._vote_ledger.upsert_vote(user_id, issue_id, rating)
        log.info(
            "vote_recorded",
            rating=rating,
            replaced=upsert.replaced,
            previous_rating=upsert.previous_rating,
        )

        await self._publish_vote_event(issue_id, user_id, rating, upsert.replaced, log)
        recompute, deferred = await self._trigger_recompute(issue_id, log)

        return VoteSubmissionResult(
            issue_id=issue_id,
            user_id=user_id,
            vote=upsert.vote,
            replaced=upsert.replaced,
            recompute=recompute,
            deferred=deferred,
        )

    async def withdraw_vote(self, issue_id: UUID, user_id: UUID) -> VoteSubmissionResult:
        """Withdraw a user's vote and recompute the issue.

        Returns:
            VoteSubmissionResult with removed=False (and no recompute) when
            the user had not voted.

        Raises:
            IssueNotFoundError: If the issue does not exist.
            TransientStoreError: If the ledger rejected the delete.
        """
        log = logger.bind(issue_id=str(issue_id), user_id=str(user_id))

        await self._require_issue(issue_id, log)
        removed = await self._vote_ledger.delete_vote(user_id, issue_id)
        if not removed:
            log.info("vote_withdraw_noop")
            return VoteSubmissionResult(issue_id=issue_id, user_id=user_id, vote=None)

        log.info("vote_withdrawn")
        await self._publish_vote_event(issue_id, user_id, None, False, log)
        recompute, deferred = await self._trigger_recompute(issue_id, log)

        return VoteSubmissionResult(
            issue_id=issue_id,
            user_id=user_id,
            vote=None,
            removed=True,
            recompute=recompute,
            deferred=deferred,
        )

    async def _require_issue(self, issue_id: UUID, log: FilteringBoundLogger) -> None:
        meta = await self._issue_store.get_issue_meta(issue_id)
        if meta is None:
            log.warning("vote_issue_not_found")
            raise IssueNotFoundError(issue_id)

    async def _publish_vote_event(
        self,
        issue_id: UUID,
        user_id: UUID,
        rating: int | None,
        replaced: bool,
        log: FilteringBoundLogger,
    ) -> None:
        event = VoteUpdatedEvent(
            event_id=uuid4(),
            issue_id=issue_id,
            user_id=user_id,
            rating=rating,
            replaced=replaced,
            occurred_at=self._time.utcnow(),
        )
        try:
            await self._publisher.publish(event)
        except Exception as e:
            log.warning("vote_event_publish_failed", error=str(e))

    async def _trigger_recompute(
        self,
        issue_id: UUID,
        log: FilteringBoundLogger,
    ) -> tuple[RecomputeResult | None, bool]:
        if self._config.recompute_mode is RecomputeMode.DEFERRED:
            self._defer(issue_id, "deferred_mode")
            return None, True

        # Shielded: a tier raised inside the recompute must reach its side effects
        task = asyncio.create_task(
            self._updater.recompute(issue_id), name=f"sync-recompute-{issue_id}"
        )
        try:
            result = await asyncio.wait_for(
                asyncio.shield(task),
                timeout=self._config.recompute_timeout_seconds,
            )
        except asyncio.TimeoutError:
            log.warning(
                "recompute_timed_out",
                timeout_seconds=self._config.recompute_timeout_seconds,
            )
            self._scheduler.adopt(issue_id, task)
            self._record_deferral("timeout")
            return None, True
        except asyncio.CancelledError:
            log.warning("recompute_caller_cancelled")
            self._scheduler.adopt(issue_id, task)
            raise
        except TransientStoreError as e:
            log.warning("recompute_store_error", operation=e.operation, error=str(e))
            self._defer(issue_id, "store_error")
            return None, True
        return result, False

    def _defer(self, issue_id: UUID, reason: str) -> None:
        self._scheduler.schedule(issue_id)
        self._record_deferral(reason)

    def _record_deferral(self, reason: str) -> None:
        if self._metrics is not None:
            self._metrics.record_deferred_recompute(reason)

"""Issue aggregate updater.

The only writer of an issue's vitality aggregate. One recompute:

1. Takes the issue's lock (other issues are never blocked)
2. Reads issue meta and the full rating set
3. Reads the clock once
4. Scores the ratings and writes vote_count, vitality_score and
   support_percentage in one write
5. Evaluates escalation inside the same critical section, whether or not
   the write succeeded

Recomputing from the full rating set makes the operation idempotent: two
recomputes with no vote change in between write the same aggregate, and
the second never fires a transition.
"""

from __future__ import annotations

from uuid import UUID

from structlog import get_logger
from structlog.typing import FilteringBoundLogger

from issue_vitality.application.dtos.results import (
    EscalationEvaluation,
    RecomputeResult,
)
from issue_vitality.application.ports.issue_lock import IssueLockProtocol
from issue_vitality.application.ports.issue_store import IssueStoreProtocol
from issue_vitality.application.ports.time_authority import TimeAuthorityProtocol
from issue_vitality.application.ports.vote_ledger import VoteLedgerProtocol
from issue_vitality.application.services.escalation_state_machine import (
    EscalationStateMachine,
)
from issue_vitality.config.vitality_config import WardPopulationConfig
from issue_vitality.domain.errors.issue import IssueNotFoundError
from issue_vitality.domain.errors.store import TransientStoreError
from issue_vitality.domain.models.issue_aggregate import AggregateUpdate, IssueAggregate
from issue_vitality.domain.services.vitality_score import compute_vitality
from issue_vitality.infrastructure.monitoring.vitality_metrics import (
    VitalityMetricsCollector,
)

logger = get_logger(__name__)


class IssueAggregateUpdater:
    """Recomputes and persists issue aggregates under the per-issue lock."""

    def __init__(
        self,
        vote_ledger: VoteLedgerProtocol,
        issue_store: IssueStoreProtocol,
        state_machine: EscalationStateMachine,
        issue_lock: IssueLockProtocol,
        time_authority: TimeAuthorityProtocol,
        populations: WardPopulationConfig,
        metrics: VitalityMetricsCollector | None = None,
    ) -> None:
        """Initialize the updater.

        Args:
            vote_ledger: Source of ratings.
            issue_store: Issue meta and aggregate storage.
            state_machine: Escalation evaluation run after each write.
            issue_lock: Per-issue mutual exclusion.
            time_authority: Clock read once per recompute.
            populations: Ward population policy.
            metrics: Optional metrics collector.
        """
        self._vote_ledger = vote_ledger
        self._issue_store = issue_store
        self._state_machine = state_machine
        self._lock = issue_lock
        self._time = time_authority
        self._populations = populations
        self._metrics = metrics

    async def recompute(self, issue_id: UUID) -> RecomputeResult:
        """Recompute an issue's aggregate from its full rating set.

        Args:
            issue_id: The issue to recompute.

        Returns:
            RecomputeResult with the written aggregate and the escalation
            evaluation (or the error it raised).

        Raises:
            IssueNotFoundError: If the issue does not exist. Nothing is
                written and escalation is not evaluated.
            TransientStoreError: If a store read or the aggregate write
                failed. A failed write is raised after escalation has
                been evaluated.
            InvariantViolationError: If a stored rating or the ward
                population is invalid.
        """
        log = logger.bind(issue_id=str(issue_id))
        started = self._time.monotonic()
        outcome = "failed"
        try:
            async with self._lock.hold(issue_id):
                result = await self._recompute_locked(issue_id, log)
            outcome = "escalation_error" if result.escalation_error else "success"
            return result
        except IssueNotFoundError:
            outcome = "not_found"
            raise
        except TransientStoreError:
            outcome = "store_error"
            raise
        finally:
            if self._metrics is not None:
                self._metrics.record_recompute(outcome, self._time.monotonic() - started)

    async def _recompute_locked(
        self, issue_id: UUID, log: FilteringBoundLogger
    ) -> RecomputeResult:
        meta = await self._issue_store.get_issue_meta(issue_id)
        if meta is None:
            log.warning("recompute_issue_not_found")
            raise IssueNotFoundError(issue_id)

        ratings = await self._vote_ledger.list_ratings(issue_id)
        now = self._time.utcnow()
        score = compute_vitality(
            ratings=ratings,
            issue_created_at=meta.created_at,
            now=now,
            ward_population=self._populations.population_for(meta.ward_id),
        )
        update = AggregateUpdate(
            vote_count=score.vote_count,
            vitality_score=score.vitality_score,
            support_percentage=score.support_percentage,
        )

        written: IssueAggregate | TransientStoreError
        try:
            written = await self._issue_store.write_aggregate(issue_id, update)
        except TransientStoreError as e:
            written = e
            log.warning("aggregate_write_failed", operation=e.operation, error=str(e))
        else:
            log.info(
                "aggregate_recomputed",
                vote_count=score.vote_count,
                vitality_score=score.vitality_score,
                support_percentage=score.support_percentage,
            )

        evaluation: EscalationEvaluation | None = None
        escalation_error: Exception | None = None
        try:
            evaluation = await self._state_machine.evaluate(issue_id)
        except Exception as e:
            escalation_error = e
            log.error(
                "escalation_evaluation_failed",
                error=str(e),
                error_type=type(e).__name__,
            )

        if isinstance(written, TransientStoreError):
            raise written

        aggregate = written
        if evaluation is not None and evaluation.current_tier.outranks(
            aggregate.escalation_tier
        ):
            aggregate = aggregate.with_tier(evaluation.current_tier)

        return RecomputeResult(
            issue_id=issue_id,
            score=score,
            aggregate=aggregate,
            evaluation=evaluation,
            escalation_error=escalation_error,
        )

"""Escalation state machine.

Raises an issue's escalation tier when its stored support percentage
earns a higher tier, and hands each transition to the side-effect
dispatcher exactly once. Evaluations that do not transition still offer
the creator badge, which follows support rather than tier.

    none -> local -> state -> national

Tiers never move down. A support drop leaves the stored tier in place,
and a jump across several thresholds fires a single transition straight
to the highest tier earned.

Callers must hold the issue's lock: evaluation is a read-modify-write of
the stored tier.
"""

from __future__ import annotations

from uuid import UUID

from structlog import get_logger

from issue_vitality.application.dtos.results import EscalationEvaluation
from issue_vitality.application.ports.issue_store import IssueStoreProtocol
from issue_vitality.application.services.escalation_side_effect_dispatcher import (
    EscalationSideEffectDispatcher,
)
from issue_vitality.domain.errors.issue import IssueNotFoundError
from issue_vitality.domain.services.escalation_policy import (
    EscalationThresholds,
    decide_transition,
)
from issue_vitality.infrastructure.monitoring.vitality_metrics import (
    VitalityMetricsCollector,
)

logger = get_logger(__name__)


class EscalationStateMachine:
    """Evaluates and persists escalation tier transitions."""

    def __init__(
        self,
        issue_store: IssueStoreProtocol,
        dispatcher: EscalationSideEffectDispatcher,
        thresholds: EscalationThresholds,
        metrics: VitalityMetricsCollector | None = None,
    ) -> None:
        """Initialize the state machine.

        Args:
            issue_store: Source of support and home of the stored tier.
            dispatcher: Side effects for fired transitions.
            thresholds: Configured tier thresholds.
            metrics: Optional metrics collector.
        """
        self._issue_store = issue_store
        self._dispatcher = dispatcher
        self._thresholds = thresholds
        self._metrics = metrics

    async def evaluate(self, issue_id: UUID) -> EscalationEvaluation:
        """Evaluate an issue's tier against its stored support.

        Args:
            issue_id: The issue to evaluate.

        Returns:
            EscalationEvaluation; fired is True only when this call raised
            the stored tier.

        Raises:
            IssueNotFoundError: If the issue does not exist.
            TransientStoreError: If reading or raising the tier fails. No
                side effects run in that case.
        """
        log = logger.bind(issue_id=str(issue_id))

        aggregate = await self._issue_store.get_aggregate(issue_id)
        if aggregate is None:
            raise IssueNotFoundError(issue_id)

        decision = decide_transition(
            current_tier=aggregate.escalation_tier,
            support_percentage=aggregate.support_percentage,
            thresholds=self._thresholds,
        )
        if not decision.fires:
            log.debug(
                "escalation_not_fired",
                current_tier=decision.current_tier.value,
                candidate_tier=decision.candidate_tier.value,
                support_percentage=aggregate.support_percentage,
            )
            badge_granted = await self._dispatcher.grant_creator_badge(
                issue_id, aggregate.support_percentage
            )
            return EscalationEvaluation(
                issue_id=issue_id,
                previous_tier=decision.current_tier,
                candidate_tier=decision.candidate_tier,
                support_percentage=aggregate.support_percentage,
                fired=False,
                badge_granted=badge_granted,
            )

        raised = await self._issue_store.set_escalation_tier(
            issue_id, decision.candidate_tier
        )
        if not raised:
            # Another writer raised the tier first; its transition owns the side effects
            log.info(
                "escalation_already_applied",
                candidate_tier=decision.candidate_tier.value,
            )
            badge_granted = await self._dispatcher.grant_creator_badge(
                issue_id, aggregate.support_percentage
            )
            return EscalationEvaluation(
                issue_id=issue_id,
                previous_tier=decision.current_tier,
                candidate_tier=decision.candidate_tier,
                support_percentage=aggregate.support_percentage,
                fired=False,
                badge_granted=badge_granted,
            )

        log.info(
            "issue_escalated",
            previous_tier=decision.current_tier.value,
            tier=decision.candidate_tier.value,
            support_percentage=aggregate.support_percentage,
        )
        if self._metrics is not None:
            self._metrics.record_escalation(decision.candidate_tier.value)

        dispatch = await self._dispatcher.on_transition(
            issue_id=issue_id,
            tier=decision.candidate_tier,
            support_percentage=aggregate.support_percentage,
            previous_tier=decision.current_tier,
        )
        return EscalationEvaluation(
            issue_id=issue_id,
            previous_tier=decision.current_tier,
            candidate_tier=decision.candidate_tier,
            support_percentage=aggregate.support_percentage,
            fired=True,
            dispatch=dispatch,
            badge_granted=dispatch.badge_granted,
        )

"""Escalation side-effect dispatcher.

Runs the side effects of one tier transition, in order:

1. Append a status history record (always attempted first)
2. Grant the creator's support badge once support reaches the badge threshold
3. Publish an escalation event to the notification fan-out

Each step is isolated: a failing step is logged with issue_id and tier and
does not stop the steps after it. Nothing is retried here and nothing a
later step does can undo an earlier one.

Developer Golden Rules:
1. EXACTLY ONCE PER TRANSITION - the state machine calls this only after
   it raised the stored tier, so history gets one record per tier
2. NEVER RAISE - delivery problems are reported in DispatchOutcome
3. BADGE FOLLOWS SUPPORT - the badge also lands between transitions, via
   grant_creator_badge, when support crosses the threshold inside a tier
"""

from __future__ import annotations

from uuid import UUID, uuid4

from structlog import get_logger
from structlog.typing import FilteringBoundLogger

from issue_vitality.application.dtos.results import DispatchOutcome
from issue_vitality.application.ports.badge_store import BadgeStoreProtocol
from issue_vitality.application.ports.issue_store import IssueStoreProtocol
from issue_vitality.application.ports.notification_publisher import (
    NotificationPublisherProtocol,
)
from issue_vitality.application.ports.status_history import StatusHistoryProtocol
from issue_vitality.application.ports.time_authority import TimeAuthorityProtocol
from issue_vitality.config.vitality_config import VitalityConfig
from issue_vitality.domain.events.escalation import IssueEscalatedEvent
from issue_vitality.domain.models.badge import VOICE_HERO_BADGE, BadgeDefinition
from issue_vitality.domain.models.escalation_tier import EscalationTier
from issue_vitality.domain.models.status_update import StatusUpdate
from issue_vitality.domain.services.escalation_policy import tier_message
from issue_vitality.infrastructure.monitoring.vitality_metrics import (
    VitalityMetricsCollector,
)

logger = get_logger(__name__)

STEP_STATUS_HISTORY = "status_history"
STEP_BADGE = "badge"
STEP_PUBLISH = "publish"


class EscalationSideEffectDispatcher:
    """Performs the side effects of an escalation tier transition."""

    def __init__(
        self,
        status_history: StatusHistoryProtocol,
        badge_store: BadgeStoreProtocol,
        issue_store: IssueStoreProtocol,
        publisher: NotificationPublisherProtocol,
        time_authority: TimeAuthorityProtocol,
        config: VitalityConfig,
        metrics: VitalityMetricsCollector | None = None,
        badge: BadgeDefinition = VOICE_HERO_BADGE,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            status_history: Append-only escalation history.
            badge_store: Idempotent badge grants.
            issue_store: Source of the issue creator.
            publisher: Notification fan-out.
            time_authority: Clock for event timestamps.
            config: Thresholds and badge policy.
            metrics: Optional metrics collector.
            badge: The badge granted to qualifying creators.
        """
        self._status_history = status_history
        self._badge_store = badge_store
        self._issue_store = issue_store
        self._publisher = publisher
        self._time = time_authority
        self._config = config
        self._metrics = metrics
        self._badge = badge

    def creator_qualifies(self, support_percentage: float) -> bool:
        """Check if an issue at this support earns its creator the badge."""
        return support_percentage >= self._config.badge_support_threshold

    async def grant_creator_badge(self, issue_id: UUID, support_percentage: float) -> bool:
        """Grant the creator badge outside a tier transition.

        Used when support crosses the badge threshold while the tier stays
        put. Failures are logged and counted like any dispatch step.

        Returns:
            True if a new badge was granted.
        """
        log = logger.bind(issue_id=str(issue_id), support_percentage=support_percentage)
        return await self._grant_badge(issue_id, support_percentage, log, [])

    async def on_transition(
        self,
        issue_id: UUID,
        tier: EscalationTier,
        support_percentage: float,
        previous_tier: EscalationTier = EscalationTier.NONE,
    ) -> DispatchOutcome:
        """Run the side effects of entering `tier`.

        Args:
            issue_id: The escalated issue.
            tier: The tier just entered.
            support_percentage: Support at the moment of transition.
            previous_tier: The tier held before.

        Returns:
            DispatchOutcome describing which steps succeeded.
        """
        log = logger.bind(
            issue_id=str(issue_id),
            tier=tier.value,
            previous_tier=previous_tier.value,
            support_percentage=support_percentage,
        )
        failed_steps: list[str] = []

        status_update = await self._append_status(issue_id, tier, log, failed_steps)
        badge_granted = await self._grant_badge(issue_id, support_percentage, log, failed_steps)
        published = await self._publish(
            issue_id, tier, previous_tier, support_percentage, log, failed_steps
        )

        outcome = DispatchOutcome(
            issue_id=issue_id,
            tier=tier,
            status_update=status_update,
            badge_granted=badge_granted,
            published=published,
            failed_steps=tuple(failed_steps),
        )
        log.info(
            "escalation_dispatched",
            status_recorded=outcome.status_recorded,
            badge_granted=badge_granted,
            published=published,
            failed_steps=list(outcome.failed_steps),
        )
        return outcome

    async def _append_status(
        self,
        issue_id: UUID,
        tier: EscalationTier,
        log: FilteringBoundLogger,
        failed_steps: list[str],
    ) -> StatusUpdate | None:
        try:
            return await self._status_history.append_status_update(
                issue_id=issue_id,
                tier=tier,
                message=tier_message(tier, self._config.thresholds),
            )
        except Exception as e:
            self._record_failure(STEP_STATUS_HISTORY, failed_steps)
            log.error("status_history_append_failed", error=str(e))
            return None

    async def _grant_badge(
        self,
        issue_id: UUID,
        support_percentage: float,
        log: FilteringBoundLogger,
        failed_steps: list[str],
    ) -> bool:
        if not self.creator_qualifies(support_percentage):
            return False
        try:
            meta = await self._issue_store.get_issue_meta(issue_id)
            if meta is None or meta.created_by is None:
                log.debug("badge_skipped_no_creator")
                return False
            granted = await self._badge_store.grant_badge_if_absent(
                user_id=meta.created_by,
                badge_type=self._badge.badge_type,
                name=self._badge.name,
                description=self._badge.description,
            )
        except Exception as e:
            self._record_failure(STEP_BADGE, failed_steps)
            log.error("badge_grant_failed", badge_type=self._badge.badge_type, error=str(e))
            return False
        if granted:
            log.info(
                "badge_granted",
                user_id=str(meta.created_by),
                badge_type=self._badge.badge_type,
            )
        return granted

    async def _publish(
        self,
        issue_id: UUID,
        tier: EscalationTier,
        previous_tier: EscalationTier,
        support_percentage: float,
        log: FilteringBoundLogger,
        failed_steps: list[str],
    ) -> bool:
        event = IssueEscalatedEvent(
            event_id=uuid4(),
            issue_id=issue_id,
            tier=tier,
            previous_tier=previous_tier,
            support_percentage=support_percentage,
            occurred_at=self._time.utcnow(),
        )
        try:
            await self._publisher.publish(event)
        except Exception as e:
            self._record_failure(STEP_PUBLISH, failed_steps)
            log.warning("escalation_publish_failed", error=str(e))
            return False
        return True

    def _record_failure(self, step: str, failed_steps: list[str]) -> None:
        failed_steps.append(step)
        if self._metrics is not None:
            self._metrics.record_side_effect_failure(step)

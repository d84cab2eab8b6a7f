"""Result types returned by the engine's application services.

Frozen dataclasses, not pydantic models: these never cross the API
boundary as-is. Routes map them to response models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from issue_vitality.domain.models.escalation_tier import EscalationTier
from issue_vitality.domain.models.issue_aggregate import IssueAggregate
from issue_vitality.domain.models.status_update import StatusUpdate
from issue_vitality.domain.models.vote import Vote
from issue_vitality.domain.services.vitality_score import VitalityScore


@dataclass(frozen=True)
class DispatchOutcome:
    """What the side-effect dispatcher managed to do for one transition.

    Attributes:
        issue_id: The escalated issue.
        tier: The tier entered.
        status_update: The appended history record, None if the append failed.
        badge_granted: True if a new badge was granted, False if the
            creator already held it or did not qualify.
        published: True if the escalation event reached the fan-out.
        failed_steps: Names of the steps that raised
            ("status_history", "badge", "publish").
    """

    issue_id: UUID
    tier: EscalationTier
    status_update: StatusUpdate | None = None
    badge_granted: bool = False
    published: bool = False
    failed_steps: tuple[str, ...] = field(default_factory=tuple)

    @property
    def status_recorded(self) -> bool:
        """True if the status history record was appended."""
        return self.status_update is not None


@dataclass(frozen=True)
class EscalationEvaluation:
    """Outcome of one escalation evaluation.

    Attributes:
        issue_id: The evaluated issue.
        previous_tier: Tier stored before evaluation.
        candidate_tier: Tier earned by the current support.
        support_percentage: Support read from the issue store.
        fired: True if the stored tier was raised.
        dispatch: Side-effect outcome when fired.
        badge_granted: True if this evaluation granted the creator badge,
            with or without a transition.
    """

    issue_id: UUID
    previous_tier: EscalationTier
    candidate_tier: EscalationTier
    support_percentage: float
    fired: bool
    dispatch: DispatchOutcome | None = None
    badge_granted: bool = False

    @property
    def current_tier(self) -> EscalationTier:
        """Tier stored after evaluation."""
        return self.candidate_tier if self.fired else self.previous_tier


@dataclass(frozen=True)
class RecomputeResult:
    """Outcome of one aggregate recompute.

    Attributes:
        issue_id: The recomputed issue.
        score: The freshly computed score.
        aggregate: The aggregate as written, carrying the tier this
            recompute raised it to.
        evaluation: Escalation evaluation, None if it raised.
        escalation_error: The evaluation failure, if any. It never rolls
            back the aggregate write.
    """

    issue_id: UUID
    score: VitalityScore
    aggregate: IssueAggregate
    evaluation: EscalationEvaluation | None = None
    escalation_error: Exception | None = None

    @property
    def escalated(self) -> bool:
        """True if this recompute fired a tier transition."""
        return self.evaluation is not None and self.evaluation.fired


@dataclass(frozen=True)
class VoteSubmissionResult:
    """Outcome of a vote cast, replace or withdrawal.

    Attributes:
        issue_id: The rated issue.
        user_id: The voter.
        vote: The stored vote, None after a withdrawal.
        replaced: True if an earlier rating was replaced.
        removed: True if a withdrawal removed a vote.
        recompute: Inline recompute result, None when deferred.
        deferred: True if the recompute was handed to the background
            scheduler.
    """

    issue_id: UUID
    user_id: UUID
    vote: Vote | None
    replaced: bool = False
    removed: bool = False
    recompute: RecomputeResult | None = None
    deferred: bool = False

    @property
    def aggregate(self) -> IssueAggregate | None:
        """The aggregate written by the inline recompute, if any."""
        return self.recompute.aggregate if self.recompute is not None else None

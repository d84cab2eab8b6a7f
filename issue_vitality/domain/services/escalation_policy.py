"""Escalation policy domain service.

Pure decision rules for the escalation state machine:

| support percentage | tier     |
|--------------------|----------|
| >= national        | NATIONAL |
| >= state           | STATE    |
| >= local           | LOCAL    |
| below local        | NONE     |

The highest qualifying tier wins. A transition fires only when the
candidate tier outranks the stored tier, so tiers never move downward and
re-evaluating an already-crossed threshold is a no-op.
"""

from __future__ import annotations

from dataclasses import dataclass

from issue_vitality.domain.models.escalation_tier import EscalationTier

DEFAULT_LOCAL_THRESHOLD = 10.0
DEFAULT_STATE_THRESHOLD = 25.0
DEFAULT_NATIONAL_THRESHOLD = 50.0


@dataclass(frozen=True)
class EscalationThresholds:
    """Support percentages at which each tier is earned.

    Attributes:
        local: Minimum support for LOCAL.
        state: Minimum support for STATE.
        national: Minimum support for NATIONAL.
    """

    local: float = DEFAULT_LOCAL_THRESHOLD
    state: float = DEFAULT_STATE_THRESHOLD
    national: float = DEFAULT_NATIONAL_THRESHOLD

    def __post_init__(self) -> None:
        """Validate threshold ordering."""
        if self.local <= 0:
            raise ValueError(f"local threshold must be positive, got {self.local}")
        if not self.local < self.state < self.national:
            raise ValueError(
                "thresholds must be strictly increasing: "
                f"local={self.local}, state={self.state}, national={self.national}"
            )

    def threshold_for(self, tier: EscalationTier) -> float | None:
        """Get the support threshold for a tier.

        Returns:
            The threshold, or None for NONE.
        """
        if tier is EscalationTier.NATIONAL:
            return self.national
        if tier is EscalationTier.STATE:
            return self.state
        if tier is EscalationTier.LOCAL:
            return self.local
        return None


@dataclass(frozen=True)
class TierDecision:
    """Outcome of comparing a candidate tier with the stored tier.

    Attributes:
        current_tier: Tier stored on the issue.
        candidate_tier: Tier earned by the current support percentage.
        fires: True when the candidate outranks the stored tier.
    """

    current_tier: EscalationTier
    candidate_tier: EscalationTier
    fires: bool


def candidate_tier(
    support_percentage: float,
    thresholds: EscalationThresholds,
) -> EscalationTier:
    """Map a support percentage to the highest tier it earns.

    Examples:
        >>> candidate_tier(10.5, EscalationThresholds())
        <EscalationTier.LOCAL: 'local'>
        >>> candidate_tier(9.99, EscalationThresholds())
        <EscalationTier.NONE: 'none'>
    """
    if support_percentage >= thresholds.national:
        return EscalationTier.NATIONAL
    if support_percentage >= thresholds.state:
        return EscalationTier.STATE
    if support_percentage >= thresholds.local:
        return EscalationTier.LOCAL
    return EscalationTier.NONE


def decide_transition(
    current_tier: EscalationTier,
    support_percentage: float,
    thresholds: EscalationThresholds,
) -> TierDecision:
    """Decide whether a tier transition fires.

    Args:
        current_tier: Tier stored on the issue.
        support_percentage: Current support percentage.
        thresholds: Configured thresholds.

    Returns:
        TierDecision; fires is False whenever the candidate does not
        strictly outrank the stored tier, including after support drops.
    """
    candidate = candidate_tier(support_percentage, thresholds)
    return TierDecision(
        current_tier=current_tier,
        candidate_tier=candidate,
        fires=candidate.outranks(current_tier),
    )


def _format_percent(value: float) -> str:
    return f"{value:g}"


def tier_message(tier: EscalationTier, thresholds: EscalationThresholds) -> str:
    """Status-history message for entering a tier.

    Examples:
        >>> tier_message(EscalationTier.STATE, EscalationThresholds())
        'Issue escalated to state level due to 25%+ support'
    """
    threshold = thresholds.threshold_for(tier)
    if threshold is None:
        raise ValueError("no escalation message for tier NONE")
    percent = _format_percent(threshold)
    if tier is EscalationTier.LOCAL:
        return f"Issue escalated to local representatives due to {percent}%+ support"
    return f"Issue escalated to {tier.value} level due to {percent}%+ support"

"""Vitality score domain service.

Pure functions that turn an issue's rating set into its vitality score
and support percentage. Nothing here reads the clock: the caller passes
`now`, read once per recompute, so one computation never mixes two times.

Score composition:
    rating component     = average rating * 20          (20..100)
    engagement component = min(vote count * 2, 50)      (0..50)
    recency component    = max(1, 7 - age in days)      (1..7)

    vitality score = rating + engagement + recency      (<= 157)

Support percentage is vote count / ward population * 100 and is not
clamped; presentation layers normalize when they need a bounded value.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta

from issue_vitality.domain.errors.invariant import (
    InvalidWardPopulationError,
    validate_rating,
)
from issue_vitality.domain.models.vote import RatingSample

RATING_WEIGHT = 20
ENGAGEMENT_POINTS_PER_VOTE = 2
ENGAGEMENT_CAP = 50
RECENCY_WINDOW_DAYS = 7
RECENCY_FLOOR = 1

MAX_VITALITY_SCORE = 5 * RATING_WEIGHT + ENGAGEMENT_CAP + RECENCY_WINDOW_DAYS


@dataclass(frozen=True, eq=True)
class VitalityScore:
    """Result of scoring one issue.

    Attributes:
        vitality_score: Composite score.
        support_percentage: Share of the ward that voted, in percent.
        vote_count: Number of ratings scored.
        average_rating: Mean rating, 0.0 when there are no ratings.
        engagement_score: Engagement component.
        time_factor: Recency component, 0 when there are no ratings.
    """

    vitality_score: float
    support_percentage: float
    vote_count: int
    average_rating: float
    engagement_score: int
    time_factor: int


EMPTY_SCORE = VitalityScore(
    vitality_score=0.0,
    support_percentage=0.0,
    vote_count=0,
    average_rating=0.0,
    engagement_score=0,
    time_factor=0,
)


def engagement_score(vote_count: int) -> int:
    """Engagement points for a number of votes, saturating at 25 votes.

    Examples:
        >>> engagement_score(5)
        10
        >>> engagement_score(1000)
        50
    """
    return min(vote_count * ENGAGEMENT_POINTS_PER_VOTE, ENGAGEMENT_CAP)


def time_factor(issue_created_at: datetime, now: datetime) -> int:
    """Recency bonus that decays by one point per whole day of age.

    An issue created in the future (clock skew between writers) is treated
    as age 0 so the bonus never exceeds the window size.

    Examples:
        >>> from datetime import timezone
        >>> created = datetime(2026, 1, 1, tzinfo=timezone.utc)
        >>> time_factor(created, created)
        7
        >>> time_factor(created, created + timedelta(days=30))
        1
    """
    age_days = max(0, (now - issue_created_at) // timedelta(days=1))
    return max(RECENCY_FLOOR, RECENCY_WINDOW_DAYS - age_days)


def support_percentage(vote_count: int, ward_population: int) -> float:
    """Share of a ward's population that voted, in percent.

    Args:
        vote_count: Distinct voters on the issue.
        ward_population: Population of the issue's ward.

    Returns:
        Percentage, not clamped to 100.

    Raises:
        InvalidWardPopulationError: If ward_population is not a positive int.

    Examples:
        >>> support_percentage(5, 10_000)
        0.05
        >>> support_percentage(1050, 10_000)
        10.5
    """
    if (
        isinstance(ward_population, bool)
        or not isinstance(ward_population, int)
        or ward_population <= 0
    ):
        raise InvalidWardPopulationError(ward_population)
    return vote_count * 100 / ward_population


def compute_vitality(
    ratings: Sequence[RatingSample],
    issue_created_at: datetime,
    now: datetime,
    ward_population: int,
) -> VitalityScore:
    """Score an issue from its full rating set.

    Args:
        ratings: Every current rating on the issue, one per voter.
        issue_created_at: The issue's creation timestamp.
        now: The single clock reading for this computation.
        ward_population: Population of the issue's ward.

    Returns:
        VitalityScore with the composite score and its components.

    Raises:
        InvalidRatingError: If any rating is outside 1..5.
        InvalidWardPopulationError: If ward_population is not positive.
    """
    # Validate the denominator even for empty sets so misconfiguration surfaces early
    if not ratings:
        support_percentage(0, ward_population)
        return EMPTY_SCORE

    count = len(ratings)
    total = sum(validate_rating(sample.rating) for sample in ratings)

    engagement = engagement_score(count)
    recency = time_factor(issue_created_at, now)
    rating_component = total * RATING_WEIGHT / count

    return VitalityScore(
        vitality_score=rating_component + engagement + recency,
        support_percentage=support_percentage(count, ward_population),
        vote_count=count,
        average_rating=total / count,
        engagement_score=engagement,
        time_factor=recency,
    )

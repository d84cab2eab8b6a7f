"""Invariant violation errors.

Inputs that break the engine's numeric invariants are rejected at the
boundary. They are never clamped into range.
"""

from __future__ import annotations

from issue_vitality.domain.exceptions import VitalityEngineError

MIN_RATING = 1
MAX_RATING = 5


class InvariantViolationError(VitalityEngineError):
    """Base error for rejected inputs.

    HTTP Status: 422 Unprocessable Entity
    """

    problem_type = "urn:issue-vitality:invariant:violation"
    title = "Invariant Violation"

    def to_problem_dict(self) -> dict:
        """Serialize to RFC 7807 problem details.

        Returns:
            Dictionary conforming to RFC 7807 problem details.
        """
        return {
            "type": self.problem_type,
            "title": self.title,
            "status": 422,
            "detail": str(self),
        }


class InvalidRatingError(InvariantViolationError):
    """Raised when a rating falls outside 1..5.

    Attributes:
        rating: The rejected rating value.
    """

    problem_type = "urn:issue-vitality:invariant:invalid-rating"
    title = "Invalid Rating"

    def __init__(self, rating: object) -> None:
        """Initialize the error.

        Args:
            rating: The rejected rating value.
        """
        self.rating = rating
        super().__init__(
            f"Rating must be an integer between {MIN_RATING} and {MAX_RATING}, "
            f"got {rating!r}"
        )


class NegativeVoteCountError(InvariantViolationError):
    """Raised when an aggregate would carry a negative vote count.

    Attributes:
        vote_count: The rejected count.
    """

    problem_type = "urn:issue-vitality:invariant:negative-vote-count"
    title = "Negative Vote Count"

    def __init__(self, vote_count: int) -> None:
        """Initialize the error.

        Args:
            vote_count: The rejected count.
        """
        self.vote_count = vote_count
        super().__init__(f"Vote count must be non-negative, got {vote_count}")


class InvalidWardPopulationError(InvariantViolationError):
    """Raised when a ward population is not a positive integer.

    Attributes:
        ward_population: The rejected population.
    """

    problem_type = "urn:issue-vitality:invariant:invalid-ward-population"
    title = "Invalid Ward Population"

    def __init__(self, ward_population: object) -> None:
        """Initialize the error.

        Args:
            ward_population: The rejected population.
        """
        self.ward_population = ward_population
        super().__init__(
            f"Ward population must be a positive integer, got {ward_population!r}"
        )


def validate_rating(rating: object) -> int:
    """Return the rating if it is an int in 1..5.

    Booleans are rejected even though they subclass int.

    Raises:
        InvalidRatingError: If the rating is out of range or not an int.
    """
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise InvalidRatingError(rating)
    if rating < MIN_RATING or rating > MAX_RATING:
        raise InvalidRatingError(rating)
    return rating

"""Vote domain models.

This module defines the rating records owned by the vote ledger:
- Vote: One user's rating of one issue
- RatingSample: The slice of a vote the score calculator needs

A user holds at most one vote per issue. Voting again replaces the
rating; it never adds a second vote.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID

from issue_vitality.domain.errors.invariant import validate_rating


@dataclass(frozen=True, eq=True)
class RatingSample:
    """A single rating as seen by the score calculator.

    Attributes:
        rating: Star rating in 1..5.
        created_at: When the vote was first cast (UTC timezone-aware).
    """

    rating: int
    created_at: datetime

    def __post_init__(self) -> None:
        """Validate the rating.

        Raises:
            InvalidRatingError: If rating is outside 1..5.
        """
        validate_rating(self.rating)


@dataclass(frozen=True, eq=True)
class Vote:
    """A user's rating of an issue.

    The (issue_id, user_id) pair is unique within the vote ledger.

    Attributes:
        issue_id: The issue being rated.
        user_id: The voter.
        rating: Star rating in 1..5.
        created_at: When the vote was first cast (UTC timezone-aware).
        updated_at: When the rating was last replaced, if ever.
    """

    issue_id: UUID
    user_id: UUID
    rating: int
    created_at: datetime
    updated_at: Optional[datetime] = field(default=None)

    def __post_init__(self) -> None:
        """Validate vote fields after initialization.

        Raises:
            InvalidRatingError: If rating is outside 1..5.
            ValueError: If created_at is naive.
        """
        validate_rating(self.rating)
        if self.created_at.tzinfo is None:
            raise ValueError("created_at must be timezone-aware (UTC)")

    def with_rating(self, rating: int, updated_at: datetime) -> Vote:
        """Return a copy carrying a replaced rating.

        The original created_at is kept so recency stays tied to the
        first vote.

        Args:
            rating: The new rating.
            updated_at: When the rating was replaced.

        Returns:
            The replacement vote.
        """
        return Vote(
            issue_id=self.issue_id,
            user_id=self.user_id,
            rating=rating,
            created_at=self.created_at,
            updated_at=updated_at,
        )

    def to_sample(self) -> RatingSample:
        """Project this vote onto the score calculator's input."""
        return RatingSample(rating=self.rating, created_at=self.created_at)

    def to_dict(self) -> dict:
        """Serialize to dictionary for events and API payloads.

        Returns:
            Dictionary with string UUIDs and ISO timestamps.
        """
        return {
            "issue_id": str(self.issue_id),
            "user_id": str(self.user_id),
            "rating": self.rating,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

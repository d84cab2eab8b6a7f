"""Vote ledger port.

The vote ledger durably stores one rating per (user, issue) pair. It owns
the one-vote-per-user invariant: upserting an existing pair replaces the
rating instead of adding a second vote. The engine treats the ledger as
read-only input apart from the vote submission path.
"""

from __future__ import annotations

from abc import abstractmethod
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from issue_vitality.domain.models.vote import RatingSample, Vote


@dataclass(frozen=True)
class VoteUpsertResult:
    """Result of upserting a vote.

    Attributes:
        vote: The vote as stored.
        replaced: True if an earlier rating by the same user was replaced.
        previous_rating: The replaced rating, if any.
    """

    vote: Vote
    replaced: bool
    previous_rating: int | None = None


class VoteLedgerProtocol(Protocol):
    """Repository protocol for vote persistence.

    Implementations must ensure:
    - Unique (issue_id, user_id), enforced by upsert-by-identity
    - list_ratings returns every current rating, one per voter

    Raises:
        TransientStoreError: From any method when the store fails.
    """

    @abstractmethod
    async def list_ratings(self, issue_id: UUID) -> list[RatingSample]:
        """List all current ratings for an issue.

        Args:
            issue_id: The issue to read.

        Returns:
            One RatingSample per voter (empty if nobody voted).
        """
        ...

    @abstractmethod
    async def upsert_vote(
        self,
        user_id: UUID,
        issue_id: UUID,
        rating: int,
    ) -> VoteUpsertResult:
        """Create a vote or replace the user's existing rating.

        Args:
            user_id: The voter.
            issue_id: The issue being rated.
            rating: Star rating in 1..5.

        Returns:
            VoteUpsertResult with the stored vote and replace flag.
        """
        ...

    @abstractmethod
    async def get_vote(self, user_id: UUID, issue_id: UUID) -> Vote | None:
        """Get a user's vote on an issue.

        Returns:
            The vote, or None if the user has not voted.
        """
        ...

    @abstractmethod
    async def delete_vote(self, user_id: UUID, issue_id: UUID) -> bool:
        """Withdraw a user's vote.

        Returns:
            True if a vote was removed, False if none existed.
        """
        ...

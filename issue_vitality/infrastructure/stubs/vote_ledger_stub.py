"""In-memory stub for VoteLedgerProtocol.

This stub simulates the votes table, including:
- Unique (issue_id, user_id) enforced by upsert-by-identity
- Replace-on-revote keeping the original created_at
- Injected TransientStoreError per operation

Every method yields to the event loop once before touching state, like a
real database round trip, so concurrent tests interleave realistically.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from uuid import UUID

from issue_vitality.application.ports.time_authority import TimeAuthorityProtocol
from issue_vitality.application.ports.vote_ledger import (
    VoteLedgerProtocol,
    VoteUpsertResult,
)
from issue_vitality.domain.errors.invariant import validate_rating
from issue_vitality.domain.models.vote import RatingSample, Vote
from issue_vitality.infrastructure.stubs.store_faults import StoreFaultInjector


class VoteLedgerStub(VoteLedgerProtocol):
    """In-memory vote ledger keyed by (issue_id, user_id).

    Attributes:
        faults: Failure switches, see StoreFaultInjector.
    """

    def __init__(self, time_authority: TimeAuthorityProtocol | None = None) -> None:
        """Initialize empty stub.

        Args:
            time_authority: Clock for vote timestamps (wall clock if None).
        """
        self._time = time_authority
        self._votes: dict[tuple[UUID, UUID], Vote] = {}
        self.faults = StoreFaultInjector()

    def _now(self) -> datetime:
        if self._time is None:
            return datetime.now(timezone.utc)
        return self._time.utcnow()

    async def list_ratings(self, issue_id: UUID) -> list[RatingSample]:
        """List all current ratings for an issue."""
        await asyncio.sleep(0)
        self.faults.check("list_ratings", issue_id)
        return [
            vote.to_sample()
            for (vote_issue_id, _), vote in self._votes.items()
            if vote_issue_id == issue_id
        ]

    async def upsert_vote(
        self,
        user_id: UUID,
        issue_id: UUID,
        rating: int,
    ) -> VoteUpsertResult:
        """Create a vote or replace the user's existing rating."""
        validate_rating(rating)
        await asyncio.sleep(0)
        self.faults.check("upsert_vote", issue_id)

        key = (issue_id, user_id)
        now = self._now()
        existing = self._votes.get(key)
        if existing is None:
            vote = Vote(issue_id=issue_id, user_id=user_id, rating=rating, created_at=now)
            self._votes[key] = vote
            return VoteUpsertResult(vote=vote, replaced=False)

        vote = existing.with_rating(rating, updated_at=now)
        self._votes[key] = vote
        return VoteUpsertResult(
            vote=vote,
            replaced=True,
            previous_rating=existing.rating,
        )

    async def get_vote(self, user_id: UUID, issue_id: UUID) -> Vote | None:
        """Get a user's vote on an issue."""
        await asyncio.sleep(0)
        self.faults.check("get_vote", issue_id)
        return self._votes.get((issue_id, user_id))

    async def delete_vote(self, user_id: UUID, issue_id: UUID) -> bool:
        """Withdraw a user's vote."""
        await asyncio.sleep(0)
        self.faults.check("delete_vote", issue_id)
        return self._votes.pop((issue_id, user_id), None) is not None

    # Test helper methods

    def add_vote(self, vote: Vote) -> None:
        """Seed a vote directly, bypassing upsert timestamps."""
        self._votes[(vote.issue_id, vote.user_id)] = vote

    def vote_count(self, issue_id: UUID) -> int:
        """Count stored votes for an issue."""
        return sum(1 for vote_issue_id, _ in self._votes if vote_issue_id == issue_id)

    def reset(self) -> None:
        """Reset all stored data and failure switches."""
        self._votes.clear()
        self.faults.clear()

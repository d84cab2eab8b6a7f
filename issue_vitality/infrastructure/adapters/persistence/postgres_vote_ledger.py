"""PostgreSQL implementation of VoteLedgerProtocol.

The (issue_id, user_id) primary key enforces one vote per user per
issue; upsert_vote relies on INSERT ... ON CONFLICT DO UPDATE so a
concurrent first vote and revote cannot produce two rows.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from issue_vitality.application.ports.vote_ledger import (
    VoteLedgerProtocol,
    VoteUpsertResult,
)
from issue_vitality.domain.errors.invariant import validate_rating
from issue_vitality.domain.models.vote import RatingSample, Vote
from issue_vitality.infrastructure.adapters.persistence.session import store_operation


class PostgresVoteLedger(VoteLedgerProtocol):
    """Vote ledger backed by the votes table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize with a SQLAlchemy async session factory."""
        self._session_factory = session_factory

    async def list_ratings(self, issue_id: UUID) -> list[RatingSample]:
        """List all current ratings for an issue."""
        async with store_operation("list_ratings", issue_id):
            async with self._session_factory() as session:
                result = await session.execute(
                    text("""
                        SELECT rating, created_at
                        FROM votes
                        WHERE issue_id = :issue_id
                    """),
                    {"issue_id": issue_id},
                )
                rows = result.fetchall()
        return [RatingSample(rating=row.rating, created_at=row.created_at) for row in rows]

    async def upsert_vote(
        self,
        user_id: UUID,
        issue_id: UUID,
        rating: int,
    ) -> VoteUpsertResult:
        """Create a vote or replace the user's existing rating.

        SQL Pattern:
            INSERT ... ON CONFLICT (issue_id, user_id) DO UPDATE
            RETURNING ..., (xmax = 0) AS inserted

        The previous rating is read in the same statement from a locking
        CTE so the result reports what was replaced.
        """
        validate_rating(rating)
        async with store_operation("upsert_vote", issue_id):
            async with self._session_factory() as session:
                result = await session.execute(
                    text("""
                        WITH previous AS (
                            SELECT rating
                            FROM votes
                            WHERE issue_id = :issue_id AND user_id = :user_id
                            FOR UPDATE
                        )
                        INSERT INTO votes (issue_id, user_id, rating, created_at)
                        VALUES (:issue_id, :user_id, :rating, now())
                        ON CONFLICT (issue_id, user_id) DO UPDATE
                            SET rating = EXCLUDED.rating,
                                updated_at = now()
                        RETURNING rating, created_at, updated_at,
                                  (xmax = 0) AS inserted,
                                  (SELECT rating FROM previous) AS previous_rating
                    """),
                    {"issue_id": issue_id, "user_id": user_id, "rating": rating},
                )
                row = result.one()
                await session.commit()

        vote = Vote(
            issue_id=issue_id,
            user_id=user_id,
            rating=row.rating,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )
        replaced = not row.inserted
        return VoteUpsertResult(
            vote=vote,
            replaced=replaced,
            previous_rating=row.previous_rating if replaced else None,
        )

    async def get_vote(self, user_id: UUID, issue_id: UUID) -> Vote | None:
        """Get a user's vote on an issue."""
        async with store_operation("get_vote", issue_id):
            async with self._session_factory() as session:
                result = await session.execute(
                    text("""
                        SELECT rating, created_at, updated_at
                        FROM votes
                        WHERE issue_id = :issue_id AND user_id = :user_id
                    """),
                    {"issue_id": issue_id, "user_id": user_id},
                )
                row = result.fetchone()
        if row is None:
            return None
        return Vote(
            issue_id=issue_id,
            user_id=user_id,
            rating=row.rating,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    async def delete_vote(self, user_id: UUID, issue_id: UUID) -> bool:
        """Withdraw a user's vote."""
        async with store_operation("delete_vote", issue_id):
            async with self._session_factory() as session:
                result = await session.execute(
                    text("""
                        DELETE FROM votes
                        WHERE issue_id = :issue_id AND user_id = :user_id
                        RETURNING issue_id
                    """),
                    {"issue_id": issue_id, "user_id": user_id},
                )
                deleted = result.fetchone() is not None
                await session.commit()
        return deleted

"""PostgreSQL adapter integration tests.

Runs the four adapters and the wired engine against a real PostgreSQL
16 container to check the constraints that the in-memory stubs only
simulate: vote uniqueness, conditional tier raise and badge primary key.
"""

from __future__ import annotations

import asyncio
from uuid import UUID, uuid4

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from issue_vitality.application.services import (
    DeferredRecomputeScheduler,
    EscalationSideEffectDispatcher,
    EscalationStateMachine,
    IssueAggregateUpdater,
    NotificationFanoutService,
    VoteSubmissionService,
)
from issue_vitality.config.vitality_config import TEST_VITALITY_CONFIG
from issue_vitality.domain.errors import IssueNotFoundError
from issue_vitality.domain.models.escalation_tier import EscalationTier
from issue_vitality.infrastructure.adapters.keyed_lock import KeyedAsyncLock
from issue_vitality.infrastructure.adapters.persistence import (
    PostgresBadgeStore,
    PostgresIssueStore,
    PostgresStatusHistory,
    PostgresVoteLedger,
)
from tests.helpers import FakeTimeAuthority

pytestmark = pytest.mark.integration


async def _insert_issue(
    factory: async_sessionmaker[AsyncSession],
    ward: str = "ward-1",
    created_by: UUID | None = None,
) -> UUID:
    issue_id = uuid4()
    async with factory() as session:
        await session.execute(
            text(
                "INSERT INTO issues (id, ward_number, created_by) "
                "VALUES (:id, :ward, :created_by)"
            ),
            {"id": issue_id, "ward": ward, "created_by": created_by},
        )
        await session.commit()
    return issue_id


class TestPostgresVoteLedger:
    async def test_upsert_replaces_rating(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        ledger = PostgresVoteLedger(session_factory)
        issue_id = await _insert_issue(session_factory)
        user_id = uuid4()

        first = await ledger.upsert_vote(user_id, issue_id, 2)
        second = await ledger.upsert_vote(user_id, issue_id, 5)

        assert first.replaced is False
        assert second.replaced is True
        assert second.previous_rating == 2
        assert [s.rating for s in await ledger.list_ratings(issue_id)] == [5]

    async def test_concurrent_upserts_keep_one_row(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        ledger = PostgresVoteLedger(session_factory)
        issue_id = await _insert_issue(session_factory)
        user_id = uuid4()

        await asyncio.gather(*(ledger.upsert_vote(user_id, issue_id, r) for r in range(1, 6)))

        assert len(await ledger.list_ratings(issue_id)) == 1

    async def test_delete_vote(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        ledger = PostgresVoteLedger(session_factory)
        issue_id = await _insert_issue(session_factory)
        user_id = uuid4()
        await ledger.upsert_vote(user_id, issue_id, 3)

        assert await ledger.delete_vote(user_id, issue_id) is True
        assert await ledger.delete_vote(user_id, issue_id) is False
        assert await ledger.get_vote(user_id, issue_id) is None


class TestPostgresIssueStore:
    async def test_tier_only_rises(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        store = PostgresIssueStore(session_factory)
        issue_id = await _insert_issue(session_factory)

        assert await store.set_escalation_tier(issue_id, EscalationTier.STATE) is True
        assert await store.set_escalation_tier(issue_id, EscalationTier.LOCAL) is False
        assert await store.set_escalation_tier(issue_id, EscalationTier.STATE) is False
        assert await store.get_escalation_tier(issue_id) is EscalationTier.STATE

    async def test_concurrent_raises_succeed_once(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        store = PostgresIssueStore(session_factory)
        issue_id = await _insert_issue(session_factory)

        results = await asyncio.gather(
            *(store.set_escalation_tier(issue_id, EscalationTier.LOCAL) for _ in range(5))
        )

        assert results.count(True) == 1

    async def test_unknown_issue(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        store = PostgresIssueStore(session_factory)

        assert await store.get_issue_meta(uuid4()) is None
        with pytest.raises(IssueNotFoundError):
            await store.set_escalation_tier(uuid4(), EscalationTier.LOCAL)


class TestPostgresBadgeAndHistory:
    async def test_concurrent_badge_grants_once(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        badges = PostgresBadgeStore(session_factory)
        user_id = uuid4()

        results = await asyncio.gather(
            *(
                badges.grant_badge_if_absent(user_id, "issue_escalated", "Voice Heard", "")
                for _ in range(5)
            )
        )

        assert results.count(True) == 1
        assert len(await badges.list_badges(user_id)) == 1

    async def test_history_in_append_order(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> None:
        history = PostgresStatusHistory(session_factory)
        issue_id = await _insert_issue(session_factory)

        await history.append_status_update(issue_id, EscalationTier.LOCAL, "local")
        await history.append_status_update(issue_id, EscalationTier.STATE, "state")

        updates = await history.list_status_updates(issue_id)
        assert [u.tier for u in updates] == [EscalationTier.LOCAL, EscalationTier.STATE]


async def test_engine_over_postgres(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    config = TEST_VITALITY_CONFIG
    time = FakeTimeAuthority()
    creator = uuid4()
    issue_id = await _insert_issue(session_factory, created_by=creator)

    ledger = PostgresVoteLedger(session_factory)
    issues = PostgresIssueStore(session_factory)
    history = PostgresStatusHistory(session_factory)
    badges = PostgresBadgeStore(session_factory)
    fanout = NotificationFanoutService()
    dispatcher = EscalationSideEffectDispatcher(
        status_history=history,
        badge_store=badges,
        issue_store=issues,
        publisher=fanout,
        time_authority=time,
        config=config,
    )
    updater = IssueAggregateUpdater(
        vote_ledger=ledger,
        issue_store=issues,
        state_machine=EscalationStateMachine(issues, dispatcher, config.thresholds),
        issue_lock=KeyedAsyncLock(),
        time_authority=time,
        populations=config.populations,
    )
    scheduler = DeferredRecomputeScheduler(updater, base_delay_seconds=0.0)
    votes = VoteSubmissionService(
        vote_ledger=ledger,
        issue_store=issues,
        updater=updater,
        scheduler=scheduler,
        publisher=fanout,
        time_authority=time,
        config=config,
    )

    await asyncio.gather(*(votes.submit_vote(issue_id, uuid4(), 4) for _ in range(22)))
    await scheduler.drain()

    aggregate = await issues.get_aggregate(issue_id)
    assert aggregate is not None
    assert aggregate.vote_count == 22
    assert aggregate.support_percentage == pytest.approx(22.0)
    assert aggregate.escalation_tier is EscalationTier.LOCAL
    assert [u.tier for u in await history.list_status_updates(issue_id)] == [
        EscalationTier.LOCAL
    ]
    assert len(await badges.list_badges(creator)) == 1

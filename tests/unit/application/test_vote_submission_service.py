"""Unit tests for VoteSubmissionService.

A vote is durable once the ledger accepts it. Recompute failures and
timeouts defer the recompute; they never fail the vote.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from issue_vitality.application.dtos.notification import NotificationEventType
from issue_vitality.application.services.issue_aggregate_updater import (
    IssueAggregateUpdater,
)
from issue_vitality.application.services.recompute_scheduler import (
    DeferredRecomputeScheduler,
)
from issue_vitality.application.services.vote_submission_service import (
    VoteSubmissionService,
)
from issue_vitality.config.vitality_config import TEST_VITALITY_CONFIG, RecomputeMode
from issue_vitality.domain.errors import (
    InvalidRatingError,
    IssueNotFoundError,
    TransientStoreError,
)
from issue_vitality.infrastructure.stubs import NotificationPublisherStub
from tests.helpers import EngineHarness, build_engine, sample_total


@pytest.fixture
def engine() -> EngineHarness:
    return build_engine()


@pytest.fixture
def issue_id(engine: EngineHarness) -> UUID:
    return engine.add_issue().issue_id


class TestSubmitVote:
    async def test_first_vote(self, engine: EngineHarness, issue_id: UUID) -> None:
        user_id = uuid4()

        result = await engine.votes.submit_vote(issue_id, user_id, 4)

        assert result.replaced is False
        assert result.deferred is False
        assert result.vote is not None and result.vote.rating == 4
        assert result.aggregate is not None
        assert result.aggregate.vote_count == 1
        assert result.aggregate.vitality_score == pytest.approx(80 + 2 + 7)

    async def test_revote_replaces(self, engine: EngineHarness, issue_id: UUID) -> None:
        user_id = uuid4()
        await engine.votes.submit_vote(issue_id, user_id, 1)

        result = await engine.votes.submit_vote(issue_id, user_id, 5)

        assert result.replaced is True
        assert result.aggregate is not None
        assert result.aggregate.vote_count == 1
        assert result.recompute is not None
        assert result.recompute.score.average_rating == 5.0
        assert engine.vote_ledger.vote_count(issue_id) == 1

    @pytest.mark.parametrize("rating", [0, 6, True])
    async def test_invalid_rating_touches_nothing(
        self, engine: EngineHarness, issue_id: UUID, rating: int
    ) -> None:
        with pytest.raises(InvalidRatingError):
            await engine.votes.submit_vote(issue_id, uuid4(), rating)

        assert engine.vote_ledger.vote_count(issue_id) == 0
        assert engine.issue_store.write_count == 0

    async def test_unknown_issue(self, engine: EngineHarness) -> None:
        with pytest.raises(IssueNotFoundError):
            await engine.votes.submit_vote(uuid4(), uuid4(), 3)

    async def test_ledger_failure_propagates(
        self, engine: EngineHarness, issue_id: UUID
    ) -> None:
        engine.vote_ledger.faults.fail("upsert_vote")

        with pytest.raises(TransientStoreError):
            await engine.votes.submit_vote(issue_id, uuid4(), 3)

        assert engine.issue_store.write_count == 0

    async def test_publishes_vote_update(
        self, engine: EngineHarness, issue_id: UUID
    ) -> None:
        _, queue = engine.fanout.register_connection([NotificationEventType.VOTE_UPDATE])
        user_id = uuid4()

        await engine.votes.submit_vote(issue_id, user_id, 2)

        message = queue.get_nowait()
        assert message.event_type == "vote_update"
        assert message.data["user_id"] == str(user_id)
        assert message.data["rating"] == 2

    async def test_publish_failure_does_not_fail_vote(self, engine: EngineHarness) -> None:
        issue_id = engine.add_issue().issue_id
        publisher = NotificationPublisherStub()
        publisher.fail_with = RuntimeError("fan-out down")
        service = VoteSubmissionService(
            vote_ledger=engine.vote_ledger,
            issue_store=engine.issue_store,
            updater=engine.updater,
            scheduler=engine.scheduler,
            publisher=publisher,
            time_authority=engine.time,
            config=engine.config,
        )

        result = await service.submit_vote(issue_id, uuid4(), 3)

        assert result.aggregate is not None
        assert result.aggregate.vote_count == 1


class TestRecomputeModes:
    async def test_deferred_mode(self) -> None:
        engine = build_engine(
            config=replace(TEST_VITALITY_CONFIG, recompute_mode=RecomputeMode.DEFERRED)
        )
        issue_id = engine.add_issue().issue_id

        result = await engine.votes.submit_vote(issue_id, uuid4(), 5)

        assert result.deferred is True
        assert result.recompute is None
        assert engine.scheduler.is_pending(issue_id)

        await engine.scheduler.drain()

        aggregate = await engine.issue_store.get_aggregate(issue_id)
        assert aggregate is not None and aggregate.vote_count == 1
        assert (
            sample_total(
                engine.metrics, "vitality_deferred_recomputes_total", reason="deferred_mode"
            )
            == 1
        )

    async def test_store_error_defers_and_retries(
        self, engine: EngineHarness, issue_id: UUID
    ) -> None:
        engine.issue_store.faults.fail("write_aggregate", times=1)

        result = await engine.votes.submit_vote(issue_id, uuid4(), 4)

        assert result.deferred is True
        assert result.vote is not None
        await engine.scheduler.drain()
        aggregate = await engine.issue_store.get_aggregate(issue_id)
        assert aggregate is not None and aggregate.vote_count == 1
        assert (
            sample_total(
                engine.metrics, "vitality_deferred_recomputes_total", reason="store_error"
            )
            == 1
        )

    async def test_timeout_hands_running_recompute_to_scheduler(
        self, engine: EngineHarness, issue_id: UUID
    ) -> None:
        updater = AsyncMock(spec=IssueAggregateUpdater)
        release = asyncio.Event()
        finished: list[UUID] = []

        async def slow(requested: UUID) -> None:
            await release.wait()
            finished.append(requested)

        updater.recompute.side_effect = slow
        scheduler = DeferredRecomputeScheduler(updater=updater)
        service = VoteSubmissionService(
            vote_ledger=engine.vote_ledger,
            issue_store=engine.issue_store,
            updater=updater,
            scheduler=scheduler,
            publisher=engine.fanout,
            time_authority=engine.time,
            config=replace(TEST_VITALITY_CONFIG, recompute_timeout_seconds=0.01),
        )

        result = await service.submit_vote(issue_id, uuid4(), 4)

        assert result.deferred is True
        assert engine.vote_ledger.vote_count(issue_id) == 1
        assert scheduler.is_pending(issue_id)

        release.set()
        await scheduler.drain()

        assert finished == [issue_id]
        assert updater.recompute.await_count == 1
        assert scheduler.pending_count == 0

    async def test_cancelled_caller_leaves_recompute_running(
        self, engine: EngineHarness, issue_id: UUID
    ) -> None:
        updater = AsyncMock(spec=IssueAggregateUpdater)
        started = asyncio.Event()
        release = asyncio.Event()
        finished: list[UUID] = []

        async def slow(requested: UUID) -> None:
            started.set()
            await release.wait()
            finished.append(requested)

        updater.recompute.side_effect = slow
        scheduler = DeferredRecomputeScheduler(updater=updater)
        service = VoteSubmissionService(
            vote_ledger=engine.vote_ledger,
            issue_store=engine.issue_store,
            updater=updater,
            scheduler=scheduler,
            publisher=engine.fanout,
            time_authority=engine.time,
            config=TEST_VITALITY_CONFIG,
        )

        request = asyncio.create_task(service.submit_vote(issue_id, uuid4(), 4))
        await started.wait()
        request.cancel()
        with pytest.raises(asyncio.CancelledError):
            await request

        assert scheduler.is_pending(issue_id)
        release.set()
        await scheduler.drain()

        assert finished == [issue_id]


class TestWithdrawVote:
    async def test_withdraw_recomputes(self, engine: EngineHarness, issue_id: UUID) -> None:
        user_id = uuid4()
        await engine.votes.submit_vote(issue_id, user_id, 5)
        await engine.votes.submit_vote(issue_id, uuid4(), 1)

        result = await engine.votes.withdraw_vote(issue_id, user_id)

        assert result.removed is True
        assert result.vote is None
        assert result.aggregate is not None
        assert result.aggregate.vote_count == 1
        assert result.recompute is not None
        assert result.recompute.score.average_rating == 1.0

    async def test_withdraw_without_vote_is_noop(
        self, engine: EngineHarness, issue_id: UUID
    ) -> None:
        result = await engine.votes.withdraw_vote(issue_id, uuid4())

        assert result.removed is False
        assert result.recompute is None
        assert engine.issue_store.write_count == 0

    async def test_withdraw_unknown_issue(self, engine: EngineHarness) -> None:
        with pytest.raises(IssueNotFoundError):
            await engine.votes.withdraw_vote(uuid4(), uuid4())

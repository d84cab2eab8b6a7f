"""Unit tests for DeferredRecomputeScheduler."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from issue_vitality.application.services.issue_aggregate_updater import (
    IssueAggregateUpdater,
)
from issue_vitality.application.services.recompute_scheduler import (
    DeferredRecomputeScheduler,
)
from issue_vitality.domain.errors import IssueNotFoundError, TransientStoreError


@pytest.fixture
def updater() -> AsyncMock:
    return AsyncMock(spec=IssueAggregateUpdater)


def _scheduler(updater: AsyncMock, max_retries: int = 3) -> DeferredRecomputeScheduler:
    return DeferredRecomputeScheduler(
        updater=updater, max_retries=max_retries, base_delay_seconds=0.0
    )


class TestSchedule:
    async def test_runs_recompute(self, updater: AsyncMock) -> None:
        scheduler = _scheduler(updater)
        issue_id = uuid4()

        scheduler.schedule(issue_id)
        assert scheduler.is_pending(issue_id)
        await scheduler.drain()

        updater.recompute.assert_awaited_once_with(issue_id)
        assert scheduler.pending_count == 0

    async def test_requests_during_a_pass_coalesce_into_one_more(
        self, updater: AsyncMock
    ) -> None:
        started = asyncio.Event()
        release = asyncio.Event()
        calls = 0

        async def recompute(issue_id: UUID) -> None:
            nonlocal calls
            calls += 1
            if calls == 1:
                started.set()
                await release.wait()

        updater.recompute.side_effect = recompute
        scheduler = _scheduler(updater)
        issue_id = uuid4()

        scheduler.schedule(issue_id)
        await started.wait()
        scheduler.schedule(issue_id)
        scheduler.schedule(issue_id)
        scheduler.schedule(issue_id)
        release.set()
        await scheduler.drain()

        assert calls == 2

    async def test_issues_run_independently(self, updater: AsyncMock) -> None:
        scheduler = _scheduler(updater)
        first, second = uuid4(), uuid4()

        scheduler.schedule(first)
        scheduler.schedule(second)
        assert scheduler.pending_count == 2
        await scheduler.drain()

        assert updater.recompute.await_count == 2


class TestRetry:
    async def test_retries_transient_failures(self, updater: AsyncMock) -> None:
        updater.recompute.side_effect = [
            TransientStoreError("write_aggregate"),
            TransientStoreError("write_aggregate"),
            None,
        ]
        scheduler = _scheduler(updater, max_retries=3)

        scheduler.schedule(uuid4())
        await scheduler.drain()

        assert updater.recompute.await_count == 3

    async def test_gives_up_after_max_retries(self, updater: AsyncMock) -> None:
        updater.recompute.side_effect = TransientStoreError("list_ratings")
        scheduler = _scheduler(updater, max_retries=2)

        scheduler.schedule(uuid4())
        await scheduler.drain()

        assert updater.recompute.await_count == 3
        assert scheduler.pending_count == 0

    async def test_missing_issue_is_not_retried(self, updater: AsyncMock) -> None:
        issue_id = uuid4()
        updater.recompute.side_effect = IssueNotFoundError(issue_id)
        scheduler = _scheduler(updater)

        scheduler.schedule(issue_id)
        await scheduler.drain()

        assert updater.recompute.await_count == 1

    async def test_unexpected_error_is_not_retried(self, updater: AsyncMock) -> None:
        updater.recompute.side_effect = RuntimeError("boom")
        scheduler = _scheduler(updater)

        scheduler.schedule(uuid4())
        await scheduler.drain()

        assert updater.recompute.await_count == 1


class TestAdopt:
    """Recompute tasks handed over by a caller that stopped waiting."""

    async def test_adopted_task_runs_to_completion(self, updater: AsyncMock) -> None:
        scheduler = _scheduler(updater)
        issue_id = uuid4()
        release = asyncio.Event()

        async def recompute() -> None:
            await release.wait()

        task = asyncio.create_task(recompute())
        scheduler.adopt(issue_id, task)

        assert scheduler.is_pending(issue_id)
        assert scheduler.pending_count == 1

        release.set()
        await scheduler.drain()

        assert task.done() and not task.cancelled()
        assert scheduler.pending_count == 0
        updater.recompute.assert_not_awaited()

    async def test_transient_failure_schedules_a_pass(self, updater: AsyncMock) -> None:
        scheduler = _scheduler(updater)
        issue_id = uuid4()

        async def failing() -> None:
            await asyncio.sleep(0)
            raise TransientStoreError("append_status_update", issue_id)

        scheduler.adopt(issue_id, asyncio.create_task(failing()))
        await scheduler.drain()

        updater.recompute.assert_awaited_once_with(issue_id)
        assert scheduler.pending_count == 0

    async def test_other_failure_is_not_retried(self, updater: AsyncMock) -> None:
        scheduler = _scheduler(updater)

        async def failing() -> None:
            await asyncio.sleep(0)
            raise RuntimeError("boom")

        scheduler.adopt(uuid4(), asyncio.create_task(failing()))
        await scheduler.drain()

        updater.recompute.assert_not_awaited()

    async def test_shutdown_waits_for_adopted(self, updater: AsyncMock) -> None:
        scheduler = _scheduler(updater)
        finished: list[bool] = []

        async def recompute() -> None:
            await asyncio.sleep(0.01)
            finished.append(True)

        task = asyncio.create_task(recompute())
        scheduler.adopt(uuid4(), task)

        await scheduler.shutdown()

        assert finished == [True]
        assert not task.cancelled()
        assert scheduler.pending_count == 0


async def test_shutdown_cancels_pending(updater: AsyncMock) -> None:
    release = asyncio.Event()

    async def recompute(issue_id: UUID) -> None:
        await release.wait()

    updater.recompute.side_effect = recompute
    scheduler = _scheduler(updater)
    issue_id = uuid4()
    scheduler.schedule(issue_id)
    await asyncio.sleep(0)

    await scheduler.shutdown()

    assert scheduler.pending_count == 0
    assert scheduler.is_pending(issue_id) is False

"""Deferred recompute scheduler.

Runs recomputes in background tasks when the vote path cannot or should
not wait for them. Scheduling is coalesced per issue: while a recompute
for an issue is in flight, further requests mark the issue dirty, and
exactly one more pass runs after the current one. Since each pass reads
the full rating set, one trailing pass covers every vote that arrived
meanwhile.

Transient store failures are retried with exponential backoff
(base_delay * 2**attempt) up to max_retries times. Other failures are
logged and dropped; the next vote on the issue schedules a fresh pass.

A sync recompute that outlives its caller (timeout, cancelled request) is
adopted rather than cancelled: it may already have raised the stored tier,
and only that task will run the transition's side effects. Adopted tasks
run to completion; a transient failure schedules a regular pass.
"""

from __future__ import annotations

import asyncio
from uuid import UUID

from structlog import get_logger

from issue_vitality.application.dtos.results import RecomputeResult
from issue_vitality.application.services.issue_aggregate_updater import (
    IssueAggregateUpdater,
)
from issue_vitality.domain.errors.issue import IssueNotFoundError
from issue_vitality.domain.errors.store import TransientStoreError

logger = get_logger(__name__)


class DeferredRecomputeScheduler:
    """Coalescing background recompute runner."""

    def __init__(
        self,
        updater: IssueAggregateUpdater,
        max_retries: int = 3,
        base_delay_seconds: float = 0.5,
    ) -> None:
        """Initialize the scheduler.

        Args:
            updater: The aggregate updater to run.
            max_retries: Retries after the first failed attempt.
            base_delay_seconds: Backoff base.
        """
        self._updater = updater
        self._max_retries = max_retries
        self._base_delay = base_delay_seconds
        self._tasks: dict[UUID, asyncio.Task[None]] = {}
        self._dirty: set[UUID] = set()
        self._adopted: dict[asyncio.Task[RecomputeResult], UUID] = {}

    def schedule(self, issue_id: UUID) -> None:
        """Request a background recompute of an issue.

        Must be called from a running event loop.
        """
        if issue_id in self._tasks:
            self._dirty.add(issue_id)
            logger.debug("recompute_coalesced", issue_id=str(issue_id))
            return
        self._tasks[issue_id] = asyncio.create_task(
            self._run(issue_id), name=f"recompute-{issue_id}"
        )
        logger.debug("recompute_scheduled", issue_id=str(issue_id))

    def adopt(self, issue_id: UUID, task: asyncio.Task[RecomputeResult]) -> None:
        """Take ownership of a recompute task its caller stopped waiting for.

        The task is never cancelled by the scheduler. When it finishes, a
        TransientStoreError schedules a regular pass for the issue; other
        failures are logged.

        Must be called from a running event loop.
        """
        if task.done():
            self._settle_adopted(issue_id, task)
            return
        self._adopted[task] = issue_id
        task.add_done_callback(self._on_adopted_done)
        logger.debug("recompute_adopted", issue_id=str(issue_id))

    def is_pending(self, issue_id: UUID) -> bool:
        """Check whether a recompute for the issue is queued, running or adopted."""
        return issue_id in self._tasks or issue_id in self._adopted.values()

    @property
    def pending_count(self) -> int:
        """Number of issues with a queued, running or adopted recompute."""
        return len(self._tasks.keys() | set(self._adopted.values()))

    async def drain(self) -> None:
        """Wait for every scheduled and adopted recompute, trailing passes included."""
        while self._tasks or self._adopted:
            pending = [*self._tasks.values(), *self._adopted]
            await asyncio.gather(*pending, return_exceptions=True)

    async def shutdown(self) -> None:
        """Let adopted recomputes finish, then cancel all scheduled ones."""
        if self._adopted:
            await asyncio.gather(*list(self._adopted), return_exceptions=True)
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        # Tasks cancelled before their first step never reach _run's cleanup
        self._tasks.clear()
        self._dirty.clear()

    async def _run(self, issue_id: UUID) -> None:
        try:
            while True:
                self._dirty.discard(issue_id)
                await self._recompute_with_retry(issue_id)
                if issue_id not in self._dirty:
                    break
        finally:
            self._tasks.pop(issue_id, None)
            self._dirty.discard(issue_id)

    async def _recompute_with_retry(self, issue_id: UUID) -> None:
        log = logger.bind(issue_id=str(issue_id))
        for attempt in range(self._max_retries + 1):
            try:
                await self._updater.recompute(issue_id)
                return
            except TransientStoreError as e:
                if attempt >= self._max_retries:
                    log.error(
                        "deferred_recompute_exhausted",
                        attempts=attempt + 1,
                        error=str(e),
                    )
                    return
                delay = self._base_delay * (2**attempt)
                log.warning(
                    "deferred_recompute_retry",
                    attempt=attempt + 1,
                    delay_seconds=delay,
                    error=str(e),
                )
                await asyncio.sleep(delay)
            except IssueNotFoundError:
                log.warning("deferred_recompute_issue_missing")
                return
            except Exception as e:
                log.error(
                    "deferred_recompute_failed",
                    error=str(e),
                    error_type=type(e).__name__,
                )
                return

    def _on_adopted_done(self, task: asyncio.Task[RecomputeResult]) -> None:
        issue_id = self._adopted.pop(task, None)
        if issue_id is not None:
            self._settle_adopted(issue_id, task)

    def _settle_adopted(self, issue_id: UUID, task: asyncio.Task[RecomputeResult]) -> None:
        log = logger.bind(issue_id=str(issue_id))
        if task.cancelled():
            log.warning("adopted_recompute_cancelled")
            return
        error = task.exception()
        if error is None:
            log.debug("adopted_recompute_finished")
        elif isinstance(error, TransientStoreError):
            log.warning("adopted_recompute_store_error", error=str(error))
            self.schedule(issue_id)
        elif isinstance(error, IssueNotFoundError):
            log.warning("adopted_recompute_issue_missing")
        else:
            log.error(
                "adopted_recompute_failed",
                error=str(error),
                error_type=type(error).__name__,
            )

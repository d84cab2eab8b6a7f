"""Issue ranking service.

Read-only views over the stored aggregates:
- hot issues: support at or above the hot threshold, most supported first
- priority issues: highest vitality score first

Ties break on issue_id so a list is stable between calls with no vote
changes. Rankings read each aggregate independently and promise no
cross-issue snapshot consistency.
"""

from __future__ import annotations

from uuid import UUID

from issue_vitality.application.ports.issue_store import IssueStoreProtocol
from issue_vitality.application.ports.status_history import StatusHistoryProtocol
from issue_vitality.domain.errors.issue import IssueNotFoundError
from issue_vitality.domain.models.issue_aggregate import IssueAggregate
from issue_vitality.domain.models.status_update import StatusUpdate

DEFAULT_LIST_LIMIT = 20


class IssueRankingService:
    """Queries issue aggregates for dashboards and lists."""

    def __init__(
        self,
        issue_store: IssueStoreProtocol,
        status_history: StatusHistoryProtocol,
        hot_issue_threshold: float,
    ) -> None:
        """Initialize the service.

        Args:
            issue_store: Aggregate storage.
            status_history: Escalation history storage.
            hot_issue_threshold: Minimum support percentage for hot issues.
        """
        self._issue_store = issue_store
        self._status_history = status_history
        self._hot_issue_threshold = hot_issue_threshold

    async def get_issue_vitality(self, issue_id: UUID) -> IssueAggregate:
        """Get an issue's aggregate.

        Raises:
            IssueNotFoundError: If the issue does not exist.
        """
        aggregate = await self._issue_store.get_aggregate(issue_id)
        if aggregate is None:
            raise IssueNotFoundError(issue_id)
        return aggregate

    async def get_status_history(self, issue_id: UUID) -> list[StatusUpdate]:
        """Get an issue's escalation history in append order.

        Raises:
            IssueNotFoundError: If the issue does not exist.
        """
        await self.get_issue_vitality(issue_id)
        return await self._status_history.list_status_updates(issue_id)

    async def hot_issues(
        self,
        ward_id: str | None = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> list[IssueAggregate]:
        """Issues at or above the hot threshold, most supported first."""
        aggregates = await self._issue_store.list_aggregates(ward_id)
        hot = [
            aggregate
            for aggregate in aggregates
            if aggregate.support_percentage >= self._hot_issue_threshold
        ]
        hot.sort(key=lambda a: (-a.support_percentage, str(a.issue_id)))
        return hot[:limit]

    async def priority_issues(
        self,
        ward_id: str | None = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> list[IssueAggregate]:
        """Issues ordered by vitality score, highest first."""
        aggregates = await self._issue_store.list_aggregates(ward_id)
        aggregates.sort(key=lambda a: (-a.vitality_score, str(a.issue_id)))
        return aggregates[:limit]

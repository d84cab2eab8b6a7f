"""Issue lookup errors.

These errors represent references to issues that the issue store does not
know about. A recompute that hits one of them aborts before any write.
"""

from __future__ import annotations

from uuid import UUID

from issue_vitality.domain.exceptions import VitalityEngineError


class IssueNotFoundError(VitalityEngineError):
    """Raised when a referenced issue does not exist.

    HTTP Status: 404 Not Found

    Attributes:
        issue_id: The issue ID that was not found.
    """

    def __init__(self, issue_id: UUID) -> None:
        """Initialize the error.

        Args:
            issue_id: The issue ID that was not found.
        """
        self.issue_id = issue_id
        super().__init__(f"Issue not found: {issue_id}")

    def to_problem_dict(self) -> dict:
        """Serialize to RFC 7807 problem details.

        Returns:
            Dictionary conforming to RFC 7807 problem details.
        """
        return {
            "type": "urn:issue-vitality:issue:not-found",
            "title": "Issue Not Found",
            "status": 404,
            "detail": str(self),
            "issue_id": str(self.issue_id),
        }

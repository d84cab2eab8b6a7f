"""Collaborator store errors.

A TransientStoreError wraps any failure of a read or write against one of
the engine's collaborator stores (vote ledger, issue store, status history,
badge store). The engine surfaces it to its caller; retrying is the
caller's decision.
"""

from __future__ import annotations

from uuid import UUID

from issue_vitality.domain.exceptions import VitalityEngineError


class TransientStoreError(VitalityEngineError):
    """Raised when a collaborator store read or write fails.

    HTTP Status: 503 Service Unavailable

    Attributes:
        operation: Name of the store operation that failed (e.g. "list_ratings").
        issue_id: The issue the operation was scoped to, if any.
        reason: Short description of the underlying failure.
    """

    def __init__(
        self,
        operation: str,
        issue_id: UUID | None = None,
        reason: str | None = None,
    ) -> None:
        """Initialize the error.

        Args:
            operation: Name of the store operation that failed.
            issue_id: The issue the operation was scoped to, if any.
            reason: Short description of the underlying failure.
        """
        self.operation = operation
        self.issue_id = issue_id
        self.reason = reason
        message = f"Store operation '{operation}' failed"
        if issue_id is not None:
            message += f" for issue {issue_id}"
        if reason:
            message += f": {reason}"
        super().__init__(message)

    def to_problem_dict(self) -> dict:
        """Serialize to RFC 7807 problem details.

        Returns:
            Dictionary conforming to RFC 7807 problem details.
        """
        result: dict = {
            "type": "urn:issue-vitality:store:unavailable",
            "title": "Store Unavailable",
            "status": 503,
            "detail": str(self),
            "operation": self.operation,
        }
        if self.issue_id is not None:
            result["issue_id"] = str(self.issue_id)
        return result

"""RFC 7807 error mapping for domain errors."""

from __future__ import annotations

from fastapi import HTTPException, Request

from issue_vitality.domain.errors.invariant import InvariantViolationError
from issue_vitality.domain.errors.issue import IssueNotFoundError
from issue_vitality.domain.errors.store import TransientStoreError

ProblemError = IssueNotFoundError | InvariantViolationError | TransientStoreError


def problem_exception(error: ProblemError, request: Request) -> HTTPException:
    """Build an HTTPException carrying the error's problem details.

    Status comes from the error: 404 not found, 422 invariant violation,
    503 transient store failure.
    """
    detail = error.to_problem_dict()
    detail["instance"] = str(request.url)
    headers = {"Retry-After": "1"} if isinstance(error, TransientStoreError) else None
    return HTTPException(status_code=detail["status"], detail=detail, headers=headers)

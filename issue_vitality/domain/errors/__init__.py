"""Domain errors for the Issue Vitality engine.

Provides specific exception classes for different failure scenarios.
All exceptions inherit from VitalityEngineError.
"""

from issue_vitality.domain.errors.invariant import (
    InvalidRatingError,
    InvalidWardPopulationError,
    InvariantViolationError,
    NegativeVoteCountError,
    validate_rating,
)
from issue_vitality.domain.errors.issue import IssueNotFoundError
from issue_vitality.domain.errors.store import TransientStoreError

__all__: list[str] = [
    "InvalidRatingError",
    "InvalidWardPopulationError",
    "InvariantViolationError",
    "IssueNotFoundError",
    "NegativeVoteCountError",
    "TransientStoreError",
    "validate_rating",
]

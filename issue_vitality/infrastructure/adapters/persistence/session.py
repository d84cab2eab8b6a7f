"""Shared helpers for the PostgreSQL adapters."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from structlog import get_logger

from issue_vitality.domain.errors.store import TransientStoreError

logger = get_logger(__name__)


@asynccontextmanager
async def store_operation(
    operation: str,
    issue_id: UUID | None = None,
) -> AsyncIterator[None]:
    """Translate SQLAlchemy failures into TransientStoreError.

    Example:
        >>> async with store_operation("list_ratings", issue_id):
        ...     result = await session.execute(...)

    Raises:
        TransientStoreError: Chained from the SQLAlchemyError.
    """
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(
            "store_operation_failed",
            operation=operation,
            issue_id=str(issue_id) if issue_id else None,
            error_type=type(e).__name__,
            error=str(e),
        )
        raise TransientStoreError(
            operation, issue_id=issue_id, reason=type(e).__name__
        ) from e

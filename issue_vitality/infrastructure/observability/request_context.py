"""Per-request log context.

The request's correlation id is bound into structlog's contextvars, so
every entry logged while serving the request carries it. Tasks created
during the request (the sync recompute, an adopted recompute, scheduled
passes) copy the context at creation and keep logging under the same id.
"""

from __future__ import annotations

import re
from uuid import uuid4

import structlog

CORRELATION_HEADER = "X-Correlation-ID"
CORRELATION_ID_KEY = "correlation_id"

# Inbound ids end up in every log line of the request
_LOG_SAFE_ID = re.compile(r"[A-Za-z0-9._:-]{1,128}")


def new_correlation_id() -> str:
    """Mint a correlation id (UUID4 string)."""
    return str(uuid4())


def resolve_correlation_id(header_value: str | None) -> str:
    """Reuse the caller's correlation id if it is log-safe, else mint one."""
    if header_value and _LOG_SAFE_ID.fullmatch(header_value):
        return header_value
    return new_correlation_id()


def bind_request_context(correlation_id: str) -> None:
    """Start a fresh log context for one request.

    Anything a previous request left bound in this context is dropped.
    """
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**{CORRELATION_ID_KEY: correlation_id})


def current_correlation_id() -> str | None:
    """Correlation id bound in the current context, if any."""
    value = structlog.contextvars.get_contextvars().get(CORRELATION_ID_KEY)
    return value if isinstance(value, str) else None

"""Observability infrastructure: structlog setup and per-request log context.

Usage:
    from issue_vitality.infrastructure.observability import (
        bind_request_context,
        configure_logging,
    )

    configure_logging()
    bind_request_context(correlation_id)
"""

from issue_vitality.infrastructure.observability.log_setup import (
    LogSettings,
    build_processors,
    configure_logging,
)
from issue_vitality.infrastructure.observability.request_context import (
    CORRELATION_HEADER,
    CORRELATION_ID_KEY,
    bind_request_context,
    current_correlation_id,
    new_correlation_id,
    resolve_correlation_id,
)

__all__: list[str] = [
    "CORRELATION_HEADER",
    "CORRELATION_ID_KEY",
    "LogSettings",
    "bind_request_context",
    "build_processors",
    "configure_logging",
    "current_correlation_id",
    "new_correlation_id",
    "resolve_correlation_id",
]

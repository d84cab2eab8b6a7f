"""Request logging middleware.

Binds the request's correlation id (from X-Correlation-ID when the caller
sent a log-safe one, minted otherwise) into the log context, logs how each
request ended, and echoes the id back in the response headers.

Usage:
    app.add_middleware(LoggingMiddleware)
"""

import time
from typing import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from structlog import get_logger

from issue_vitality.infrastructure.observability.request_context import (
    CORRELATION_HEADER,
    bind_request_context,
    resolve_correlation_id,
)

logger = get_logger(__name__)


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Correlation id binding and per-request access logging."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        correlation_id = resolve_correlation_id(request.headers.get(CORRELATION_HEADER))
        bind_request_context(correlation_id)
        log = logger.bind(method=request.method, path=request.url.path)
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            log.exception(
                "request_failed",
                duration_ms=_elapsed_ms(started),
                error_type=type(e).__name__,
            )
            raise

        emit = log.warning if response.status_code >= 500 else log.info
        emit(
            "request_completed",
            status_code=response.status_code,
            duration_ms=_elapsed_ms(started),
        )
        response.headers[CORRELATION_HEADER] = correlation_id
        return response

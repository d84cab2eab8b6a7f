"""structlog setup for the vitality engine.

LOG_FORMAT picks the renderer: "json" (one object per line, for log
shipping) or "console". Unset, it follows ENVIRONMENT: json in
production, console anywhere else. LOG_LEVEL filters entries (default
INFO; unknown names fall back to INFO).

A JSON entry carries the call site's fields plus the bound request
context:

    {"issue_id": "...", "tier": "local", "event": "issue_escalated",
     "correlation_id": "...", "level": "info",
     "timestamp": "2026-01-15T12:00:00.000000Z"}
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import structlog
from structlog.typing import Processor

LOG_LEVEL_ENV = "LOG_LEVEL"
LOG_FORMAT_ENV = "LOG_FORMAT"


@dataclass(frozen=True)
class LogSettings:
    """Resolved logging settings.

    Attributes:
        level: stdlib numeric level below which entries are dropped.
        json: True for JSON lines, False for the colored console renderer.
    """

    level: int = logging.INFO
    json: bool = True

    @classmethod
    def from_environment(cls) -> LogSettings:
        """Read LOG_LEVEL, LOG_FORMAT and ENVIRONMENT."""
        level = logging.getLevelName(os.environ.get(LOG_LEVEL_ENV, "INFO").upper())
        if not isinstance(level, int):
            level = logging.INFO

        log_format = os.environ.get(LOG_FORMAT_ENV, "").lower()
        if log_format not in ("json", "console"):
            environment = os.environ.get("ENVIRONMENT", "production")
            log_format = "json" if environment == "production" else "console"
        return cls(level=level, json=log_format == "json")


def build_processors(settings: LogSettings) -> list[Processor]:
    """Processor chain for the given settings, renderer last."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if settings.json:
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    return processors


def configure_logging(settings: LogSettings | None = None) -> LogSettings:
    """Configure structlog once at startup.

    Args:
        settings: Explicit settings; read from the environment when None.

    Returns:
        The settings applied.
    """
    settings = settings or LogSettings.from_environment()
    structlog.configure(
        processors=build_processors(settings),
        wrapper_class=structlog.make_filtering_bound_logger(settings.level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return settings

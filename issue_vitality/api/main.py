"""FastAPI application entry point for the Issue Vitality engine."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from structlog import get_logger

from issue_vitality.api.middleware.logging_middleware import LoggingMiddleware
from issue_vitality.api.routes import (
    badges_router,
    health_router,
    issues_router,
    metrics_router,
    notifications_router,
    votes_router,
)
from issue_vitality.bootstrap.database import (
    close_database_engine,
    get_session_factory,
    is_database_configured,
)
from issue_vitality.bootstrap.vitality import get_recompute_scheduler
from issue_vitality.infrastructure.adapters.persistence.schema import create_schema
from issue_vitality.infrastructure.observability.log_setup import configure_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create tables on startup; finish deferred recomputes on shutdown."""
    if is_database_configured():
        await create_schema(get_session_factory())
        logger.info("database_schema_ready")

    yield

    scheduler = get_recompute_scheduler()
    if scheduler.pending_count:
        logger.info("draining_deferred_recomputes", pending=scheduler.pending_count)
        await scheduler.drain()
    await scheduler.shutdown()
    if is_database_configured():
        await close_database_engine()
    logger.info("application_stopped")


def create_app() -> FastAPI:
    """Build the application with middleware and routers."""
    app = FastAPI(
        title="Issue Vitality API",
        description="Civic issue voting, vitality scoring and escalation",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(LoggingMiddleware)

    app.include_router(health_router)
    app.include_router(votes_router)
    app.include_router(issues_router)
    app.include_router(badges_router)
    app.include_router(notifications_router)
    app.include_router(metrics_router)
    return app


load_dotenv()
configure_logging()

app = create_app()

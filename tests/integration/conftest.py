"""
Integration test configuration with testcontainers.

Provides a session-scoped PostgreSQL 16 container for the adapter tests.
The schema is created once per session; each test truncates the engine's
tables so state never leaks between tests.

Stub-backed engine tests need no container and run without Docker.
Container-backed tests are skipped when Docker is not reachable.

Usage:
    @pytest.mark.integration
    async def test_example(session_factory: async_sessionmaker[AsyncSession]) -> None:
        ...
"""

from collections.abc import AsyncGenerator, Generator

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from testcontainers.postgres import PostgresContainer

from issue_vitality.infrastructure.adapters.persistence import create_schema
from tests.helpers.containers import start_postgres_container

ENGINE_TABLES = ("user_badges", "status_updates", "votes", "issues")


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """Session-scoped PostgreSQL 16 container, skipped without Docker."""
    container = start_postgres_container()
    try:
        yield container
    finally:
        container.stop()


@pytest.fixture(scope="session")
def postgres_async_url(postgres_container: PostgresContainer) -> str:
    """Get async-compatible PostgreSQL connection URL.

    testcontainers returns a psycopg2 URL by default, we convert to asyncpg.
    """
    sync_url = postgres_container.get_connection_url()
    async_url: str = sync_url.replace(
        "postgresql+psycopg2://", "postgresql+asyncpg://"
    ).replace("postgresql://", "postgresql+asyncpg://")
    return async_url


@pytest.fixture
async def session_factory(
    postgres_async_url: str,
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Per-test session factory over a freshly truncated schema."""
    engine = create_async_engine(postgres_async_url, echo=False)
    factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    await create_schema(factory)
    async with factory() as session:
        await session.execute(text(f"TRUNCATE {', '.join(ENGINE_TABLES)} CASCADE"))
        await session.commit()

    yield factory

    await engine.dispose()

"""
Pytest configuration and shared fixtures for Issue Vitality tests.

Testing Standards:
- Async tests run under pytest-asyncio (auto mode enabled in pyproject.toml)
- Use AsyncMock for async function mocking
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/
"""

from collections.abc import Iterator
from datetime import datetime, timezone

import pytest
from prometheus_client import CollectorRegistry

from issue_vitality.bootstrap.database import reset_database_bootstrap
from issue_vitality.bootstrap.vitality import reset_vitality_dependencies
from issue_vitality.infrastructure.monitoring.vitality_metrics import (
    VitalityMetricsCollector,
    reset_vitality_metrics_collector,
)
from tests.helpers.fake_time_authority import FakeTimeAuthority

FROZEN_AT = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def anyio_backend() -> str:
    """Use asyncio as the async backend."""
    return "asyncio"


@pytest.fixture
def project_version() -> str:
    """Provide the current project version for tests."""
    from issue_vitality import __version__

    return __version__


@pytest.fixture
def fake_time_authority() -> FakeTimeAuthority:
    """Clock frozen at 2026-01-15T12:00Z."""
    return FakeTimeAuthority(frozen_at=FROZEN_AT)


@pytest.fixture
def metrics() -> VitalityMetricsCollector:
    """Metrics collector on an isolated registry."""
    return VitalityMetricsCollector(registry=CollectorRegistry())


@pytest.fixture(autouse=True)
def _reset_singletons() -> Iterator[None]:
    """Keep bootstrap singletons from leaking between tests."""
    yield
    reset_vitality_dependencies()
    reset_database_bootstrap()
    reset_vitality_metrics_collector()

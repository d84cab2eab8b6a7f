"""Test helpers for Issue Vitality tests.

Helpers:
    FakeTimeAuthority: Controllable time authority for deterministic tests
    EngineHarness: Engine wired over in-memory stubs
    sample_total: Prometheus sample lookup for metric assertions
    start_postgres_container: Docker-guarded PostgreSQL startup (tests.helpers.containers)
"""

from tests.helpers.engine import EngineHarness, build_engine
from tests.helpers.fake_time_authority import FakeTimeAuthority
from tests.helpers.metrics import sample_total

__all__ = ["EngineHarness", "FakeTimeAuthority", "build_engine", "sample_total"]

"""Issue vitality engine configuration.

This module defines the policy inputs of the engine (ward populations,
escalation thresholds, badge policy, hot-issue cut-off) and the recompute
mode, with environment variable overrides for deployment tuning.

Environment Variables (Population):
- VITALITY_DEFAULT_WARD_POPULATION: Population used for unlisted wards (default: 10000)
- VITALITY_WARD_POPULATIONS: Per-ward overrides as "ward=population,..." (default: empty)

Environment Variables (Escalation):
- VITALITY_LOCAL_THRESHOLD: Support percentage for LOCAL (default: 10)
- VITALITY_STATE_THRESHOLD: Support percentage for STATE (default: 25)
- VITALITY_NATIONAL_THRESHOLD: Support percentage for NATIONAL (default: 50)
- VITALITY_BADGE_SUPPORT_THRESHOLD: Support percentage that earns the creator badge (default: 20)
- VITALITY_HOT_ISSUE_THRESHOLD: Support percentage for the hot list (default: 20)

Environment Variables (Recompute):
- VITALITY_RECOMPUTE_MODE: "sync" or "deferred" (default: sync)
- VITALITY_RECOMPUTE_TIMEOUT_SECONDS: Sync recompute bound (default: 2.0)
- VITALITY_RECOMPUTE_MAX_RETRIES: Deferred retry attempts (default: 3)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from issue_vitality.domain.errors.invariant import InvalidWardPopulationError
from issue_vitality.domain.services.escalation_policy import (
    DEFAULT_LOCAL_THRESHOLD,
    DEFAULT_NATIONAL_THRESHOLD,
    DEFAULT_STATE_THRESHOLD,
    EscalationThresholds,
)

DEFAULT_WARD_POPULATION = 10_000


def _get_int_env(key: str, default: int) -> int:
    """Get integer environment variable with default.

    Args:
        key: Environment variable name.
        default: Default value if not set or invalid.

    Returns:
        Parsed integer value or default.
    """
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float_env(key: str, default: float) -> float:
    """Get float environment variable with default."""
    value = os.environ.get(key)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _parse_ward_populations(raw: str | None) -> dict[str, int]:
    """Parse "ward=population,..." into a mapping.

    Malformed entries raise instead of being skipped, since a silently
    ignored ward would fall back to the default population.

    Raises:
        ValueError: If an entry is not "ward=int".
    """
    if not raw:
        return {}
    populations: dict[str, int] = {}
    for entry in raw.split(","):
        entry = entry.strip()
        if not entry:
            continue
        ward_id, sep, population = entry.partition("=")
        if not sep or not ward_id.strip():
            raise ValueError(f"invalid ward population entry: {entry!r}")
        populations[ward_id.strip()] = int(population.strip())
    return populations


class RecomputeMode(Enum):
    """How vote submission triggers a recompute.

    Modes:
        SYNC: Await the recompute within a timeout, defer on failure
        DEFERRED: Schedule the recompute and return immediately
    """

    SYNC = "sync"
    DEFERRED = "deferred"


@dataclass(frozen=True)
class WardPopulationConfig:
    """Ward populations used as the support denominator.

    Attributes:
        default_population: Population for wards without an override.
        overrides: Per-ward populations.
    """

    default_population: int = DEFAULT_WARD_POPULATION
    overrides: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate every population is a positive int."""
        for population in (self.default_population, *self.overrides.values()):
            if isinstance(population, bool) or not isinstance(population, int):
                raise InvalidWardPopulationError(population)
            if population <= 0:
                raise InvalidWardPopulationError(population)
        object.__setattr__(self, "overrides", MappingProxyType(dict(self.overrides)))

    def population_for(self, ward_id: str) -> int:
        """Get the population of a ward."""
        return self.overrides.get(ward_id, self.default_population)

    @classmethod
    def from_environment(cls) -> WardPopulationConfig:
        """Create config from environment variables with defaults."""
        return cls(
            default_population=_get_int_env(
                "VITALITY_DEFAULT_WARD_POPULATION", DEFAULT_WARD_POPULATION
            ),
            overrides=_parse_ward_populations(
                os.environ.get("VITALITY_WARD_POPULATIONS")
            ),
        )


@dataclass(frozen=True)
class VitalityConfig:
    """Configuration for the issue vitality engine.

    All values can be overridden via environment variables.

    Attributes:
        populations: Ward population policy.
        thresholds: Escalation thresholds (default 10/25/50).
        badge_support_threshold: Support percentage that earns the creator
            badge. Default: 20.
        hot_issue_threshold: Minimum support for the hot list. Default: 20.
        recompute_mode: Sync or deferred recompute after a vote.
        recompute_timeout_seconds: Bound on a sync recompute. Default: 2.0.
        recompute_max_retries: Deferred retries for transient store
            failures. Default: 3.
        fanout_queue_size: Per-connection notification queue size.
    """

    populations: WardPopulationConfig = field(default_factory=WardPopulationConfig)
    thresholds: EscalationThresholds = field(default_factory=EscalationThresholds)
    badge_support_threshold: float = 20.0
    hot_issue_threshold: float = 20.0
    recompute_mode: RecomputeMode = RecomputeMode.SYNC
    recompute_timeout_seconds: float = 2.0
    recompute_max_retries: int = 3
    fanout_queue_size: int = 100

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.badge_support_threshold <= 0:
            raise ValueError(
                "badge_support_threshold must be positive, "
                f"got {self.badge_support_threshold}"
            )
        if self.hot_issue_threshold < 0:
            raise ValueError(
                f"hot_issue_threshold must be non-negative, got {self.hot_issue_threshold}"
            )
        if self.recompute_timeout_seconds <= 0:
            raise ValueError(
                "recompute_timeout_seconds must be positive, "
                f"got {self.recompute_timeout_seconds}"
            )
        if self.recompute_max_retries < 0:
            raise ValueError(
                f"recompute_max_retries must be non-negative, got {self.recompute_max_retries}"
            )
        if self.fanout_queue_size < 1:
            raise ValueError(
                f"fanout_queue_size must be positive, got {self.fanout_queue_size}"
            )

    @classmethod
    def from_environment(cls) -> VitalityConfig:
        """Create config from environment variables with defaults.

        Returns:
            VitalityConfig with values from environment or defaults.

        Raises:
            ValueError: If a value is present but invalid (bad mode,
                thresholds out of order).
        """
        return cls(
            populations=WardPopulationConfig.from_environment(),
            thresholds=EscalationThresholds(
                local=_get_float_env("VITALITY_LOCAL_THRESHOLD", DEFAULT_LOCAL_THRESHOLD),
                state=_get_float_env("VITALITY_STATE_THRESHOLD", DEFAULT_STATE_THRESHOLD),
                national=_get_float_env(
                    "VITALITY_NATIONAL_THRESHOLD", DEFAULT_NATIONAL_THRESHOLD
                ),
            ),
            badge_support_threshold=_get_float_env(
                "VITALITY_BADGE_SUPPORT_THRESHOLD", 20.0
            ),
            hot_issue_threshold=_get_float_env("VITALITY_HOT_ISSUE_THRESHOLD", 20.0),
            recompute_mode=RecomputeMode(
                os.environ.get("VITALITY_RECOMPUTE_MODE", "sync").lower()
            ),
            recompute_timeout_seconds=_get_float_env(
                "VITALITY_RECOMPUTE_TIMEOUT_SECONDS", 2.0
            ),
            recompute_max_retries=_get_int_env("VITALITY_RECOMPUTE_MAX_RETRIES", 3),
        )


# Default production config
DEFAULT_VITALITY_CONFIG = VitalityConfig()

# Testing config with a small ward so a handful of votes crosses thresholds
TEST_VITALITY_CONFIG = VitalityConfig(
    populations=WardPopulationConfig(default_population=100),
    recompute_timeout_seconds=1.0,
    recompute_max_retries=1,
)

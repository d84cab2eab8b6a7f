"""Configuration for the Issue Vitality engine."""

from issue_vitality.config.vitality_config import (
    DEFAULT_VITALITY_CONFIG,
    DEFAULT_WARD_POPULATION,
    TEST_VITALITY_CONFIG,
    RecomputeMode,
    VitalityConfig,
    WardPopulationConfig,
)

__all__ = [
    "DEFAULT_VITALITY_CONFIG",
    "DEFAULT_WARD_POPULATION",
    "RecomputeMode",
    "TEST_VITALITY_CONFIG",
    "VitalityConfig",
    "WardPopulationConfig",
]

"""Unit tests for VitalityConfig and WardPopulationConfig."""

import pytest

from issue_vitality.config.vitality_config import (
    DEFAULT_VITALITY_CONFIG,
    DEFAULT_WARD_POPULATION,
    RecomputeMode,
    VitalityConfig,
    WardPopulationConfig,
)
from issue_vitality.domain.errors import InvalidWardPopulationError

_ENV_KEYS = (
    "VITALITY_DEFAULT_WARD_POPULATION",
    "VITALITY_WARD_POPULATIONS",
    "VITALITY_LOCAL_THRESHOLD",
    "VITALITY_STATE_THRESHOLD",
    "VITALITY_NATIONAL_THRESHOLD",
    "VITALITY_BADGE_SUPPORT_THRESHOLD",
    "VITALITY_HOT_ISSUE_THRESHOLD",
    "VITALITY_RECOMPUTE_MODE",
    "VITALITY_RECOMPUTE_TIMEOUT_SECONDS",
    "VITALITY_RECOMPUTE_MAX_RETRIES",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestWardPopulationConfig:
    def test_default_population(self) -> None:
        populations = WardPopulationConfig()

        assert populations.population_for("anything") == DEFAULT_WARD_POPULATION == 10_000

    def test_overrides(self) -> None:
        populations = WardPopulationConfig(overrides={"12": 4_000})

        assert populations.population_for("12") == 4_000
        assert populations.population_for("13") == 10_000

    def test_overrides_are_read_only(self) -> None:
        populations = WardPopulationConfig(overrides={"12": 4_000})

        with pytest.raises(TypeError):
            populations.overrides["12"] = 1  # type: ignore[index]

    @pytest.mark.parametrize("population", [0, -10, 2.5])
    def test_rejects_invalid_default(self, population: object) -> None:
        with pytest.raises(InvalidWardPopulationError):
            WardPopulationConfig(default_population=population)  # type: ignore[arg-type]

    def test_rejects_invalid_override(self) -> None:
        with pytest.raises(InvalidWardPopulationError):
            WardPopulationConfig(overrides={"12": 0})

    def test_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VITALITY_DEFAULT_WARD_POPULATION", "5000")
        monkeypatch.setenv("VITALITY_WARD_POPULATIONS", "north=1200, south = 800,")

        populations = WardPopulationConfig.from_environment()

        assert populations.default_population == 5000
        assert populations.population_for("north") == 1200
        assert populations.population_for("south") == 800

    def test_malformed_environment_entry(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VITALITY_WARD_POPULATIONS", "north1200")

        with pytest.raises(ValueError):
            WardPopulationConfig.from_environment()


class TestVitalityConfig:
    def test_defaults(self) -> None:
        config = DEFAULT_VITALITY_CONFIG

        assert config.thresholds.local == 10.0
        assert config.badge_support_threshold == 20.0
        assert config.hot_issue_threshold == 20.0
        assert config.recompute_mode is RecomputeMode.SYNC

    def test_from_environment_defaults(self) -> None:
        assert VitalityConfig.from_environment() == DEFAULT_VITALITY_CONFIG

    def test_from_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VITALITY_LOCAL_THRESHOLD", "5")
        monkeypatch.setenv("VITALITY_STATE_THRESHOLD", "15")
        monkeypatch.setenv("VITALITY_NATIONAL_THRESHOLD", "30")
        monkeypatch.setenv("VITALITY_BADGE_SUPPORT_THRESHOLD", "30")
        monkeypatch.setenv("VITALITY_RECOMPUTE_MODE", "Deferred")
        monkeypatch.setenv("VITALITY_RECOMPUTE_TIMEOUT_SECONDS", "0.5")

        config = VitalityConfig.from_environment()

        assert (config.thresholds.local, config.thresholds.state) == (5.0, 15.0)
        assert config.badge_support_threshold == 30.0
        assert config.recompute_mode is RecomputeMode.DEFERRED
        assert config.recompute_timeout_seconds == 0.5

    def test_unparseable_number_falls_back(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VITALITY_RECOMPUTE_MAX_RETRIES", "many")

        assert VitalityConfig.from_environment().recompute_max_retries == 3

    def test_bad_mode_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VITALITY_RECOMPUTE_MODE", "eventually")

        with pytest.raises(ValueError):
            VitalityConfig.from_environment()

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"badge_support_threshold": 0},
            {"hot_issue_threshold": -1},
            {"recompute_timeout_seconds": 0},
            {"recompute_max_retries": -1},
            {"fanout_queue_size": 0},
        ],
    )
    def test_validation(self, kwargs: dict) -> None:
        with pytest.raises(ValueError):
            VitalityConfig(**kwargs)

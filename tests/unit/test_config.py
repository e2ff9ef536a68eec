"""Unit tests for detection configuration."""

import pytest

from repofinder.config import (
    DEFAULT_DETECTION_CONFIG,
    MAX_EXHAUSTIVE_LEGS,
    ConfigError,
    DetectionConfig,
)


class TestDetectionConfig:
    """Tests for DetectionConfig validation."""

    def test_defaults_valid(self):
        """The default configuration passes validation."""
        assert DEFAULT_DETECTION_CONFIG.matrix_max < DEFAULT_DETECTION_CONFIG.iter_max
        assert DEFAULT_DETECTION_CONFIG.interest_lower <= DEFAULT_DETECTION_CONFIG.interest_upper

    def test_frozen(self):
        """Configs are immutable."""
        with pytest.raises(AttributeError):
            DEFAULT_DETECTION_CONFIG.matrix_max = 3  # type: ignore[misc]

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"maturity_cap": 0}, "maturity_cap"),
            ({"transaction_cap": -1}, "transaction_cap"),
            ({"matrix_max": 0}, "matrix_max must be positive"),
            ({"matrix_max": 20, "iter_max": 20}, "smaller than iter_max"),
            ({"matrix_max": MAX_EXHAUSTIVE_LEGS + 1, "iter_max": 40}, "exhaustive"),
            ({"interest_lower": 0.02, "interest_upper": 0.01}, "exceeds"),
            ({"interest_lower": -1.0}, "above -1"),
        ],
    )
    def test_invalid(self, overrides, message):
        """Inconsistent parameters are rejected at construction."""
        with pytest.raises(ConfigError, match=message):
            DetectionConfig(**overrides)

    def test_config_error_is_value_error(self):
        """ConfigError can be handled as a ValueError."""
        with pytest.raises(ValueError):
            DetectionConfig(maturity_cap=0)


class TestFromEnv:
    """Tests for DetectionConfig.from_env."""

    def test_unset_uses_defaults(self, monkeypatch):
        """Without variables the defaults apply."""
        for name in ("MATURITY_CAP", "TRANSACTION_CAP", "MATRIX_MAX", "USE_ITERATIVE"):
            monkeypatch.delenv(f"REPOFINDER_{name}", raising=False)

        assert DetectionConfig.from_env().maturity_cap == DetectionConfig().maturity_cap

    def test_reads_variables(self, monkeypatch):
        """Variables override the defaults."""
        monkeypatch.setenv("REPOFINDER_MATURITY_CAP", "10")
        monkeypatch.setenv("REPOFINDER_INTEREST_UPPER", "0.002")
        monkeypatch.setenv("REPOFINDER_MATRIX_MAX", "8")
        monkeypatch.setenv("REPOFINDER_ITER_MAX", "16")
        monkeypatch.setenv("REPOFINDER_USE_ITERATIVE", "no")

        config = DetectionConfig.from_env()

        assert config.maturity_cap == 10
        assert config.interest_upper == 0.002
        assert config.matrix_max == 8
        assert config.iter_max == 16
        assert config.use_iterative is False

    def test_invalid_variables_rejected(self, monkeypatch):
        """Environment values go through the same validation."""
        monkeypatch.setenv("REPOFINDER_MATRIX_MAX", "30")
        monkeypatch.setenv("REPOFINDER_ITER_MAX", "20")

        with pytest.raises(ConfigError):
            DetectionConfig.from_env()

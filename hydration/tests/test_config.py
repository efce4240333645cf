"""
Tests for runtime configuration.

Critical: the pure core receives its timing constants only through Settings.
"""

import pytest

from hydration.core.state import Settings
from shell_runtime.config import RuntimeConfig


def test_defaults():
    config = RuntimeConfig.from_env({})

    assert config == RuntimeConfig()
    assert config.settings() == Settings()


def test_env_overrides():
    config = RuntimeConfig.from_env({
        "HYDRATION_LOG_LEVEL": "debug",
        "HYDRATION_LOG_FORMAT": "TEXT",
        "HYDRATION_SEARCH_DEBOUNCE_MS": "200",
        "HYDRATION_TOAST_DURATION_MS": "1000",
        "HYDRATION_TOAST_TICK_MS": "100",
        "HYDRATION_METRICS_WINDOW_DAYS": "7",
        "HYDRATION_METRICS_ENABLED": "True",
        "HYDRATION_METRICS_PORT": "9200",
    })

    assert config.log_level == "DEBUG"
    assert config.log_format == "text"
    assert config.metrics_enabled is True
    assert config.metrics_port == 9200
    assert config.settings() == Settings(
        search_debounce_ms=200,
        toast_duration_ms=1000,
        toast_tick_ms=100,
        metrics_window_days=7,
    )


def test_blank_values_use_defaults():
    config = RuntimeConfig.from_env({"HYDRATION_SEARCH_DEBOUNCE_MS": " "})

    assert config.search_debounce_ms == 350


def test_tick_is_at_least_one_ms():
    config = RuntimeConfig.from_env({"HYDRATION_TOAST_TICK_MS": "0"})

    assert config.toast_tick_ms == 1


@pytest.mark.parametrize("raw", ["abc", "1.5", "-1"])
def test_invalid_numbers_raise(raw):
    with pytest.raises(ValueError, match="HYDRATION_SEARCH_DEBOUNCE_MS"):
        RuntimeConfig.from_env({"HYDRATION_SEARCH_DEBOUNCE_MS": raw})


def test_metrics_disabled_unless_true():
    assert RuntimeConfig.from_env({"HYDRATION_METRICS_ENABLED": "1"}).metrics_enabled is False

"""
Runtime configuration from the environment.

Environment Variables:
    HYDRATION_LOG_LEVEL: Root log level - default: INFO
    HYDRATION_LOG_FORMAT: json or text - default: json
    HYDRATION_SEARCH_DEBOUNCE_MS: Search debounce delay - default: 350
    HYDRATION_TOAST_DURATION_MS: Toast lifetime - default: 4000
    HYDRATION_TOAST_TICK_MS: Toast scheduler period - default: 250
    HYDRATION_METRICS_WINDOW_DAYS: Window for metrics requests - default: 30
    HYDRATION_METRICS_ENABLED: Start the Prometheus endpoint - default: false
    HYDRATION_METRICS_PORT: Prometheus port - default: 9108
"""

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from hydration.core.state import Settings


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")
    return value


@dataclass(frozen=True)
class RuntimeConfig:
    log_level: str = "INFO"
    log_format: str = "json"
    search_debounce_ms: int = 350
    toast_duration_ms: int = 4000
    toast_tick_ms: int = 250
    metrics_window_days: int = 30
    metrics_enabled: bool = False
    metrics_port: int = 9108

    @staticmethod
    def from_env(env: Optional[Mapping[str, str]] = None) -> "RuntimeConfig":
        """
        Read configuration from environment variables.

        Raises:
            ValueError: If a numeric variable does not parse
        """
        env = os.environ if env is None else env
        return RuntimeConfig(
            log_level=env.get("HYDRATION_LOG_LEVEL", "INFO").upper(),
            log_format=env.get("HYDRATION_LOG_FORMAT", "json").lower(),
            search_debounce_ms=_int(env, "HYDRATION_SEARCH_DEBOUNCE_MS", 350),
            toast_duration_ms=_int(env, "HYDRATION_TOAST_DURATION_MS", 4000),
            toast_tick_ms=max(1, _int(env, "HYDRATION_TOAST_TICK_MS", 250)),
            metrics_window_days=_int(env, "HYDRATION_METRICS_WINDOW_DAYS", 30),
            metrics_enabled=env.get("HYDRATION_METRICS_ENABLED", "false").lower() == "true",
            metrics_port=_int(env, "HYDRATION_METRICS_PORT", 9108),
        )

    def settings(self) -> Settings:
        """Timing constants handed to the pure core."""
        return Settings(
            search_debounce_ms=self.search_debounce_ms,
            toast_duration_ms=self.toast_duration_ms,
            toast_tick_ms=self.toast_tick_ms,
            metrics_window_days=self.metrics_window_days,
        )

"""
Host runtime for the hydration core.

Owns every side effect: API calls, history writes, timers, logging and
metrics. The core hands it effects; it hands the core messages.
"""

from .api import ApiCallError, ApiClient, Fixture, FixtureApi
from .config import RuntimeConfig
from .navigation import MemoryNavigator, Navigator
from .runtime import Runtime, RuntimeLimitError

__all__ = [
    "ApiCallError",
    "ApiClient",
    "Fixture",
    "FixtureApi",
    "RuntimeConfig",
    "MemoryNavigator",
    "Navigator",
    "Runtime",
    "RuntimeLimitError",
]

"""
Core value types for the hydration engine.

- Resource: four-state wrapper for server-backed fields
- ApiError: failed-fetch value and its classification
- Canonical: deterministic serialization for logs and comparisons
- Clock: logical time for the UI state machines

The model (state), messages (msgs) and effects live in their own modules
and are imported from there.
"""

from .errors import InvalidTransitionError, RedirectLoopError, RouteError
from .api_error import ApiError, ErrorKind, classify
from .resource import (
    CoarseState,
    Failed,
    Loaded,
    Loading,
    NotAsked,
    Resource,
    begin,
    merge,
    to_coarse_state,
)
from .canonical import canonicalize, canonical_json_bytes, canonical_json_str
from .clock import DeterministicClock

__all__ = [
    "InvalidTransitionError",
    "RedirectLoopError",
    "RouteError",
    "ApiError",
    "ErrorKind",
    "classify",
    "CoarseState",
    "Failed",
    "Loaded",
    "Loading",
    "NotAsked",
    "Resource",
    "begin",
    "merge",
    "to_coarse_state",
    "canonicalize",
    "canonical_json_bytes",
    "canonical_json_str",
    "DeterministicClock",
]

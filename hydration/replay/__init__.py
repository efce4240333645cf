"""
Replay: rebuild a model from a recorded message sequence.

Handlers are pure, so replay is 100% deterministic: same messages -> same
model and same effects.
"""

from .runner import ReplayResult, replay

__all__ = [
    "ReplayResult",
    "replay",
]

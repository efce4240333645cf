"""
Logical clock for the UI state machines.

Time only advances when a tick or ClockAdvanced message says so, which
keeps toast countdowns replayable.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class DeterministicClock:
    """
    Deterministic time source in milliseconds.

    In production: the runtime reports elapsed time with each tick.
    In tests: you advance it manually.
    """
    current: int = 0

    def now(self) -> int:
        """Get current timestamp without advancing."""
        return self.current

    def tick(self, step: int = 1) -> "DeterministicClock":
        """
        Advance clock by step and return new clock instance.

        Since DeterministicClock is immutable, this returns a new instance.
        """
        return DeterministicClock(self.current + step)

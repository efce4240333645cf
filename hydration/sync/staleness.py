"""
Staleness guard: per-stream generation tokens.

Every asynchronous request is tagged with the token issued for its stream.
A response is applied only while its token is still the latest one for
that stream; anything older was superseded and is dropped. There is no real
cancellation, so this is the only way an in-flight request stops mattering.
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple


@dataclass(frozen=True)
class Generations:
    """
    Immutable token table.

    Fields:
        latest: stream name -> latest token issued (tokens start at 1)
    """
    latest: Dict[str, int] = field(default_factory=dict)

    def next_token(self, stream: str) -> Tuple["Generations", int]:
        """
        Issue a new token for a stream.

        Returns:
            (new Generations, token). The token is strictly greater than any
            token previously issued for the stream.
        """
        token = self.latest.get(stream, 0) + 1
        latest = dict(self.latest)
        latest[stream] = token
        return Generations(latest=latest), token

    def is_current(self, stream: str, token: int) -> bool:
        current = self.latest.get(stream, 0)
        return current > 0 and token == current

    def current(self, stream: str) -> int:
        return self.latest.get(stream, 0)

    def supersede_all(self) -> "Generations":
        """Advance every known stream so all in-flight responses become stale."""
        return Generations(latest={k: v + 1 for k, v in self.latest.items()})

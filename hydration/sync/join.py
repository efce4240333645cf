"""
Fan-in joiner: one aggregate resource fed by N keyed, independent fetches.

The key set is fixed when the join starts. Branches may complete in any
order; each contributes once. The aggregate is Loaded only when every
branch has answered, concatenated in key order. A failing branch turns the
aggregate Failed unless a Loaded was already committed for this join.

A changed key set always means a new join with a new generation token;
branches of the old join are then stale and never reach this object.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Hashable, Optional, Tuple

from ..core.api_error import ApiError
from ..core.resource import Failed, Loaded, Loading, Resource


@dataclass(frozen=True)
class FanInJoin:
    """
    Pending join state.

    Fields:
        token: Generation token of the request that started the join
        keys: Branch keys in issuing order (defines result order)
        partial: key -> items received for that branch
        remaining: Branches still outstanding (only ever decreases)
        error: First branch error, if any
        committed: True once the aggregate was promoted to Loaded
    """
    token: int
    keys: Tuple[Hashable, ...]
    partial: Dict[Hashable, Tuple[Any, ...]] = field(default_factory=dict)
    remaining: int = 0
    error: Optional[ApiError] = None
    committed: bool = False

    @staticmethod
    def start(keys: Tuple[Hashable, ...], token: int) -> "FanInJoin":
        keys = tuple(dict.fromkeys(keys))
        join = FanInJoin(token=token, keys=keys, remaining=len(keys))
        if not keys:
            return replace(join, committed=True)
        return join

    def expects(self, key: Hashable) -> bool:
        """True if key belongs to this join and has not answered yet."""
        return key in self.keys and key not in self.partial

    def receive(self, key: Hashable, result: Any) -> "FanInJoin":
        """
        Fold one branch result (a sequence of items or an ApiError).

        Unknown keys and repeated answers for the same key are ignored.
        """
        if not self.expects(key):
            return self

        partial = dict(self.partial)
        error = self.error
        if isinstance(result, ApiError):
            partial[key] = ()
            if error is None and not self.committed:
                error = result
        else:
            partial[key] = tuple(result)

        remaining = self.remaining - 1
        committed = self.committed or (remaining == 0 and error is None)
        return replace(
            self,
            partial=partial,
            remaining=remaining,
            error=error,
            committed=committed,
        )

    def merged(self) -> Tuple[Any, ...]:
        items = []
        for key in self.keys:
            items.extend(self.partial.get(key, ()))
        return tuple(items)

    def outcome(self) -> Resource:
        """Aggregate resource for the current join state."""
        if self.error is not None and not self.committed:
            return Failed(self.error)
        if self.remaining == 0:
            return Loaded(self.merged())
        return Loading()

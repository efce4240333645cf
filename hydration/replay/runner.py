"""
Replay runner: fold a message sequence through the dispatcher.

No runtime is involved; effects are collected, not performed.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from ..core.effects import Effect
from ..core.msgs import Msg
from ..core.state import Model
from ..dispatch.update import Dispatcher, default_dispatcher


@dataclass(frozen=True)
class ReplayResult:
    """
    Result of replay operation.

    Fields:
        model: Final model after applying messages
        applied: Number of messages applied
        effects: Effects emitted, in order
    """
    model: Model
    applied: int
    effects: Tuple[Effect, ...] = ()


def replay(
    messages: Iterable[Msg],
    model: Optional[Model] = None,
    dispatcher: Optional[Dispatcher] = None,
    upto: Optional[int] = None,
) -> ReplayResult:
    """
    Replay messages to reconstruct a model.

    Args:
        messages: Messages in dispatch order
        model: Starting model (None = Model.initial())
        dispatcher: Handler registry (None = default handlers)
        upto: Stop after this many messages (None = all)

    Returns:
        ReplayResult with final model, count and emitted effects
    """
    current = model if model is not None else Model.initial()
    dispatcher = dispatcher or default_dispatcher()
    effects: List[Effect] = []
    count = 0

    for msg in messages:
        if upto is not None and count >= upto:
            break
        current, fx = dispatcher.apply(current, msg)
        effects.extend(fx)
        count += 1

    return ReplayResult(model=current, applied=count, effects=tuple(effects))

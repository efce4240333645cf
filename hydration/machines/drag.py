"""
Drag-to-claim gesture.

    Idle -> PendingRect -> Dragging(over_target) -> Idle

Dragging needs the dragged element's rect, which is measured asynchronously.
Each gesture gets its own session number; a measurement that comes back
for a session that is no longer pending (pointer already released, or a
newer gesture started) is dropped.
"""

from dataclasses import dataclass, replace
from typing import List, Optional, Tuple, Union

from ..core.effects import Effect, MeasureElement
from ..core.msgs import Point, Rect


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class PendingRect:
    session: int
    task_id: int
    element_id: str
    origin: Point


@dataclass(frozen=True)
class Dragging:
    session: int
    task_id: int
    rect: Rect
    offset: Point
    pointer: Point
    over_target: bool = False


DragPhase = Union[Idle, PendingRect, Dragging]


@dataclass(frozen=True)
class DragState:
    phase: DragPhase = Idle()
    last_session: int = 0


def pointer_down(
    state: DragState, task_id: int, element_id: str, point: Point
) -> Tuple[DragState, List[Effect]]:
    if not isinstance(state.phase, Idle):
        return state, []
    session = state.last_session + 1
    phase = PendingRect(session=session, task_id=task_id, element_id=element_id, origin=point)
    return (
        DragState(phase=phase, last_session=session),
        [MeasureElement(element_id=element_id, session=session)],
    )


def rect_measured(state: DragState, session: int, rect: Rect) -> DragState:
    phase = state.phase
    if not isinstance(phase, PendingRect) or phase.session != session:
        return state
    offset = Point(x=phase.origin.x - rect.left, y=phase.origin.y - rect.top)
    dragging = Dragging(
        session=session,
        task_id=phase.task_id,
        rect=rect,
        offset=offset,
        pointer=phase.origin,
    )
    return replace(state, phase=dragging)


def pointer_moved(state: DragState, point: Point, over_target: bool) -> DragState:
    phase = state.phase
    if not isinstance(phase, Dragging):
        return state
    return replace(state, phase=replace(phase, pointer=point, over_target=over_target))


def pointer_up(state: DragState) -> Tuple[DragState, Optional[int]]:
    """
    End the gesture.

    Returns:
        (new state, task id to claim or None). Only a drag released over the
        claim target claims.
    """
    phase = state.phase
    claimed = None
    if isinstance(phase, Dragging) and phase.over_target:
        claimed = phase.task_id
    return replace(state, phase=Idle()), claimed

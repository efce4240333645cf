"""
Tests for the drag-to-claim gesture.
"""

from hydration.core.effects import MeasureElement
from hydration.core.msgs import Point, Rect
from hydration.machines import drag
from hydration.machines.drag import Dragging, DragState, Idle, PendingRect

RECT = Rect(left=10, top=20, width=200, height=40)


def test_pointer_down_requests_measurement():
    state, effects = drag.pointer_down(DragState(), 7, "task-7", Point(15, 30))

    assert isinstance(state.phase, PendingRect)
    assert state.phase.session == 1
    assert effects == [MeasureElement(element_id="task-7", session=1)]


def test_measurement_enters_dragging():
    state, _ = drag.pointer_down(DragState(), 7, "task-7", Point(15, 30))
    state = drag.rect_measured(state, 1, RECT)

    assert isinstance(state.phase, Dragging)
    assert state.phase.offset == Point(5, 10)
    assert state.phase.over_target is False


def test_late_measurement_after_release_is_discarded():
    """The rect for a released gesture must not resurrect it."""
    state, _ = drag.pointer_down(DragState(), 7, "task-7", Point(15, 30))
    state, claimed = drag.pointer_up(state)
    late = drag.rect_measured(state, 1, RECT)

    assert claimed is None
    assert late is state
    assert isinstance(late.phase, Idle)


def test_measurement_for_older_session_is_discarded():
    state, _ = drag.pointer_down(DragState(), 7, "task-7", Point(0, 0))
    state, _ = drag.pointer_up(state)
    state, _ = drag.pointer_down(state, 8, "task-8", Point(0, 0))

    assert state.phase.session == 2
    assert drag.rect_measured(state, 1, RECT) is state


def test_release_over_target_claims():
    state, _ = drag.pointer_down(DragState(), 7, "task-7", Point(15, 30))
    state = drag.rect_measured(state, 1, RECT)
    state = drag.pointer_moved(state, Point(400, 500), over_target=True)
    state, claimed = drag.pointer_up(state)

    assert claimed == 7
    assert isinstance(state.phase, Idle)
    assert state.last_session == 1


def test_release_elsewhere_does_not_claim():
    state, _ = drag.pointer_down(DragState(), 7, "task-7", Point(15, 30))
    state = drag.rect_measured(state, 1, RECT)
    state = drag.pointer_moved(state, Point(400, 500), over_target=False)

    assert drag.pointer_up(state)[1] is None


def test_pointer_down_while_busy_is_ignored():
    state, _ = drag.pointer_down(DragState(), 7, "task-7", Point(0, 0))

    assert drag.pointer_down(state, 8, "task-8", Point(0, 0)) == (state, [])


def test_move_before_measurement_is_ignored():
    state, _ = drag.pointer_down(DragState(), 7, "task-7", Point(0, 0))

    assert drag.pointer_moved(state, Point(5, 5), True) is state

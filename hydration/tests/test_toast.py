"""
Tests for the toast lifecycle.

Critical: the shared tick reschedules itself only while a toast is pending.
"""

from hydration.core.effects import ScheduleTick
from hydration.machines import toast
from hydration.machines.toast import ToastState


def test_first_toast_starts_the_tick():
    state, effects = toast.show(ToastState(), "Saved", "info", 1000, 250)

    assert effects == [ScheduleTick(delay_ms=250)]
    assert state.ticking is True
    assert [t.text for t in state.toasts] == ["Saved"]


def test_second_toast_shares_the_tick():
    """A new toast does not cancel or reschedule the running countdown."""
    state, _ = toast.show(ToastState(), "one", "info", 1000, 250)
    state, effects = toast.show(state, "two", "warning", 1000, 250)

    assert effects == []
    assert [t.id for t in state.toasts] == [1, 2]


def test_independent_countdowns():
    state, _ = toast.show(ToastState(), "long", "info", 1000, 250)
    state, _ = toast.show(state, "short", "info", 500, 250)

    state, effects = toast.tick(state, 250, 250)
    assert [(t.text, t.remaining_ms) for t in state.toasts] == [("long", 750), ("short", 250)]
    assert effects == [ScheduleTick(delay_ms=250)]

    state, effects = toast.tick(state, 250, 250)
    assert [t.text for t in state.toasts] == ["long"]
    assert effects == [ScheduleTick(delay_ms=250)]


def test_tick_stops_when_last_toast_expires():
    state, _ = toast.show(ToastState(), "bye", "info", 500, 250)
    state, _ = toast.tick(state, 250, 250)
    state, effects = toast.tick(state, 250, 250)

    assert state.toasts == ()
    assert state.ticking is False
    assert effects == []


def test_dismiss_at_any_point():
    state, _ = toast.show(ToastState(), "one", "info", 1000, 250)
    state, _ = toast.show(state, "two", "info", 1000, 250)
    state = toast.dismiss(state, 1)

    assert [t.text for t in state.toasts] == ["two"]

    # The pending tick finds nothing left and stops.
    state = toast.dismiss(state, 2)
    state, effects = toast.tick(state, 250, 250)
    assert effects == []
    assert state.ticking is False


def test_tick_without_pending_timer_is_ignored():
    state = ToastState()

    assert toast.tick(state, 250, 250) == (state, [])


def test_shown_at_follows_logical_clock():
    state, _ = toast.show(ToastState(), "one", "info", 1000, 250)
    state, _ = toast.tick(state, 250, 250)
    state, _ = toast.show(state, "two", "info", 1000, 250)

    assert [t.shown_at for t in state.toasts] == [0, 250]


def test_toast_shown_after_idle_gap_uses_host_time():
    state, _ = toast.show(ToastState(), "one", "info", 500, 250)
    state, _ = toast.tick(state, 250, 250)
    state, _ = toast.tick(state, 250, 250)
    assert state.ticking is False

    state = toast.advance_to(state, 4000)
    state, _ = toast.show(state, "two", "info", 500, 250)

    assert [t.shown_at for t in state.toasts] == [4000]


def test_advance_to_leaves_running_countdown_to_ticks():
    state, _ = toast.show(ToastState(), "one", "info", 1000, 250)

    assert toast.advance_to(state, 250) == state


def test_advance_to_never_moves_clock_back():
    state = toast.advance_to(ToastState(), 900)

    assert toast.advance_to(state, 100).clock.now() == 900

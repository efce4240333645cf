"""
Toast lifecycle.

    shown -> (ticks decrement remaining time) -> auto-dismissed
    shown -> dismissed by the user, at any point

Toasts coexist, each with its own countdown. One shared tick drives all of
them; it is rescheduled only while at least one toast is still pending,
so the timer stops by itself once the last toast is gone. Between ticks the
clock is moved forward by advance_to, so shown_at is the time of showing.
"""

from dataclasses import dataclass, replace
from typing import List, Tuple

from ..core.clock import DeterministicClock
from ..core.effects import Effect, ScheduleTick


@dataclass(frozen=True)
class Toast:
    id: int
    text: str
    level: str
    shown_at: int
    remaining_ms: int


@dataclass(frozen=True)
class ToastState:
    toasts: Tuple[Toast, ...] = ()
    next_id: int = 1
    ticking: bool = False
    clock: DeterministicClock = DeterministicClock()


def show(
    state: ToastState, text: str, level: str, duration_ms: int, tick_ms: int
) -> Tuple[ToastState, List[Effect]]:
    """
    Add a toast. Existing toasts are left alone.

    Returns:
        New state and, if no tick is pending yet, the effect that starts one
    """
    toast = Toast(
        id=state.next_id,
        text=text,
        level=level,
        shown_at=state.clock.now(),
        remaining_ms=duration_ms,
    )
    effects: List[Effect] = []
    ticking = state.ticking
    if not ticking:
        effects.append(ScheduleTick(delay_ms=tick_ms))
        ticking = True
    new_state = replace(
        state,
        toasts=state.toasts + (toast,),
        next_id=state.next_id + 1,
        ticking=ticking,
    )
    return new_state, effects


def dismiss(state: ToastState, toast_id: int) -> ToastState:
    """Remove a toast. The pending tick, if any, finds fewer toasts and may stop."""
    return replace(state, toasts=tuple(t for t in state.toasts if t.id != toast_id))


def tick(state: ToastState, elapsed_ms: int, tick_ms: int) -> Tuple[ToastState, List[Effect]]:
    """
    Advance every countdown by elapsed_ms and drop expired toasts.

    A tick that arrives while no tick is pending is ignored.
    """
    if not state.ticking:
        return state, []

    remaining = tuple(
        replace(t, remaining_ms=t.remaining_ms - elapsed_ms)
        for t in state.toasts
        if t.remaining_ms - elapsed_ms > 0
    )
    clock = state.clock.tick(elapsed_ms)

    if remaining:
        return replace(state, toasts=remaining, clock=clock), [ScheduleTick(delay_ms=tick_ms)]
    return replace(state, toasts=(), clock=clock, ticking=False), []


def advance_to(state: ToastState, now_ms: int) -> ToastState:
    """
    Catch the clock up with host time while no tick is pending.

    While ticking, the ticks themselves keep the clock in step.
    """
    if state.ticking or now_ms <= state.clock.now():
        return state
    return replace(state, clock=DeterministicClock(now_ms))

"""
Runtime: the host event loop around the pure core.

This is where side effects happen:
- API requests through an ApiClient
- History and title writes through a Navigator
- Timers (toast ticks, search debounce) and element measurement

Everything the effects produce re-enters the dispatcher as a message.
Time is logical: the queue is ordered by due time, and the clock jumps to
the next due message, so a simulation is reproducible and never sleeps.
"""

import heapq
from typing import Callable, Dict, List, Optional, Tuple

from hydration.core.api_error import ApiError, classify
from hydration.core.clock import DeterministicClock
from hydration.core.effects import (
    Effect,
    Fetch,
    MeasureElement,
    PushUrl,
    ReplaceUrl,
    ScheduleDebounce,
    ScheduleTick,
    SetTitle,
)
from hydration.core.msgs import (
    ClockAdvanced,
    DragRectMeasured,
    Msg,
    Rect,
    ResponseMsg,
    SearchDebounceFired,
    ToastTick,
    UrlChanged,
)
from hydration.core.state import SEARCH_STREAM, Model, Settings
from hydration.dispatch.update import Dispatcher, default_dispatcher, is_stale, response_stream
from hydration.routing.codec import split_url

from .api import ApiClient, request_label
from .logging_config import get_logger
from .metrics import track_api_error, track_dispatch, track_fetch, track_stale
from .navigation import Navigator

# element_id -> rect, or None when the element is gone
Measure = Callable[[str], Optional[Rect]]


class RuntimeLimitError(Exception):
    """Queue did not drain within the step limit."""
    pass


class Runtime:
    """
    Interprets effects and feeds results back into the dispatcher.

    Responsibilities:
    - Serialize every message through one dispatch point
    - Perform effects, scheduling their results at logical due times
    - Count dispatches, fetches, stale discards and API errors

    NOT responsible for:
    - Deciding what to load (that's the planner)
    - Folding results into the model (that's the dispatcher)
    """

    def __init__(
        self,
        api: ApiClient,
        navigator: Navigator,
        settings: Optional[Settings] = None,
        dispatcher: Optional[Dispatcher] = None,
        measure: Optional[Measure] = None,
    ):
        self.api = api
        self.navigator = navigator
        self.dispatcher = dispatcher or default_dispatcher()
        self.measure = measure
        self.model = Model.initial(settings)
        self.clock = DeterministicClock()
        self.trace: List[Tuple[int, Msg]] = []
        self.effects: List[Effect] = []
        self.toast_log: List[str] = []
        self._queue: List[Tuple[int, int, Msg]] = []
        self._seq = 0

    def send(self, msg: Msg, delay_ms: int = 0) -> None:
        """Queue msg for delivery delay_ms after the current logical time."""
        self._seq += 1
        heapq.heappush(self._queue, (self.clock.now() + delay_ms, self._seq, msg))

    def open(self, url: str) -> None:
        """Queue the initial location, as a browser load would."""
        path, query, fragment = split_url(url)
        self.send(UrlChanged(path=path, query=query, fragment=fragment))

    @property
    def pending(self) -> int:
        return len(self._queue)

    def step(self) -> bool:
        """
        Deliver the next due message.

        Returns:
            False if the queue was empty
        """
        if not self._queue:
            return False
        due, seq, msg = heapq.heappop(self._queue)
        if due > self.clock.now():
            self.clock = self.clock.tick(due - self.clock.now())
            self.dispatch(ClockAdvanced(now_ms=due), trace_id=f"msg-{seq}")
        self.dispatch(msg, trace_id=f"msg-{seq}")
        return True

    def run(self, max_steps: int = 10000) -> Model:
        """
        Drain the queue.

        Toast ticks keep the queue alive only while a toast is showing, so
        the queue always drains once the page has settled.

        Raises:
            RuntimeLimitError: If more than max_steps messages were delivered
        """
        for _ in range(max_steps):
            if not self.step():
                return self.model
        raise RuntimeLimitError(f"Queue not drained after {max_steps} steps")

    def dispatch(self, msg: Msg, trace_id: Optional[str] = None) -> None:
        """Apply one message now and perform its effects."""
        log = get_logger(__name__, trace_id=trace_id)
        msg_type = type(msg).__name__

        if is_stale(self.model, msg):
            stream = SEARCH_STREAM if isinstance(msg, SearchDebounceFired) else response_stream(msg)
            track_stale(stream)
        if isinstance(msg, ResponseMsg) and isinstance(msg.result, ApiError):
            track_api_error(classify(msg.result).value)

        before = self.model.ui.toasts.next_id
        with track_dispatch(msg_type):
            self.model, effects = self.dispatcher.apply(self.model, msg)

        self._record_toasts(before)

        self.trace.append((self.clock.now(), msg))
        log.debug("Applied %s at %sms, %d effects", msg_type, self.clock.now(), len(effects))
        for effect in effects:
            self.perform(effect)

    def perform(self, effect: Effect) -> None:
        self.effects.append(effect)
        if isinstance(effect, Fetch):
            track_fetch(type(effect.request).__name__)
            result = self.api.perform(effect.request)
            self.send(effect.response(result), delay_ms=self.api.latency_ms(effect.request))
            get_logger(__name__, trace_id=f"token-{effect.token}").debug(
                "Fetched %s", request_label(effect.request)
            )
        elif isinstance(effect, PushUrl):
            self.navigator.push_url(effect.url)
        elif isinstance(effect, ReplaceUrl):
            self.navigator.replace_url(effect.url)
        elif isinstance(effect, SetTitle):
            self.navigator.set_title(effect.title)
        elif isinstance(effect, ScheduleTick):
            self.send(ToastTick(elapsed_ms=effect.delay_ms), delay_ms=effect.delay_ms)
        elif isinstance(effect, ScheduleDebounce):
            self.send(SearchDebounceFired(token=effect.token), delay_ms=effect.delay_ms)
        elif isinstance(effect, MeasureElement):
            rect = self.measure(effect.element_id) if self.measure else None
            if rect is not None:
                self.send(DragRectMeasured(session=effect.session, rect=rect))
        else:
            raise TypeError(f"Unknown effect: {effect!r}")

    def _record_toasts(self, before: int) -> None:
        for toast in self.model.ui.toasts.toasts:
            if toast.id >= before:
                self.toast_log.append(toast.text)

    def effect_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for effect in self.effects:
            name = type(effect).__name__
            counts[name] = counts.get(name, 0) + 1
        return counts

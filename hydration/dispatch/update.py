"""
Update dispatcher: (model, msg) -> (model, effects).

One handler per message class, registered on a Dispatcher. Handlers are
pure: they derive a new model and return effects for the runtime.

Responses pass through the staleness guard first. A response whose token
is no longer the latest for its stream is dropped without touching the
model. Current responses are folded into their field; a 401 resets the
session instead, a 403 leaves the field as it was before the request and
shows a toast.

Navigation, login and successful loads re-run the planner (hydrate). A
failed field does not, with one exception: losing the current user
re-plans so that protected routes fall back to Login.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple, Type

from ..core.api_error import ApiError, ErrorKind, classify
from ..core.domain import User
from ..core.effects import (
    ClaimTask,
    Effect,
    Fetch,
    ReplaceUrl,
    ScheduleDebounce,
    SearchTasks,
    SetTitle,
)
from ..core.errors import InvalidTransitionError, RedirectLoopError
from ..core.msgs import (
    CapabilitiesFetched,
    ClockAdvanced,
    DialogClosed,
    DialogOpened,
    DragPointerDown,
    DragPointerMoved,
    DragPointerUp,
    DragRectMeasured,
    InviteLinksFetched,
    LoggedOut,
    LoginSucceeded,
    MeFetched,
    MeMetricsFetched,
    MembersFetched,
    MemberTasksFetched,
    MemberTaskTypesFetched,
    Msg,
    Navigate,
    OrgMetricsOverviewFetched,
    OrgMetricsProjectSelected,
    OrgMetricsProjectTasksFetched,
    PreferencesLoaded,
    ProjectSelected,
    ProjectsFetched,
    ResponseMsg,
    SearchDebounceFired,
    SearchInput,
    SearchResultsFetched,
    ShowToast,
    TaskClaimed,
    TaskTypesFetched,
    ToastDismissed,
    ToastTick,
    UrlChanged,
    WorkSessionsFetched,
)
from ..core.resource import Failed, Loaded, Loading
from ..core.state import (
    CLAIM_STREAM,
    MEMBER_REFRESH_STREAM,
    SEARCH_STREAM,
    CoreState,
    Model,
    ResourceKey,
    Slot,
    UiState,
)
from ..machines import drag, toast
from ..machines.drag import DragState
from ..plan.commands import Redirect
from ..plan.planner import plan
from ..plan.snapshot import build_snapshot
from ..routing.codec import RedirectTo, format_route, parse
from ..routing.route import Login, is_public, title_for, with_project
from .executor import enter_route, execute, refresh_member_resources, show_route

logger = logging.getLogger(__name__)

MAX_REDIRECTS = 8

# Handler signature: (model, msg) -> (new_model, effects)
Handler = Callable[[Model, Any], Tuple[Model, List[Effect]]]

# Response class -> resource field it feeds
RESOURCE_RESPONSES: Dict[Type[ResponseMsg], ResourceKey] = {
    MeFetched: ResourceKey.ME,
    ProjectsFetched: ResourceKey.PROJECTS,
    InviteLinksFetched: ResourceKey.INVITE_LINKS,
    CapabilitiesFetched: ResourceKey.CAPABILITIES,
    MembersFetched: ResourceKey.MEMBERS,
    TaskTypesFetched: ResourceKey.TASK_TYPES,
    WorkSessionsFetched: ResourceKey.WORK_SESSIONS,
    MeMetricsFetched: ResourceKey.ME_METRICS,
    OrgMetricsOverviewFetched: ResourceKey.ORG_METRICS_OVERVIEW,
    OrgMetricsProjectTasksFetched: ResourceKey.ORG_METRICS_PROJECT_TASKS,
}

# Join response class -> (aggregate field, join attribute on MemberState)
JOIN_RESPONSES: Dict[Type[ResponseMsg], Tuple[ResourceKey, str]] = {
    MemberTasksFetched: (ResourceKey.MEMBER_TASKS, "tasks_join"),
    MemberTaskTypesFetched: (ResourceKey.MEMBER_TASK_TYPES, "task_types_join"),
}

JOIN_SIBLINGS: Dict[ResourceKey, ResourceKey] = {
    ResourceKey.MEMBER_TASKS: ResourceKey.MEMBER_TASK_TYPES,
    ResourceKey.MEMBER_TASK_TYPES: ResourceKey.MEMBER_TASKS,
}


def response_stream(msg: ResponseMsg) -> str:
    """Generation stream a response message was issued on."""
    if type(msg) in RESOURCE_RESPONSES:
        return RESOURCE_RESPONSES[type(msg)].value
    if type(msg) in JOIN_RESPONSES:
        return MEMBER_REFRESH_STREAM
    if isinstance(msg, SearchResultsFetched):
        return SEARCH_STREAM
    if isinstance(msg, TaskClaimed):
        return CLAIM_STREAM
    raise InvalidTransitionError(f"Not a response message: {type(msg).__name__}")


def is_stale(model: Model, msg: Any) -> bool:
    """True if msg is a response (or debounce) that a newer request superseded."""
    if isinstance(msg, SearchDebounceFired):
        return not model.generations.is_current(SEARCH_STREAM, msg.token)
    if not isinstance(msg, ResponseMsg):
        return False
    return not model.generations.is_current(response_stream(msg), msg.token)


class Dispatcher:
    """
    Registry of message handlers.

    Usage:
        dispatcher = Dispatcher()
        dispatcher.register(UrlChanged, on_url_changed)
        model, effects = dispatcher.apply(model, msg)
    """

    def __init__(self) -> None:
        self._handlers: Dict[type, Handler] = {}

    def register(self, msg_type: type, handler: Handler) -> None:
        """
        Register message handler.

        Args:
            msg_type: Message class
            handler: Pure function (model, msg) -> (new_model, effects)
        """
        self._handlers[msg_type] = handler

    def handles(self, msg_type: type) -> bool:
        return msg_type in self._handlers

    def apply(self, model: Model, msg: Msg) -> Tuple[Model, List[Effect]]:
        """
        Apply message to model using its registered handler.

        Raises:
            InvalidTransitionError: If no handler is registered for the
                message class
        """
        handler = self._handlers.get(type(msg))
        if handler is None:
            raise InvalidTransitionError(f"No handler for message type: {type(msg).__name__}")
        return handler(model, msg)


def hydrate(model: Model) -> Tuple[Model, List[Effect]]:
    """
    Run planning passes until the route settles, executing the commands.

    A Redirect is executed alone and followed by a fresh pass against the
    new route.

    Raises:
        RedirectLoopError: If the route has not settled after MAX_REDIRECTS
    """
    effects: List[Effect] = []
    for _ in range(MAX_REDIRECTS + 1):
        commands = plan(model.core.route, build_snapshot(model))
        if commands and isinstance(commands[0], Redirect):
            model, fx = execute(model, commands[0])
            effects.extend(fx)
            continue
        for command in commands:
            model, fx = execute(model, command)
            effects.extend(fx)
        return model, effects
    raise RedirectLoopError(f"Route did not settle after {MAX_REDIRECTS} redirects")


def reset_session(model: Model, error: ApiError) -> Tuple[Model, List[Effect]]:
    """
    Drop everything tied to the session and go back to Login.

    Every generation stream is advanced so that nothing already in flight
    can land in the fresh model. Preferences and toasts survive; page-local
    UI state does not. Public routes are left where they are.
    """
    route = model.core.route
    if not is_public(route):
        route = Login()
    logger.info("Session reset (%s), route %s", error.code, format_route(route))

    fresh = Model(
        core=CoreState(
            route=route,
            me=Slot(resource=Failed(error)),
            theme=model.core.theme,
            locale=model.core.locale,
        ),
        ui=UiState(
            toasts=model.ui.toasts,
            drag=DragState(last_session=model.ui.drag.last_session),
        ),
        generations=model.generations.supersede_all(),
        settings=model.settings,
    )

    effects: List[Effect] = []
    if route != model.core.route:
        effects = [ReplaceUrl(format_route(route)), SetTitle(title_for(route))]
    fresh, fx = hydrate(fresh)
    return fresh, effects + fx


def _discard(model: Model, msg: Any) -> Tuple[Model, List[Effect]]:
    logger.debug(
        "Discarding %s token %s (%s)", type(msg).__name__, msg.token, ErrorKind.STALE_RESPONSE.value
    )
    return model, []


def _show_toast(model: Model, text: str, level: str) -> Tuple[Model, List[Effect]]:
    settings = model.settings
    toasts, effects = toast.show(
        model.ui.toasts, text, level, settings.toast_duration_ms, settings.toast_tick_ms
    )
    return model.with_ui(toasts=toasts), effects


def _forbidden(model: Model, what: str) -> Tuple[Model, List[Effect]]:
    logger.warning("Forbidden: %s", what)
    return _show_toast(model, f"You do not have access to {what}.", "warning")


def _freeze(value: Any) -> Any:
    if isinstance(value, list):
        return tuple(value)
    return value


# Navigation


def on_url_changed(model: Model, msg: UrlChanged) -> Tuple[Model, List[Effect]]:
    result = parse(msg.path, msg.query, msg.fragment)
    if isinstance(result, RedirectTo):
        logger.info("Normalizing %s to %s", msg.path, format_route(result.route))
        model, effects = enter_route(model, result.route, replace=True)
    else:
        # The location already shows this route.
        model = show_route(model, result.route)
        effects = [SetTitle(title_for(result.route))]
    model, fx = hydrate(model)
    return model, effects + fx


def on_navigate(model: Model, msg: Navigate) -> Tuple[Model, List[Effect]]:
    model, effects = enter_route(model, msg.route, replace=False)
    model, fx = hydrate(model)
    return model, effects + fx


def on_project_selected(model: Model, msg: ProjectSelected) -> Tuple[Model, List[Effect]]:
    route = with_project(model.core.route, msg.project_id)
    if route == model.core.route:
        model = model.with_core(selected_project_id=msg.project_id)
        return hydrate(model)
    model, effects = enter_route(model, route, replace=False)
    model, fx = hydrate(model)
    return model, effects + fx


def on_org_metrics_project_selected(
    model: Model, msg: OrgMetricsProjectSelected
) -> Tuple[Model, List[Effect]]:
    return hydrate(model.with_admin(drilldown_project_id=msg.project_id))


# Session


def on_login_succeeded(model: Model, msg: LoginSucceeded) -> Tuple[Model, List[Effect]]:
    # A fresh token makes any /me request still in flight stale.
    model, _ = model.issue_token(ResourceKey.ME.value)
    me = model.core.me.start().resolve(msg.user)
    return hydrate(model.with_core(me=me))


def on_logged_out(model: Model, msg: LoggedOut) -> Tuple[Model, List[Effect]]:
    return reset_session(model, ApiError(status=401, code="LOGGED_OUT", message="Signed out"))


def on_preferences_loaded(model: Model, msg: PreferencesLoaded) -> Tuple[Model, List[Effect]]:
    return model.with_core(theme=msg.theme, locale=msg.locale), []


# Responses


def _fold_response(
    model: Model, key: ResourceKey, result: Any, replan: bool = True
) -> Tuple[Model, List[Effect]]:
    slot = model.slot(key)
    if isinstance(result, ApiError):
        kind = classify(result)
        if kind == ErrorKind.AUTH_REQUIRED:
            return reset_session(model, result)
        if kind == ErrorKind.FORBIDDEN and key != ResourceKey.ME:
            model = model.with_slot(key, slot.refuse())
            return _forbidden(model, key.value.replace("_", " "))
        logger.debug("%s failed: %s %s", key.value, result.status, result.code)
        model = model.with_slot(key, slot.fail(result))
        if key == ResourceKey.ME:
            # No user, refused or failed, means signed out; the planner sends
            # protected routes to Login.
            return hydrate(model)
        return model, []

    if key == ResourceKey.ME and not isinstance(result, User):
        raise InvalidTransitionError(f"me response is not a User: {type(result).__name__}")

    model = model.with_slot(key, slot.resolve(_freeze(result)))
    if replan:
        return hydrate(model)
    return model, []


def on_resource_response(model: Model, msg: ResponseMsg) -> Tuple[Model, List[Effect]]:
    if is_stale(model, msg):
        return _discard(model, msg)
    return _fold_response(model, RESOURCE_RESPONSES[type(msg)], msg.result)


def on_join_response(model: Model, msg: ResponseMsg) -> Tuple[Model, List[Effect]]:
    key, join_attr = JOIN_RESPONSES[type(msg)]
    join = getattr(model.member, join_attr)
    if is_stale(model, msg) or join is None or join.token != msg.token:
        return _discard(model, msg)

    effects: List[Effect] = []
    result = msg.result
    if isinstance(result, ApiError):
        kind = classify(result)
        if kind == ErrorKind.AUTH_REQUIRED:
            return reset_session(model, result)
        if kind == ErrorKind.FORBIDDEN:
            # A refused branch contributes nothing; the join still completes.
            model, effects = _forbidden(model, f"project {msg.key}")
            result = ()

    join = join.receive(msg.key, result)
    model = model.with_member(**{join_attr: join})

    slot = model.slot(key)
    outcome = join.outcome()
    if not isinstance(slot.resource, Loading) or isinstance(outcome, Loading):
        return model, effects
    if isinstance(outcome, Loaded):
        model = model.with_slot(key, slot.resolve(outcome.value))
        sibling = JOIN_SIBLINGS[key]
        if isinstance(model.slot(sibling).resource, Failed):
            # The refresh as a whole failed; re-planning would retry both joins.
            return model, effects
        model, fx = hydrate(model)
        return model, effects + fx
    model = model.with_slot(key, slot.fail(outcome.error))
    return model, effects


# Search


def on_search_input(model: Model, msg: SearchInput) -> Tuple[Model, List[Effect]]:
    model = model.with_member(search_query=msg.text)
    model, token = model.issue_token(SEARCH_STREAM)
    return model, [ScheduleDebounce(token=token, delay_ms=model.settings.search_debounce_ms)]


def on_search_debounce_fired(model: Model, msg: SearchDebounceFired) -> Tuple[Model, List[Effect]]:
    if is_stale(model, msg):
        return _discard(model, msg)

    query = model.member.search_query.strip()
    results = model.member.search_results.start(scope=query)
    if not query:
        return model.with_member(search_results=results.resolve(())), []

    scope = model.member.tasks.scope
    project_ids = tuple(scope) if isinstance(scope, tuple) else ()
    model = model.with_member(search_results=results)
    request = SearchTasks(query=query, project_ids=project_ids)
    return model, [Fetch(request, SearchResultsFetched, msg.token)]


def on_search_results(model: Model, msg: SearchResultsFetched) -> Tuple[Model, List[Effect]]:
    if is_stale(model, msg):
        return _discard(model, msg)
    return _fold_response(model, ResourceKey.SEARCH_RESULTS, msg.result, replan=False)


# Claims


def on_task_claimed(model: Model, msg: TaskClaimed) -> Tuple[Model, List[Effect]]:
    if is_stale(model, msg):
        return _discard(model, msg)

    result = msg.result
    if isinstance(result, ApiError):
        kind = classify(result)
        if kind == ErrorKind.AUTH_REQUIRED:
            return reset_session(model, result)
        if kind == ErrorKind.FORBIDDEN:
            return _forbidden(model, f"task {msg.key}")
        return _show_toast(model, f"Could not claim task: {result.message or result.code}", "error")

    scope = model.member.tasks.scope
    project_ids = tuple(scope) if isinstance(scope, tuple) else build_snapshot(model).project_ids
    model, effects = _show_toast(model, "Task claimed.", "success")
    model, fx = refresh_member_resources(model, project_ids)
    return model, effects + fx


# Drag


def on_drag_pointer_down(model: Model, msg: DragPointerDown) -> Tuple[Model, List[Effect]]:
    state, effects = drag.pointer_down(model.ui.drag, msg.task_id, msg.element_id, msg.point)
    return model.with_ui(drag=state), effects


def on_drag_rect_measured(model: Model, msg: DragRectMeasured) -> Tuple[Model, List[Effect]]:
    state = drag.rect_measured(model.ui.drag, msg.session, msg.rect)
    if state is model.ui.drag:
        logger.debug("Discarding rect for drag session %s", msg.session)
        return model, []
    return model.with_ui(drag=state), []


def on_drag_pointer_moved(model: Model, msg: DragPointerMoved) -> Tuple[Model, List[Effect]]:
    return model.with_ui(drag=drag.pointer_moved(model.ui.drag, msg.point, msg.over_target)), []


def on_drag_pointer_up(model: Model, msg: DragPointerUp) -> Tuple[Model, List[Effect]]:
    state, claimed = drag.pointer_up(model.ui.drag)
    model = model.with_ui(drag=state)
    if claimed is None:
        return model, []
    model, token = model.issue_token(CLAIM_STREAM)
    return model, [Fetch(ClaimTask(claimed), TaskClaimed, token, key=claimed)]


# Toasts and dialogs


def on_show_toast(model: Model, msg: ShowToast) -> Tuple[Model, List[Effect]]:
    return _show_toast(model, msg.text, msg.level)


def on_toast_dismissed(model: Model, msg: ToastDismissed) -> Tuple[Model, List[Effect]]:
    return model.with_ui(toasts=toast.dismiss(model.ui.toasts, msg.toast_id)), []


def on_toast_tick(model: Model, msg: ToastTick) -> Tuple[Model, List[Effect]]:
    toasts, effects = toast.tick(model.ui.toasts, msg.elapsed_ms, model.settings.toast_tick_ms)
    return model.with_ui(toasts=toasts), effects


def on_clock_advanced(model: Model, msg: ClockAdvanced) -> Tuple[Model, List[Effect]]:
    return model.with_ui(toasts=toast.advance_to(model.ui.toasts, msg.now_ms)), []


def on_dialog_opened(model: Model, msg: DialogOpened) -> Tuple[Model, List[Effect]]:
    return model.with_ui(open_dialog=msg.name), []


def on_dialog_closed(model: Model, msg: DialogClosed) -> Tuple[Model, List[Effect]]:
    return model.with_ui(open_dialog=None), []


def register_handlers(dispatcher: Dispatcher) -> None:
    dispatcher.register(UrlChanged, on_url_changed)
    dispatcher.register(Navigate, on_navigate)
    dispatcher.register(ProjectSelected, on_project_selected)
    dispatcher.register(OrgMetricsProjectSelected, on_org_metrics_project_selected)
    dispatcher.register(LoginSucceeded, on_login_succeeded)
    dispatcher.register(LoggedOut, on_logged_out)
    dispatcher.register(PreferencesLoaded, on_preferences_loaded)
    for msg_type in RESOURCE_RESPONSES:
        dispatcher.register(msg_type, on_resource_response)
    for msg_type in JOIN_RESPONSES:
        dispatcher.register(msg_type, on_join_response)
    dispatcher.register(SearchInput, on_search_input)
    dispatcher.register(SearchDebounceFired, on_search_debounce_fired)
    dispatcher.register(SearchResultsFetched, on_search_results)
    dispatcher.register(TaskClaimed, on_task_claimed)
    dispatcher.register(DragPointerDown, on_drag_pointer_down)
    dispatcher.register(DragRectMeasured, on_drag_rect_measured)
    dispatcher.register(DragPointerMoved, on_drag_pointer_moved)
    dispatcher.register(DragPointerUp, on_drag_pointer_up)
    dispatcher.register(ShowToast, on_show_toast)
    dispatcher.register(ToastDismissed, on_toast_dismissed)
    dispatcher.register(ToastTick, on_toast_tick)
    dispatcher.register(ClockAdvanced, on_clock_advanced)
    dispatcher.register(DialogOpened, on_dialog_opened)
    dispatcher.register(DialogClosed, on_dialog_closed)


def default_dispatcher() -> Dispatcher:
    dispatcher = Dispatcher()
    register_handlers(dispatcher)
    return dispatcher


_DEFAULT: Optional[Dispatcher] = None


def update(model: Model, msg: Msg) -> Tuple[Model, List[Effect]]:
    """Apply msg with the default handler set."""
    global _DEFAULT
    if _DEFAULT is None:
        _DEFAULT = default_dispatcher()
    return _DEFAULT.apply(model, msg)

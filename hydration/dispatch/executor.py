"""
Command executor: commands -> (model, effects).

For each fetch command the target field goes to Loading, recording the
scope it is loading for and a fresh generation token, and a Fetch effect
tagged with that token is emitted. The request itself is fire-and-forget;
its result comes back later as an ordinary message.

Still pure: effects are returned, never performed.
"""

import logging
from typing import List, Tuple, Type

from ..core.effects import (
    ApiRequest,
    Effect,
    Fetch,
    GetMe,
    GetMyMetrics,
    GetOrgMetricsOverview,
    GetOrgMetricsProjectTasks,
    ListCapabilities,
    ListInviteLinks,
    ListProjectMembers,
    ListProjects,
    ListProjectTasks,
    ListTaskTypes,
    ListWorkSessions,
    PushUrl,
    ReplaceUrl,
    SetTitle,
)
from ..core.msgs import (
    CapabilitiesFetched,
    InviteLinksFetched,
    MeFetched,
    MeMetricsFetched,
    MembersFetched,
    MemberTasksFetched,
    MemberTaskTypesFetched,
    OrgMetricsOverviewFetched,
    OrgMetricsProjectTasksFetched,
    ProjectsFetched,
    ResponseMsg,
    TaskTypesFetched,
    WorkSessionsFetched,
)
from ..core.state import MEMBER_REFRESH_STREAM, Model, ResourceKey
from ..machines.drag import DragState
from ..plan.commands import (
    Command,
    FetchCapabilities,
    FetchCommand,
    FetchInviteLinks,
    FetchMe,
    FetchMeMetrics,
    FetchMembers,
    FetchOrgMetricsOverview,
    FetchOrgMetricsProjectTasks,
    FetchProjects,
    FetchTaskTypes,
    FetchWorkSessions,
    RefreshMemberResources,
    Redirect,
)
from ..routing.codec import format_route
from ..routing.route import Route, project_of, title_for
from ..sync.join import FanInJoin

logger = logging.getLogger(__name__)


def execute(model: Model, command: Command) -> Tuple[Model, List[Effect]]:
    """
    Apply one command.

    Args:
        model: Current model
        command: Command from the planner (or a forced refresh)

    Returns:
        (new model, effects to perform)
    """
    if isinstance(command, Redirect):
        logger.info("Redirecting to %s", format_route(command.route))
        return enter_route(model, command.route, replace=command.replace)
    if isinstance(command, RefreshMemberResources):
        return refresh_member_resources(model, command.project_ids)
    return _fetch(model, command)


def show_route(model: Model, route: Route) -> Model:
    """
    Make route current without touching the location bar.

    Page-local UI state (drag gesture, open dialog) does not survive a page
    change.
    """
    selected = project_of(route)
    if selected is None:
        selected = model.core.selected_project_id
    model = model.with_core(route=route, selected_project_id=selected)
    return model.with_ui(drag=DragState(last_session=model.ui.drag.last_session), open_dialog=None)


def enter_route(model: Model, route: Route, replace: bool) -> Tuple[Model, List[Effect]]:
    """Make route current and write it to the location bar."""
    model = show_route(model, route)

    url = format_route(route)
    write: Effect = ReplaceUrl(url) if replace else PushUrl(url)
    return model, [write, SetTitle(title_for(route))]


def refresh_member_resources(model: Model, project_ids: Tuple[int, ...]) -> Tuple[Model, List[Effect]]:
    """
    Fan out tasks and task types for every project and start their joins.

    Both joins share one generation token from the member-refresh stream, so
    a later refresh (e.g., after a project switch) makes every branch of
    this one stale. With no projects both aggregates are Loaded(()) at once.
    """
    keys = tuple(dict.fromkeys(project_ids))
    model, token = model.issue_token(MEMBER_REFRESH_STREAM)

    tasks_join = FanInJoin.start(keys, token)
    types_join = FanInJoin.start(keys, token)
    tasks = model.member.tasks.start(scope=keys)
    task_types = model.member.task_types.start(scope=keys)

    if not keys:
        tasks = tasks.resolve(())
        task_types = task_types.resolve(())

    model = model.with_member(
        tasks=tasks,
        task_types=task_types,
        tasks_join=tasks_join,
        task_types_join=types_join,
    )

    effects: List[Effect] = []
    for project_id in keys:
        effects.append(Fetch(ListProjectTasks(project_id), MemberTasksFetched, token, key=project_id))
        effects.append(Fetch(ListTaskTypes(project_id), MemberTaskTypesFetched, token, key=project_id))
    logger.debug("Member refresh %s over projects %s", token, list(keys))
    return model, effects


def _fetch(model: Model, command: FetchCommand) -> Tuple[Model, List[Effect]]:
    key: ResourceKey = command.resource
    request, reply = _request_for(model, command)

    model, token = model.issue_token(key.value)
    model = model.with_slot(key, model.slot(key).start(command.scope))
    return model, [Fetch(request, reply, token, key=command.scope)]


def _request_for(model: Model, command: FetchCommand) -> Tuple[ApiRequest, Type[ResponseMsg]]:
    window = model.settings.metrics_window_days
    if isinstance(command, FetchMe):
        return GetMe(), MeFetched
    if isinstance(command, FetchProjects):
        return ListProjects(), ProjectsFetched
    if isinstance(command, FetchInviteLinks):
        return ListInviteLinks(), InviteLinksFetched
    if isinstance(command, FetchCapabilities):
        return ListCapabilities(), CapabilitiesFetched
    if isinstance(command, FetchMembers):
        return ListProjectMembers(command.project_id), MembersFetched
    if isinstance(command, FetchTaskTypes):
        return ListTaskTypes(command.project_id), TaskTypesFetched
    if isinstance(command, FetchWorkSessions):
        return ListWorkSessions(), WorkSessionsFetched
    if isinstance(command, FetchMeMetrics):
        return GetMyMetrics(window), MeMetricsFetched
    if isinstance(command, FetchOrgMetricsOverview):
        return GetOrgMetricsOverview(window), OrgMetricsOverviewFetched
    if isinstance(command, FetchOrgMetricsProjectTasks):
        return GetOrgMetricsProjectTasks(command.project_id, window), OrgMetricsProjectTasksFetched
    raise TypeError(f"Not a fetch command: {command!r}")

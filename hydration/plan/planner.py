"""
Hydration planner: (route, snapshot) -> commands.

NO side effects. NO I/O. NO hidden counters.
Same (route, snapshot) -> same commands, always.

Ordering policy:
- A Redirect short-circuits: when access or project resolution fails, the
  pass returns only the Redirect and planning resumes on the new route.
- The current user gates everything but public routes.
- The project list gates project-scoped resources; independent resources
  are emitted alongside it.
- A command is dropped when its resource is already Loading or Loaded for
  the same scope, or was refused (403) for that scope.
"""

import logging
from typing import Any, List, Optional, Sequence, Tuple, assert_never

from ..core.domain import OrgRole
from ..core.resource import CoarseState
from ..core.state import ResourceKey
from ..routing.route import (
    DEFAULT_CONFIG_SECTION,
    AcceptInvite,
    Config,
    ConfigSection,
    Login,
    Member,
    MemberSection,
    Org,
    OrgSection,
    ResetPassword,
    Route,
)
from .commands import (
    Command,
    FetchCapabilities,
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
from .snapshot import AuthUnknown, Authed, ResourceView, Snapshot, Unauthed

logger = logging.getLogger(__name__)


class HydrationPlanner:
    """
    Pure planning logic.

    All decisions are deterministic:
    - Same (route, snapshot) -> same commands
    - The snapshot is never modified
    - No I/O
    """

    def plan(self, route: Route, snapshot: Snapshot) -> List[Command]:
        """
        Decide which commands bring the route's resources up to date.

        Args:
            route: Route being displayed
            snapshot: Read-only projection of the current model

        Returns:
            Ordered commands; a Redirect, when present, is the only one
        """
        if isinstance(route, (AcceptInvite, ResetPassword)):
            return []
        if isinstance(route, Login):
            return self._plan_login(snapshot)

        auth = snapshot.auth
        if isinstance(auth, AuthUnknown):
            return self._wanted(snapshot, [FetchMe()])
        if isinstance(auth, Unauthed):
            return [Redirect(Login())]

        if isinstance(route, Org):
            return self._plan_org(route, snapshot, auth)
        if isinstance(route, Config):
            return self._plan_config(route, snapshot, auth)
        if isinstance(route, Member):
            return self._plan_member(route, snapshot)
        assert_never(route)

    def _plan_login(self, snapshot: Snapshot) -> List[Command]:
        if isinstance(snapshot.auth, Authed):
            return [Redirect(Member())]
        if isinstance(snapshot.auth, AuthUnknown):
            return self._wanted(snapshot, [FetchMe()])
        return []

    def _plan_org(self, route: Org, snapshot: Snapshot, auth: Authed) -> List[Command]:
        if auth.role != OrgRole.ADMIN:
            return [Redirect(Member())]

        commands: List[Command] = [FetchProjects()]
        if route.section == OrgSection.INVITES:
            commands.append(FetchInviteLinks())
        elif route.section == OrgSection.METRICS:
            commands.append(FetchOrgMetricsOverview())
            drilldown = snapshot.drilldown_project_id
            if (
                drilldown is not None
                and snapshot.projects_loaded
                and drilldown in snapshot.project_ids
            ):
                commands.append(FetchOrgMetricsProjectTasks(drilldown))
        return self._wanted(snapshot, commands)

    def _plan_config(self, route: Config, snapshot: Snapshot, auth: Authed) -> List[Command]:
        is_admin = auth.role == OrgRole.ADMIN

        if not snapshot.projects_loaded:
            # Non-admins need their project roles before access can be decided.
            commands: List[Command] = [FetchProjects()]
            if is_admin:
                commands.extend(self._config_commands(route.section, None))
            return self._wanted(snapshot, commands)

        candidates = snapshot.project_ids if is_admin else snapshot.managed_project_ids
        if not is_admin and not candidates:
            return [Redirect(Member())]

        if route.project_id is not None and route.project_id not in candidates:
            fallback = candidates[0] if candidates else None
            logger.info(
                "Project %s not available for %s, redirecting", route.project_id, route.section.value
            )
            return [Redirect(Config(DEFAULT_CONFIG_SECTION, fallback))]

        project_id = self._resolve_project(route.project_id, snapshot.selected_project_id, candidates)
        commands = [FetchProjects()]
        commands.extend(self._config_commands(route.section, project_id))
        return self._wanted(snapshot, commands)

    def _config_commands(self, section: ConfigSection, project_id: Optional[int]) -> List[Command]:
        """Section resources; project-scoped ones only once a project is resolved."""
        commands: List[Command] = []
        if section == ConfigSection.MEMBERS:
            if project_id is not None:
                commands.append(FetchMembers(project_id))
        elif section == ConfigSection.CAPABILITIES:
            commands.append(FetchCapabilities())
        elif section == ConfigSection.TASK_TYPES:
            commands.append(FetchCapabilities())
            if project_id is not None:
                commands.append(FetchTaskTypes(project_id))
        return commands

    def _plan_member(self, route: Member, snapshot: Snapshot) -> List[Command]:
        section = route.section
        independent: List[Command] = []
        if section in (MemberSection.POOL, MemberSection.SKILLS):
            independent.append(FetchCapabilities())
        if section in (MemberSection.POOL, MemberSection.MY_BAR):
            independent.append(FetchWorkSessions())
        if section == MemberSection.METRICS:
            independent.append(FetchMeMetrics())

        if not snapshot.projects_loaded:
            return self._wanted(snapshot, [FetchProjects()] + independent)

        if route.project_id is not None and route.project_id not in snapshot.project_ids:
            return [Redirect(Member(section, None, route.view))]

        commands: List[Command] = [FetchProjects()]
        if section in (MemberSection.POOL, MemberSection.MY_BAR):
            if route.project_id is not None:
                keys: Tuple[int, ...] = (route.project_id,)
            else:
                keys = snapshot.project_ids
            commands.append(RefreshMemberResources(keys))
        commands.extend(independent)
        return self._wanted(snapshot, commands)

    def _resolve_project(
        self, requested: Optional[int], selected: Optional[int], candidates: Sequence[int]
    ) -> Optional[int]:
        if requested is not None:
            return requested
        if selected is not None and selected in candidates:
            return selected
        return candidates[0] if candidates else None

    def _wanted(self, snapshot: Snapshot, commands: List[Command]) -> List[Command]:
        """Drop commands already satisfied or in flight, and duplicates."""
        result: List[Command] = []
        for command in commands:
            if command in result:
                continue
            if isinstance(command, Redirect) or self._needed(snapshot, command):
                result.append(command)
        return result

    def _needed(self, snapshot: Snapshot, command: Command) -> bool:
        if isinstance(command, RefreshMemberResources):
            # One refresh fills both aggregates; retry only once it has settled.
            views = [
                snapshot.view(key)
                for key in (ResourceKey.MEMBER_TASKS, ResourceKey.MEMBER_TASK_TYPES)
            ]
            if any(v.state == CoarseState.LOADING and v.scope == command.scope for v in views):
                return False
            return any(self._stale(view, command.scope) for view in views)
        return self._stale(snapshot.view(command.resource), command.scope)

    def _stale(self, view: ResourceView, scope: Any) -> bool:
        same_scope = view.scope == scope
        if view.state in (CoarseState.LOADING, CoarseState.LOADED) and same_scope:
            return False
        if view.refused and same_scope:
            return False
        return True


_PLANNER = HydrationPlanner()


def plan(route: Route, snapshot: Snapshot) -> List[Command]:
    """Module-level entry point; see HydrationPlanner.plan."""
    return _PLANNER.plan(route, snapshot)

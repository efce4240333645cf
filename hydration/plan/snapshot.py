"""
Snapshot: the minimal read-only view of the model the planner works from.

Built fresh for every planning pass. It carries coarse resource states
and scopes, never payloads, except for the handful of facts the planner
needs to resolve projects and access (project ids, managed projects, role).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

from ..core.domain import OrgRole, Project, ProjectRole, User
from ..core.resource import CoarseState, Failed, Loaded, to_coarse_state
from ..core.state import Model, ResourceKey, SLOT_PATHS
from ..routing.route import project_of


@dataclass(frozen=True)
class AuthUnknown:
    pass


@dataclass(frozen=True)
class Unauthed:
    pass


@dataclass(frozen=True)
class Authed:
    role: OrgRole


AuthState = Union[AuthUnknown, Unauthed, Authed]


@dataclass(frozen=True)
class ResourceView:
    state: CoarseState = CoarseState.NOT_ASKED
    scope: Any = None
    refused: bool = False


@dataclass(frozen=True)
class Snapshot:
    auth: AuthState = AuthUnknown()
    resources: Dict[ResourceKey, ResourceView] = field(default_factory=dict)
    project_ids: Tuple[int, ...] = ()
    managed_project_ids: Tuple[int, ...] = ()
    selected_project_id: Optional[int] = None
    drilldown_project_id: Optional[int] = None

    def view(self, key: ResourceKey) -> ResourceView:
        return self.resources.get(key, ResourceView())

    @property
    def projects_loaded(self) -> bool:
        return self.view(ResourceKey.PROJECTS).state == CoarseState.LOADED


def auth_state(model: Model) -> AuthState:
    me = model.core.me.resource
    if isinstance(me, Loaded) and isinstance(me.value, User):
        return Authed(role=me.value.org_role)
    if isinstance(me, Failed):
        return Unauthed()
    return AuthUnknown()


def build_snapshot(model: Model) -> Snapshot:
    resources = {}
    for key in SLOT_PATHS:
        slot = model.slot(key)
        resources[key] = ResourceView(
            state=to_coarse_state(slot.resource),
            scope=slot.scope,
            refused=slot.refused,
        )

    projects = model.core.projects.value or ()
    project_ids = tuple(p.id for p in projects if isinstance(p, Project))
    managed = tuple(
        p.id for p in projects if isinstance(p, Project) and p.my_role == ProjectRole.MANAGER
    )

    selected = project_of(model.core.route)
    if selected is None:
        selected = model.core.selected_project_id

    return Snapshot(
        auth=auth_state(model),
        resources=resources,
        project_ids=project_ids,
        managed_project_ids=managed,
        selected_project_id=selected,
        drilldown_project_id=model.admin.drilldown_project_id,
    )

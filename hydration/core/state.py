"""
Application model.

The model is split into independently replaceable partitions (core, admin,
member, ui) plus the generation table. Every partition is a frozen
dataclass: an update builds a new partition and a new Model around it,
never touching the old ones, so each dispatch step sees one coherent
snapshot.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from ..machines.drag import DragState
from ..machines.toast import ToastState
from ..routing.route import Login, Route
from ..sync.join import FanInJoin
from ..sync.staleness import Generations
from .api_error import ApiError
from .domain import Locale, Theme
from .resource import Failed, Loaded, Loading, NotAsked, Resource, begin, merge


class ResourceKey(str, Enum):
    ME = "me"
    PROJECTS = "projects"
    INVITE_LINKS = "invite_links"
    CAPABILITIES = "capabilities"
    MEMBERS = "members"
    TASK_TYPES = "task_types"
    WORK_SESSIONS = "work_sessions"
    ME_METRICS = "me_metrics"
    ORG_METRICS_OVERVIEW = "org_metrics_overview"
    ORG_METRICS_PROJECT_TASKS = "org_metrics_project_tasks"
    MEMBER_TASKS = "member_tasks"
    MEMBER_TASK_TYPES = "member_task_types"
    SEARCH_RESULTS = "search_results"


# Generation streams that are not a single resource.
MEMBER_REFRESH_STREAM = "member_refresh"
SEARCH_STREAM = "search"
CLAIM_STREAM = "claim"


@dataclass(frozen=True)
class Slot:
    """
    A server-backed field plus the bookkeeping the planner needs.

    Fields:
        resource: Current lattice value
        scope: What the last request was for (project id, key tuple, None)
        refused: Last request for this scope was answered 403
        prior: Value before the in-flight request, restored on 403
    """
    resource: Resource = NotAsked()
    scope: Any = None
    refused: bool = False
    prior: Resource = NotAsked()

    def start(self, scope: Any = None) -> "Slot":
        prior = self.prior if isinstance(self.resource, Loading) else self.resource
        return Slot(resource=begin(self.resource), scope=scope, refused=False, prior=prior)

    def resolve(self, value: Any) -> "Slot":
        return replace(self, resource=merge(self.resource, Loaded(value)), prior=NotAsked())

    def fail(self, error: ApiError) -> "Slot":
        return replace(self, resource=merge(self.resource, Failed(error)), prior=NotAsked())

    def refuse(self) -> "Slot":
        return Slot(resource=self.prior, scope=self.scope, refused=True, prior=NotAsked())

    @property
    def value(self) -> Any:
        if isinstance(self.resource, Loaded):
            return self.resource.value
        return None


@dataclass(frozen=True)
class Settings:
    """Timing and window constants the pure core needs."""
    search_debounce_ms: int = 350
    toast_duration_ms: int = 4000
    toast_tick_ms: int = 250
    metrics_window_days: int = 30


@dataclass(frozen=True)
class CoreState:
    route: Route = Login()
    me: Slot = field(default_factory=Slot)
    projects: Slot = field(default_factory=Slot)
    selected_project_id: Optional[int] = None
    theme: Theme = Theme.LIGHT
    locale: Locale = Locale.EN


@dataclass(frozen=True)
class AdminState:
    invite_links: Slot = field(default_factory=Slot)
    capabilities: Slot = field(default_factory=Slot)
    members: Slot = field(default_factory=Slot)
    task_types: Slot = field(default_factory=Slot)
    org_metrics_overview: Slot = field(default_factory=Slot)
    org_metrics_project_tasks: Slot = field(default_factory=Slot)
    drilldown_project_id: Optional[int] = None


@dataclass(frozen=True)
class MemberState:
    tasks: Slot = field(default_factory=Slot)
    task_types: Slot = field(default_factory=Slot)
    tasks_join: Optional[FanInJoin] = None
    task_types_join: Optional[FanInJoin] = None
    work_sessions: Slot = field(default_factory=Slot)
    me_metrics: Slot = field(default_factory=Slot)
    search_query: str = ""
    search_results: Slot = field(default_factory=Slot)


@dataclass(frozen=True)
class UiState:
    toasts: ToastState = field(default_factory=ToastState)
    drag: DragState = field(default_factory=DragState)
    open_dialog: Optional[str] = None


# ResourceKey -> (partition, field)
SLOT_PATHS: Dict[ResourceKey, Tuple[str, str]] = {
    ResourceKey.ME: ("core", "me"),
    ResourceKey.PROJECTS: ("core", "projects"),
    ResourceKey.INVITE_LINKS: ("admin", "invite_links"),
    ResourceKey.CAPABILITIES: ("admin", "capabilities"),
    ResourceKey.MEMBERS: ("admin", "members"),
    ResourceKey.TASK_TYPES: ("admin", "task_types"),
    ResourceKey.ORG_METRICS_OVERVIEW: ("admin", "org_metrics_overview"),
    ResourceKey.ORG_METRICS_PROJECT_TASKS: ("admin", "org_metrics_project_tasks"),
    ResourceKey.WORK_SESSIONS: ("member", "work_sessions"),
    ResourceKey.ME_METRICS: ("member", "me_metrics"),
    ResourceKey.MEMBER_TASKS: ("member", "tasks"),
    ResourceKey.MEMBER_TASK_TYPES: ("member", "task_types"),
    ResourceKey.SEARCH_RESULTS: ("member", "search_results"),
}


@dataclass(frozen=True)
class Model:
    """
    Whole application state.

    Use the with_* helpers to derive a new model; Model is immutable.
    """
    core: CoreState = field(default_factory=CoreState)
    admin: AdminState = field(default_factory=AdminState)
    member: MemberState = field(default_factory=MemberState)
    ui: UiState = field(default_factory=UiState)
    generations: Generations = field(default_factory=Generations)
    settings: Settings = field(default_factory=Settings)

    @staticmethod
    def initial(settings: Optional[Settings] = None) -> "Model":
        return Model(settings=settings or Settings())

    def with_core(self, **changes: Any) -> "Model":
        return replace(self, core=replace(self.core, **changes))

    def with_admin(self, **changes: Any) -> "Model":
        return replace(self, admin=replace(self.admin, **changes))

    def with_member(self, **changes: Any) -> "Model":
        return replace(self, member=replace(self.member, **changes))

    def with_ui(self, **changes: Any) -> "Model":
        return replace(self, ui=replace(self.ui, **changes))

    def slot(self, key: ResourceKey) -> Slot:
        partition, name = SLOT_PATHS[key]
        return getattr(getattr(self, partition), name)

    def with_slot(self, key: ResourceKey, slot: Slot) -> "Model":
        partition, name = SLOT_PATHS[key]
        updated = replace(getattr(self, partition), **{name: slot})
        return replace(self, **{partition: updated})

    def issue_token(self, stream: str) -> Tuple["Model", int]:
        generations, token = self.generations.next_token(stream)
        return replace(self, generations=generations), token

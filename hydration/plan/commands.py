"""
Commands: data-only intents emitted by the planner.

A command names the resource it would load and the scope it would load it
for. The planner compares that against the snapshot to avoid duplicate
requests; the executor turns it into effects.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Optional, Tuple, Union

from ..core.state import ResourceKey
from ..routing.route import Route


@dataclass(frozen=True)
class FetchMe:
    resource: ClassVar[ResourceKey] = ResourceKey.ME

    @property
    def scope(self) -> Any:
        return None


@dataclass(frozen=True)
class FetchProjects:
    resource: ClassVar[ResourceKey] = ResourceKey.PROJECTS

    @property
    def scope(self) -> Any:
        return None


@dataclass(frozen=True)
class FetchInviteLinks:
    resource: ClassVar[ResourceKey] = ResourceKey.INVITE_LINKS

    @property
    def scope(self) -> Any:
        return None


@dataclass(frozen=True)
class FetchCapabilities:
    resource: ClassVar[ResourceKey] = ResourceKey.CAPABILITIES

    @property
    def scope(self) -> Any:
        return None


@dataclass(frozen=True)
class FetchMembers:
    project_id: int
    resource: ClassVar[ResourceKey] = ResourceKey.MEMBERS

    @property
    def scope(self) -> Any:
        return self.project_id


@dataclass(frozen=True)
class FetchTaskTypes:
    project_id: int
    resource: ClassVar[ResourceKey] = ResourceKey.TASK_TYPES

    @property
    def scope(self) -> Any:
        return self.project_id


@dataclass(frozen=True)
class FetchWorkSessions:
    resource: ClassVar[ResourceKey] = ResourceKey.WORK_SESSIONS

    @property
    def scope(self) -> Any:
        return None


@dataclass(frozen=True)
class FetchMeMetrics:
    resource: ClassVar[ResourceKey] = ResourceKey.ME_METRICS

    @property
    def scope(self) -> Any:
        return None


@dataclass(frozen=True)
class FetchOrgMetricsOverview:
    resource: ClassVar[ResourceKey] = ResourceKey.ORG_METRICS_OVERVIEW

    @property
    def scope(self) -> Any:
        return None


@dataclass(frozen=True)
class FetchOrgMetricsProjectTasks:
    project_id: int
    resource: ClassVar[ResourceKey] = ResourceKey.ORG_METRICS_PROJECT_TASKS

    @property
    def scope(self) -> Any:
        return self.project_id


@dataclass(frozen=True)
class RefreshMemberResources:
    """Fan out tasks and task types over project_ids and join them."""
    project_ids: Tuple[int, ...] = ()
    resource: ClassVar[ResourceKey] = ResourceKey.MEMBER_TASKS

    @property
    def scope(self) -> Any:
        return self.project_ids


@dataclass(frozen=True)
class Redirect:
    """Navigate to route; replace=True rewrites the current history entry."""
    route: Route
    replace: bool = True
    resource: ClassVar[Optional[ResourceKey]] = None

    @property
    def scope(self) -> Any:
        return None


FetchCommand = Union[
    FetchMe,
    FetchProjects,
    FetchInviteLinks,
    FetchCapabilities,
    FetchMembers,
    FetchTaskTypes,
    FetchWorkSessions,
    FetchMeMetrics,
    FetchOrgMetricsOverview,
    FetchOrgMetricsProjectTasks,
    RefreshMemberResources,
]

Command = Union[FetchCommand, Redirect]

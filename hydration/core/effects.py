"""
Effects: side effects requested by the core, as data.

Handlers never perform I/O. They return effects and the runtime interprets
them: API requests are resolved through the fetch contract and their result
re-enters the dispatcher as the reply message, tagged with the token the
request was issued under.
"""

from dataclasses import dataclass
from typing import Any, Hashable, Optional, Tuple, Type, Union

from .msgs import ResponseMsg


# API requests. One class per endpoint; the runtime maps each to an
# ApiClient method.


@dataclass(frozen=True)
class GetMe:
    pass


@dataclass(frozen=True)
class ListProjects:
    pass


@dataclass(frozen=True)
class ListInviteLinks:
    pass


@dataclass(frozen=True)
class ListCapabilities:
    pass


@dataclass(frozen=True)
class ListProjectMembers:
    project_id: int


@dataclass(frozen=True)
class ListTaskTypes:
    project_id: int


@dataclass(frozen=True)
class ListProjectTasks:
    project_id: int


@dataclass(frozen=True)
class ListWorkSessions:
    pass


@dataclass(frozen=True)
class GetMyMetrics:
    window_days: int


@dataclass(frozen=True)
class GetOrgMetricsOverview:
    window_days: int


@dataclass(frozen=True)
class GetOrgMetricsProjectTasks:
    project_id: int
    window_days: int


@dataclass(frozen=True)
class SearchTasks:
    query: str
    project_ids: Tuple[int, ...] = ()


@dataclass(frozen=True)
class ClaimTask:
    task_id: int


ApiRequest = Union[
    GetMe,
    ListProjects,
    ListInviteLinks,
    ListCapabilities,
    ListProjectMembers,
    ListTaskTypes,
    ListProjectTasks,
    ListWorkSessions,
    GetMyMetrics,
    GetOrgMetricsOverview,
    GetOrgMetricsProjectTasks,
    SearchTasks,
    ClaimTask,
]


@dataclass(frozen=True)
class Fetch:
    """
    Issue an API request; fire-and-forget.

    Fields:
        request: What to ask for
        reply: Message class the result is delivered as
        token: Generation token the reply must carry
        key: Branch key for keyed requests (project id, task id)
    """
    request: ApiRequest
    reply: Type[ResponseMsg]
    token: int
    key: Optional[Hashable] = None

    def response(self, result: Any) -> ResponseMsg:
        return self.reply(token=self.token, result=result, key=self.key)


@dataclass(frozen=True)
class PushUrl:
    url: str


@dataclass(frozen=True)
class ReplaceUrl:
    url: str


@dataclass(frozen=True)
class SetTitle:
    title: str


@dataclass(frozen=True)
class ScheduleTick:
    """Deliver ToastTick(elapsed) after delay_ms."""
    delay_ms: int


@dataclass(frozen=True)
class ScheduleDebounce:
    """Deliver SearchDebounceFired(token) after delay_ms."""
    token: int
    delay_ms: int


@dataclass(frozen=True)
class MeasureElement:
    """Measure an element and deliver DragRectMeasured(session, rect)."""
    element_id: str
    session: int


Effect = Union[
    Fetch,
    PushUrl,
    ReplaceUrl,
    SetTitle,
    ScheduleTick,
    ScheduleDebounce,
    MeasureElement,
]

"""
Messages: everything that can happen to the model.

Messages are immutable records. Each kind is its own class so the
dispatcher can register one handler per class and a test can check that no
kind is left without one.
"""

from dataclasses import dataclass
from typing import Any, Hashable, Optional, Union

from ..routing.route import Route
from .domain import Locale, Theme, User


@dataclass(frozen=True)
class Point:
    x: int
    y: int


@dataclass(frozen=True)
class Rect:
    left: int
    top: int
    width: int
    height: int

    def contains(self, point: Point) -> bool:
        return (
            self.left <= point.x < self.left + self.width
            and self.top <= point.y < self.top + self.height
        )


# Navigation


@dataclass(frozen=True)
class UrlChanged:
    """Location changed outside the core (initial load, back/forward)."""
    path: str
    query: str = ""
    fragment: str = ""


@dataclass(frozen=True)
class Navigate:
    """In-app navigation; pushes a history entry."""
    route: Route


@dataclass(frozen=True)
class ProjectSelected:
    project_id: int


@dataclass(frozen=True)
class OrgMetricsProjectSelected:
    project_id: Optional[int]


# Session


@dataclass(frozen=True)
class LoginSucceeded:
    user: User


@dataclass(frozen=True)
class LoggedOut:
    pass


@dataclass(frozen=True)
class PreferencesLoaded:
    theme: Theme
    locale: Locale


# Responses. result is the decoded payload or an ApiError; key identifies
# the branch for keyed requests (project id, task id).


@dataclass(frozen=True)
class ResponseMsg:
    token: int
    result: Any
    key: Optional[Hashable] = None


@dataclass(frozen=True)
class MeFetched(ResponseMsg):
    pass


@dataclass(frozen=True)
class ProjectsFetched(ResponseMsg):
    pass


@dataclass(frozen=True)
class InviteLinksFetched(ResponseMsg):
    pass


@dataclass(frozen=True)
class CapabilitiesFetched(ResponseMsg):
    pass


@dataclass(frozen=True)
class MembersFetched(ResponseMsg):
    pass


@dataclass(frozen=True)
class TaskTypesFetched(ResponseMsg):
    pass


@dataclass(frozen=True)
class WorkSessionsFetched(ResponseMsg):
    pass


@dataclass(frozen=True)
class MeMetricsFetched(ResponseMsg):
    pass


@dataclass(frozen=True)
class OrgMetricsOverviewFetched(ResponseMsg):
    pass


@dataclass(frozen=True)
class OrgMetricsProjectTasksFetched(ResponseMsg):
    pass


@dataclass(frozen=True)
class MemberTasksFetched(ResponseMsg):
    pass


@dataclass(frozen=True)
class MemberTaskTypesFetched(ResponseMsg):
    pass


@dataclass(frozen=True)
class SearchResultsFetched(ResponseMsg):
    pass


@dataclass(frozen=True)
class TaskClaimed(ResponseMsg):
    pass


# Search


@dataclass(frozen=True)
class SearchInput:
    text: str


@dataclass(frozen=True)
class SearchDebounceFired:
    token: int


# Toasts


@dataclass(frozen=True)
class ShowToast:
    text: str
    level: str = "info"


@dataclass(frozen=True)
class ToastDismissed:
    toast_id: int


@dataclass(frozen=True)
class ToastTick:
    elapsed_ms: int


@dataclass(frozen=True)
class ClockAdvanced:
    """Host time moved forward to now_ms, reported before the next message."""
    now_ms: int


# Drag to claim


@dataclass(frozen=True)
class DragPointerDown:
    task_id: int
    element_id: str
    point: Point


@dataclass(frozen=True)
class DragRectMeasured:
    session: int
    rect: Rect


@dataclass(frozen=True)
class DragPointerMoved:
    point: Point
    over_target: bool = False


@dataclass(frozen=True)
class DragPointerUp:
    pass


# Dialogs


@dataclass(frozen=True)
class DialogOpened:
    name: str


@dataclass(frozen=True)
class DialogClosed:
    pass


Msg = Union[
    UrlChanged,
    Navigate,
    ProjectSelected,
    OrgMetricsProjectSelected,
    LoginSucceeded,
    LoggedOut,
    PreferencesLoaded,
    MeFetched,
    ProjectsFetched,
    InviteLinksFetched,
    CapabilitiesFetched,
    MembersFetched,
    TaskTypesFetched,
    WorkSessionsFetched,
    MeMetricsFetched,
    OrgMetricsOverviewFetched,
    OrgMetricsProjectTasksFetched,
    MemberTasksFetched,
    MemberTaskTypesFetched,
    SearchResultsFetched,
    TaskClaimed,
    SearchInput,
    SearchDebounceFired,
    ShowToast,
    ToastDismissed,
    ToastTick,
    ClockAdvanced,
    DragPointerDown,
    DragRectMeasured,
    DragPointerMoved,
    DragPointerUp,
    DialogOpened,
    DialogClosed,
]

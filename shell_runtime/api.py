"""
ApiClient abstract interface and the fixture-backed implementation.

The core only sees the fetch contract: a request goes in, a decoded
payload or an ApiError comes out. Clients signal HTTP-level failures by
raising ApiCallError; perform() turns those, and transport failures, into
ApiError values.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import BaseModel, Field, ValidationError

from hydration.core.api_error import ApiError
from hydration.core.domain import (
    Capability,
    InviteLink,
    MetricsProjectTask,
    MyMetrics,
    OrgMetricsOverview,
    Project,
    ProjectMember,
    Task,
    TaskType,
    User,
    WorkSession,
)
from hydration.core.effects import (
    ApiRequest,
    ClaimTask,
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
    SearchTasks,
)

logger = logging.getLogger(__name__)


class ApiCallError(Exception):
    """HTTP-level failure raised by an ApiClient method."""

    def __init__(self, status: int, code: str, message: str = ""):
        super().__init__(f"{status} {code}: {message}")
        self.status = status
        self.code = code
        self.message = message

    def to_api_error(self) -> ApiError:
        return ApiError(status=self.status, code=self.code, message=self.message)


def request_label(request: ApiRequest) -> str:
    """
    Stable endpoint label, e.g. "list_project_tasks:2".

    Used for fixture errors and latencies.
    """
    name = {
        GetMe: "me",
        ListProjects: "projects",
        ListInviteLinks: "invite_links",
        ListCapabilities: "capabilities",
        ListProjectMembers: "members",
        ListTaskTypes: "task_types",
        ListProjectTasks: "tasks",
        ListWorkSessions: "work_sessions",
        GetMyMetrics: "my_metrics",
        GetOrgMetricsOverview: "org_metrics_overview",
        GetOrgMetricsProjectTasks: "org_metrics_project_tasks",
        SearchTasks: "search",
        ClaimTask: "claim",
    }[type(request)]
    if isinstance(request, (ListProjectMembers, ListTaskTypes, ListProjectTasks, GetOrgMetricsProjectTasks)):
        return f"{name}:{request.project_id}"
    if isinstance(request, ClaimTask):
        return f"{name}:{request.task_id}"
    return name


class ApiClient(ABC):
    """
    Abstract API client, one method per endpoint.

    Methods return decoded payloads (domain models or tuples of them) and
    raise ApiCallError for non-2xx answers.
    """

    @abstractmethod
    def get_me(self) -> User:
        ...

    @abstractmethod
    def list_projects(self) -> Sequence[Project]:
        ...

    @abstractmethod
    def list_invite_links(self) -> Sequence[InviteLink]:
        ...

    @abstractmethod
    def list_capabilities(self) -> Sequence[Capability]:
        ...

    @abstractmethod
    def list_project_members(self, project_id: int) -> Sequence[ProjectMember]:
        ...

    @abstractmethod
    def list_task_types(self, project_id: int) -> Sequence[TaskType]:
        ...

    @abstractmethod
    def list_project_tasks(self, project_id: int) -> Sequence[Task]:
        ...

    @abstractmethod
    def list_work_sessions(self) -> Sequence[WorkSession]:
        ...

    @abstractmethod
    def get_my_metrics(self, window_days: int) -> MyMetrics:
        ...

    @abstractmethod
    def get_org_metrics_overview(self, window_days: int) -> OrgMetricsOverview:
        ...

    @abstractmethod
    def get_org_metrics_project_tasks(self, project_id: int, window_days: int) -> Sequence[MetricsProjectTask]:
        ...

    @abstractmethod
    def search_tasks(self, query: str, project_ids: Sequence[int]) -> Sequence[Task]:
        ...

    @abstractmethod
    def claim_task(self, task_id: int) -> Task:
        ...

    def latency_ms(self, request: ApiRequest) -> int:
        """
        Logical delay before the answer to request is delivered.

        Implementations may override. Default returns 0.
        """
        return 0

    def perform(self, request: ApiRequest) -> Any:
        """
        Resolve one request.

        Returns:
            Decoded payload (sequences as tuples), or ApiError on failure
        """
        try:
            result = self._call(request)
        except ApiCallError as e:
            return e.to_api_error()
        except (OSError, ValueError) as e:
            logger.warning("Request %s failed: %s", request_label(request), e)
            return ApiError.network(str(e))
        if isinstance(result, list):
            return tuple(result)
        return result

    def _call(self, request: ApiRequest) -> Any:
        if isinstance(request, GetMe):
            return self.get_me()
        if isinstance(request, ListProjects):
            return self.list_projects()
        if isinstance(request, ListInviteLinks):
            return self.list_invite_links()
        if isinstance(request, ListCapabilities):
            return self.list_capabilities()
        if isinstance(request, ListProjectMembers):
            return self.list_project_members(request.project_id)
        if isinstance(request, ListTaskTypes):
            return self.list_task_types(request.project_id)
        if isinstance(request, ListProjectTasks):
            return self.list_project_tasks(request.project_id)
        if isinstance(request, ListWorkSessions):
            return self.list_work_sessions()
        if isinstance(request, GetMyMetrics):
            return self.get_my_metrics(request.window_days)
        if isinstance(request, GetOrgMetricsOverview):
            return self.get_org_metrics_overview(request.window_days)
        if isinstance(request, GetOrgMetricsProjectTasks):
            return self.get_org_metrics_project_tasks(request.project_id, request.window_days)
        if isinstance(request, SearchTasks):
            return self.search_tasks(request.query, request.project_ids)
        if isinstance(request, ClaimTask):
            return self.claim_task(request.task_id)
        raise TypeError(f"Unknown request: {request!r}")


class FixtureError(BaseModel):
    status: int
    code: str
    message: str = ""


class Fixture(BaseModel):
    """
    Canned backend state.

    Per-project collections are keyed by project id. errors and latency_ms
    are keyed by request label (see request_label).
    """
    me: Optional[User] = None
    projects: List[Project] = Field(default_factory=list)
    invite_links: List[InviteLink] = Field(default_factory=list)
    capabilities: List[Capability] = Field(default_factory=list)
    members: Dict[int, List[ProjectMember]] = Field(default_factory=dict)
    task_types: Dict[int, List[TaskType]] = Field(default_factory=dict)
    tasks: Dict[int, List[Task]] = Field(default_factory=dict)
    work_sessions: List[WorkSession] = Field(default_factory=list)
    my_metrics: Optional[MyMetrics] = None
    org_metrics_overview: Optional[OrgMetricsOverview] = None
    org_metrics_project_tasks: Dict[int, List[MetricsProjectTask]] = Field(default_factory=dict)
    errors: Dict[str, FixtureError] = Field(default_factory=dict)
    latency_ms: Dict[str, int] = Field(default_factory=dict)


class FixtureApi(ApiClient):
    """
    In-memory backend driven by a Fixture.

    Claims update the fixture's task list, so a refresh after a claim sees
    the claimed task.
    """

    def __init__(self, fixture: Fixture):
        self.fixture = fixture
        self.calls: List[str] = []

    @staticmethod
    def load(path: Union[str, Path]) -> "FixtureApi":
        """
        Load a JSON fixture file.

        Raises:
            ValueError: If the file is not a valid fixture
        """
        raw = Path(path).read_text(encoding="utf-8")
        try:
            fixture = Fixture.model_validate(json.loads(raw))
        except ValidationError as e:
            raise ValueError(f"Invalid fixture {path}: {e}") from e
        return FixtureApi(fixture)

    def latency_ms(self, request: ApiRequest) -> int:
        return self.fixture.latency_ms.get(request_label(request), 0)

    def perform(self, request: ApiRequest) -> Any:
        self.calls.append(request_label(request))
        return super().perform(request)

    def _check(self, label: str) -> None:
        error = self.fixture.errors.get(label)
        if error is not None:
            raise ApiCallError(error.status, error.code, error.message)

    def _projects_or_404(self, project_id: int) -> None:
        if project_id not in {p.id for p in self.fixture.projects}:
            raise ApiCallError(404, "NOT_FOUND", f"Project {project_id} not found")

    def get_me(self) -> User:
        self._check("me")
        if self.fixture.me is None:
            raise ApiCallError(401, "AUTH_REQUIRED", "Not signed in")
        return self.fixture.me

    def list_projects(self) -> Sequence[Project]:
        self._check("projects")
        return tuple(self.fixture.projects)

    def list_invite_links(self) -> Sequence[InviteLink]:
        self._check("invite_links")
        return tuple(self.fixture.invite_links)

    def list_capabilities(self) -> Sequence[Capability]:
        self._check("capabilities")
        return tuple(self.fixture.capabilities)

    def list_project_members(self, project_id: int) -> Sequence[ProjectMember]:
        self._check(f"members:{project_id}")
        self._projects_or_404(project_id)
        return tuple(self.fixture.members.get(project_id, []))

    def list_task_types(self, project_id: int) -> Sequence[TaskType]:
        self._check(f"task_types:{project_id}")
        self._projects_or_404(project_id)
        return tuple(self.fixture.task_types.get(project_id, []))

    def list_project_tasks(self, project_id: int) -> Sequence[Task]:
        self._check(f"tasks:{project_id}")
        self._projects_or_404(project_id)
        return tuple(self.fixture.tasks.get(project_id, []))

    def list_work_sessions(self) -> Sequence[WorkSession]:
        self._check("work_sessions")
        return tuple(self.fixture.work_sessions)

    def get_my_metrics(self, window_days: int) -> MyMetrics:
        self._check("my_metrics")
        return self.fixture.my_metrics or MyMetrics(window_days=window_days)

    def get_org_metrics_overview(self, window_days: int) -> OrgMetricsOverview:
        self._check("org_metrics_overview")
        return self.fixture.org_metrics_overview or OrgMetricsOverview(window_days=window_days)

    def get_org_metrics_project_tasks(self, project_id: int, window_days: int) -> Sequence[MetricsProjectTask]:
        self._check(f"org_metrics_project_tasks:{project_id}")
        self._projects_or_404(project_id)
        return tuple(self.fixture.org_metrics_project_tasks.get(project_id, []))

    def search_tasks(self, query: str, project_ids: Sequence[int]) -> Sequence[Task]:
        self._check("search")
        needle = query.lower()
        pids = list(project_ids) or sorted(self.fixture.tasks)
        found = []
        for pid in pids:
            found.extend(t for t in self.fixture.tasks.get(pid, []) if needle in t.title.lower())
        return tuple(found)

    def claim_task(self, task_id: int) -> Task:
        self._check(f"claim:{task_id}")
        me = self.get_me()
        for pid, tasks in self.fixture.tasks.items():
            for i, task in enumerate(tasks):
                if task.id != task_id:
                    continue
                if task.claimed_by is not None:
                    raise ApiCallError(409, "CONFLICT", f"Task {task_id} already claimed")
                claimed = task.model_copy(
                    update={"claimed_by": me.id, "status": "claimed", "version": task.version + 1}
                )
                tasks[i] = claimed
                return claimed
        raise ApiCallError(404, "NOT_FOUND", f"Task {task_id} not found")

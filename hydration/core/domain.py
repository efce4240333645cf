"""
Decoded payloads held inside Loaded resources.

The core only inspects a few fields (user role, project ids and roles); the
rest is carried through to the views untouched.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class OrgRole(str, Enum):
    ADMIN = "admin"
    MEMBER = "member"


class ProjectRole(str, Enum):
    MANAGER = "manager"
    MEMBER = "member"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


class Locale(str, Enum):
    EN = "en"
    ES = "es"


class Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class User(Frozen):
    id: int
    email: str
    org_id: int
    org_role: OrgRole = OrgRole.MEMBER
    created_at: str = ""


class Project(Frozen):
    id: int
    name: str
    my_role: ProjectRole = ProjectRole.MEMBER


class ProjectMember(Frozen):
    user_id: int
    role: ProjectRole = ProjectRole.MEMBER
    created_at: str = ""


class Capability(Frozen):
    id: int
    name: str


class TaskType(Frozen):
    id: int
    project_id: int
    name: str
    icon: str = ""
    capability_id: Optional[int] = None


class Task(Frozen):
    id: int
    project_id: int
    type_id: int
    title: str
    priority: int = 3
    status: str = "available"
    claimed_by: Optional[int] = None
    version: int = 1


class InviteLink(Frozen):
    email: str
    token: str
    url_path: str
    state: str
    created_at: str
    used_at: Optional[str] = None
    invalidated_at: Optional[str] = None


class WorkSession(Frozen):
    task_id: int
    project_id: int
    title: str
    accumulated_s: int = 0


class MyMetrics(Frozen):
    window_days: int
    claimed_count: int = 0
    released_count: int = 0
    completed_count: int = 0


class OrgMetricsProjectOverview(Frozen):
    project_id: int
    project_name: str
    claimed_count: int = 0
    released_count: int = 0
    completed_count: int = 0
    release_rate_percent: Optional[int] = None


class OrgMetricsOverview(Frozen):
    window_days: int
    claimed_count: int = 0
    released_count: int = 0
    completed_count: int = 0
    release_rate_percent: Optional[int] = None
    by_project: List[OrgMetricsProjectOverview] = Field(default_factory=list)


class MetricsProjectTask(Frozen):
    task: Task
    claim_count: int = 0
    release_count: int = 0
    complete_count: int = 0

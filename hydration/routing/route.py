"""
Typed routes: where the user is, independent of any loaded data.

Slug tables are total in both directions for the current sections. Slugs
that are no longer current live in separate deprecation tables so the codec
can redirect them.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Optional, Tuple, Union

APP_TITLE = "ScrumBringer"


class ConfigSection(str, Enum):
    MEMBERS = "members"
    CAPABILITIES = "capabilities"
    TASK_TYPES = "task-types"
    CARDS = "cards"
    WORKFLOWS = "workflows"


class OrgSection(str, Enum):
    INVITES = "invites"
    PROJECTS = "projects"
    METRICS = "metrics"


class MemberSection(str, Enum):
    POOL = "pool"
    MY_BAR = "my-bar"
    SKILLS = "skills"
    METRICS = "metrics"


class ViewMode(str, Enum):
    POOL = "pool"
    LIST = "list"
    CARDS = "cards"


DEFAULT_CONFIG_SECTION = ConfigSection.MEMBERS
DEFAULT_ORG_SECTION = OrgSection.INVITES
DEFAULT_MEMBER_SECTION = MemberSection.POOL

# Sections whose resources are scoped to a single project.
PROJECT_SCOPED_CONFIG_SECTIONS = frozenset(
    {
        ConfigSection.MEMBERS,
        ConfigSection.TASK_TYPES,
        ConfigSection.CARDS,
        ConfigSection.WORKFLOWS,
    }
)


@dataclass(frozen=True)
class Login:
    pass


@dataclass(frozen=True)
class AcceptInvite:
    token: str = ""


@dataclass(frozen=True)
class ResetPassword:
    token: str = ""


@dataclass(frozen=True)
class Config:
    section: ConfigSection = DEFAULT_CONFIG_SECTION
    project_id: Optional[int] = None


@dataclass(frozen=True)
class Org:
    section: OrgSection = DEFAULT_ORG_SECTION


@dataclass(frozen=True)
class Member:
    section: MemberSection = DEFAULT_MEMBER_SECTION
    project_id: Optional[int] = None
    view: Optional[ViewMode] = None


Route = Union[Login, AcceptInvite, ResetPassword, Config, Org, Member]

PUBLIC_ROUTES = (Login, AcceptInvite, ResetPassword)


def is_public(route: Route) -> bool:
    return isinstance(route, PUBLIC_ROUTES)


def project_of(route: Route) -> Optional[int]:
    if isinstance(route, (Config, Member)):
        return route.project_id
    return None


def with_project(route: Route, project_id: Optional[int]) -> Route:
    """Same route pointed at another project; routes without a project are unchanged."""
    if isinstance(route, (Config, Member)):
        return replace(route, project_id=project_id)
    return route


# Section <-> slug. The enum values are the canonical slugs; the reverse
# tables are what the codec consults.
CONFIG_SLUGS: Dict[str, ConfigSection] = {s.value: s for s in ConfigSection}
ORG_SLUGS: Dict[str, OrgSection] = {s.value: s for s in OrgSection}
MEMBER_SLUGS: Dict[str, MemberSection] = {s.value: s for s in MemberSection}
VIEW_SLUGS: Dict[str, ViewMode] = {v.value: v for v in ViewMode}

# Config slugs that moved to the org area.
DEPRECATED_CONFIG_SLUGS: Dict[str, OrgSection] = {
    "invites": OrgSection.INVITES,
    "org-settings": OrgSection.INVITES,
    "projects": OrgSection.PROJECTS,
    "metrics": OrgSection.METRICS,
}

# Old spellings that still map onto a current config section.
RENAMED_CONFIG_SLUGS: Dict[str, ConfigSection] = {
    "task_types": ConfigSection.TASK_TYPES,
    "tasktypes": ConfigSection.TASK_TYPES,
    "team": ConfigSection.MEMBERS,
}

# Member slugs that became a view of another section.
DEPRECATED_MEMBER_SLUGS: Dict[str, Tuple[MemberSection, Optional[ViewMode]]] = {
    "fichas": (MemberSection.POOL, ViewMode.CARDS),
    "list": (MemberSection.POOL, ViewMode.LIST),
    "bar": (MemberSection.MY_BAR, None),
    "my-skills": (MemberSection.SKILLS, None),
}


_CONFIG_TITLES = {
    ConfigSection.MEMBERS: "Members",
    ConfigSection.CAPABILITIES: "Capabilities",
    ConfigSection.TASK_TYPES: "Task types",
    ConfigSection.CARDS: "Cards",
    ConfigSection.WORKFLOWS: "Workflows",
}

_ORG_TITLES = {
    OrgSection.INVITES: "Invites",
    OrgSection.PROJECTS: "Projects",
    OrgSection.METRICS: "Metrics",
}

_MEMBER_TITLES = {
    MemberSection.POOL: "Pool",
    MemberSection.MY_BAR: "My bar",
    MemberSection.SKILLS: "My skills",
    MemberSection.METRICS: "My metrics",
}


def title_for(route: Route) -> str:
    """Document title for a route."""
    if isinstance(route, Login):
        page = "Sign in"
    elif isinstance(route, AcceptInvite):
        page = "Accept invite"
    elif isinstance(route, ResetPassword):
        page = "Reset password"
    elif isinstance(route, Config):
        page = f"Configuration - {_CONFIG_TITLES[route.section]}"
    elif isinstance(route, Org):
        page = f"Organization - {_ORG_TITLES[route.section]}"
    else:
        page = _MEMBER_TITLES[route.section]
    return f"{page} | {APP_TITLE}"

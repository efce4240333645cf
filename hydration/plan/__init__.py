"""
Hydration planning: snapshot, commands and the planner.
"""

from .commands import (
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
from .snapshot import AuthState, AuthUnknown, Authed, ResourceView, Snapshot, Unauthed, build_snapshot
from .planner import HydrationPlanner, plan

__all__ = [
    "Command",
    "FetchCapabilities",
    "FetchCommand",
    "FetchInviteLinks",
    "FetchMe",
    "FetchMeMetrics",
    "FetchMembers",
    "FetchOrgMetricsOverview",
    "FetchOrgMetricsProjectTasks",
    "FetchProjects",
    "FetchTaskTypes",
    "FetchWorkSessions",
    "RefreshMemberResources",
    "Redirect",
    "AuthState",
    "AuthUnknown",
    "Authed",
    "ResourceView",
    "Snapshot",
    "Unauthed",
    "build_snapshot",
    "HydrationPlanner",
    "plan",
]

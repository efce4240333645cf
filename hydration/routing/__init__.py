"""
Typed routes and the URL codec.
"""

from .route import (
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
    ViewMode,
    is_public,
    project_of,
    title_for,
    with_project,
)
from .codec import Parsed, ParseResult, RedirectTo, format_route, parse, parse_url, split_url

__all__ = [
    "AcceptInvite",
    "Config",
    "ConfigSection",
    "Login",
    "Member",
    "MemberSection",
    "Org",
    "OrgSection",
    "ResetPassword",
    "Route",
    "ViewMode",
    "is_public",
    "project_of",
    "title_for",
    "with_project",
    "Parsed",
    "ParseResult",
    "RedirectTo",
    "format_route",
    "parse",
    "parse_url",
    "split_url",
]

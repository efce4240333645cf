"""
Route codec: location <-> Route.

parse() never fails. Anything it cannot map to a canonical route comes back
as RedirectTo, carrying the route the location should be rewritten to
(replace-history, no new entry). format_route() is the inverse of parse()
for every Parsed result.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union
from urllib.parse import parse_qs, urlencode, urlsplit

from ..core.errors import RouteError
from .route import (
    CONFIG_SLUGS,
    DEFAULT_CONFIG_SECTION,
    DEFAULT_MEMBER_SECTION,
    DEFAULT_ORG_SECTION,
    DEPRECATED_CONFIG_SLUGS,
    DEPRECATED_MEMBER_SLUGS,
    MEMBER_SLUGS,
    ORG_SLUGS,
    RENAMED_CONFIG_SLUGS,
    VIEW_SLUGS,
    AcceptInvite,
    Config,
    Login,
    Member,
    Org,
    ResetPassword,
    Route,
)

_PROJECT_ID = re.compile(r"[1-9][0-9]*")


@dataclass(frozen=True)
class Parsed:
    route: Route


@dataclass(frozen=True)
class RedirectTo:
    route: Route


ParseResult = Union[Parsed, RedirectTo]


def parse(path: str, query: str = "", fragment: str = "") -> ParseResult:
    """
    Parse a location into a route.

    Args:
        path: URL path (e.g., "/config/members")
        query: Query string, with or without the leading "?"
        fragment: Fragment, with or without the leading "#"

    Returns:
        Parsed(route) when the location is canonical, RedirectTo(route)
        when it must be rewritten (legacy hash URLs, /admin paths, invalid
        project or view values, deprecated or unknown slugs). Unknown paths
        fall back to Login.
    """
    params = _params(query)
    fragment = fragment.lstrip("#")
    project_id, project_ok = _project_param(params)

    legacy = _segments(fragment)
    if legacy[:1] == ["admin"]:
        return RedirectTo(_legacy_admin(legacy[1:], project_id))

    segments = _segments(path)
    if not segments:
        return Parsed(Login())

    area, rest = segments[0], segments[1:]

    if area == "accept-invite" and not rest:
        return Parsed(AcceptInvite(token=params.get("token", "")))
    if area == "reset-password" and not rest:
        return Parsed(ResetPassword(token=params.get("token", "")))
    if area == "config":
        return _parse_config(rest, project_id, project_ok)
    if area == "org":
        return _parse_org(rest)
    if area == "app":
        return _parse_member(rest, params, project_id, project_ok)
    if area == "admin":
        return RedirectTo(_legacy_admin(rest, project_id))
    return RedirectTo(Login())


def split_url(url: str) -> Tuple[str, str, str]:
    """Split a full or path-only URL into (path, query, fragment)."""
    parts = urlsplit(url)
    return parts.path or "/", parts.query, parts.fragment


def parse_url(url: str) -> ParseResult:
    """Parse a full or path-only URL string."""
    return parse(*split_url(url))


def format_route(route: Route) -> str:
    """
    Format a route as its canonical path and query string.

    Raises:
        RouteError: If the route holds a value with no canonical form
            (e.g., a non-positive project id)
    """
    if isinstance(route, Login):
        return "/"
    if isinstance(route, AcceptInvite):
        return "/accept-invite?" + urlencode([("token", route.token)])
    if isinstance(route, ResetPassword):
        return "/reset-password?" + urlencode([("token", route.token)])
    if isinstance(route, Config):
        pairs = _project_pairs(route.project_id)
        return _with_query(f"/config/{route.section.value}", pairs)
    if isinstance(route, Org):
        return f"/org/{route.section.value}"
    if isinstance(route, Member):
        pairs = _project_pairs(route.project_id)
        if route.view is not None:
            pairs.append(("view", route.view.value))
        return _with_query(f"/app/{route.section.value}", pairs)
    raise RouteError(f"Not a route: {route!r}")


def _parse_config(rest: List[str], project_id: Optional[int], project_ok: bool) -> ParseResult:
    if not rest:
        return RedirectTo(Config(DEFAULT_CONFIG_SECTION, project_id))

    slug = rest[0]
    if slug in DEPRECATED_CONFIG_SLUGS:
        return RedirectTo(Org(DEPRECATED_CONFIG_SLUGS[slug]))
    if slug in RENAMED_CONFIG_SLUGS:
        return RedirectTo(Config(RENAMED_CONFIG_SLUGS[slug], project_id))

    section = CONFIG_SLUGS.get(slug)
    if section is None:
        return RedirectTo(Config(DEFAULT_CONFIG_SECTION, project_id))

    route = Config(section, project_id)
    if not project_ok or len(rest) > 1:
        return RedirectTo(route)
    return Parsed(route)


def _parse_org(rest: List[str]) -> ParseResult:
    if not rest:
        return RedirectTo(Org(DEFAULT_ORG_SECTION))

    section = ORG_SLUGS.get(rest[0])
    if section is None:
        return RedirectTo(Org(DEFAULT_ORG_SECTION))
    if len(rest) > 1:
        return RedirectTo(Org(section))
    return Parsed(Org(section))


def _parse_member(
    rest: List[str],
    params: Dict[str, str],
    project_id: Optional[int],
    project_ok: bool,
) -> ParseResult:
    raw_view = params.get("view")
    view = VIEW_SLUGS.get(raw_view) if raw_view is not None else None
    view_ok = raw_view is None or view is not None

    if not rest:
        return RedirectTo(Member(DEFAULT_MEMBER_SECTION, project_id, view))

    slug = rest[0]
    if slug in DEPRECATED_MEMBER_SLUGS:
        section, implied_view = DEPRECATED_MEMBER_SLUGS[slug]
        return RedirectTo(Member(section, project_id, view or implied_view))

    section = MEMBER_SLUGS.get(slug)
    if section is None:
        return RedirectTo(Member(DEFAULT_MEMBER_SECTION, project_id, view))

    route = Member(section, project_id, view)
    if not (project_ok and view_ok) or len(rest) > 1:
        return RedirectTo(route)
    return Parsed(route)


def _legacy_admin(rest: List[str], project_id: Optional[int]) -> Route:
    """Map a pre-redesign admin slug onto its Config or Org equivalent."""
    slug = rest[0] if rest else ""
    if slug in DEPRECATED_CONFIG_SLUGS:
        return Org(DEPRECATED_CONFIG_SLUGS[slug])
    if slug in RENAMED_CONFIG_SLUGS:
        return Config(RENAMED_CONFIG_SLUGS[slug], project_id)
    return Config(CONFIG_SLUGS.get(slug, DEFAULT_CONFIG_SECTION), project_id)


def _segments(path: str) -> List[str]:
    return [s for s in path.split("/") if s]


def _params(query: str) -> Dict[str, str]:
    parsed = parse_qs(query.lstrip("?"), keep_blank_values=True)
    return {k: v[0] for k, v in parsed.items()}


def _project_param(params: Dict[str, str]) -> Tuple[Optional[int], bool]:
    """
    Read the project query value.

    Returns:
        (project_id, ok): ok is False when a value was present but is not a
        positive integer, in which case project_id is None.
    """
    raw = params.get("project")
    if raw is None:
        return None, True
    if _PROJECT_ID.fullmatch(raw):
        return int(raw), True
    return None, False


def _project_pairs(project_id: Optional[int]) -> List[Tuple[str, str]]:
    if project_id is None:
        return []
    if isinstance(project_id, bool) or not isinstance(project_id, int) or project_id <= 0:
        raise RouteError(f"Invalid project id: {project_id!r}")
    return [("project", str(project_id))]


def _with_query(path: str, pairs: List[Tuple[str, str]]) -> str:
    if not pairs:
        return path
    return f"{path}?{urlencode(pairs)}"

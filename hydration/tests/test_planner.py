"""
Tests for the hydration planner.

Critical: planning is pure. Same (route, snapshot) -> same commands, and a
resource already in flight for the same scope is never requested again.
"""

from hydration.core.canonical import canonical_json_str
from hydration.core.domain import OrgRole
from hydration.core.resource import CoarseState
from hydration.core.state import ResourceKey
from hydration.dispatch.executor import execute
from hydration.plan.commands import (
    FetchCapabilities,
    FetchInviteLinks,
    FetchMe,
    FetchMeMetrics,
    FetchMembers,
    FetchOrgMetricsOverview,
    FetchOrgMetricsProjectTasks,
    FetchProjects,
    FetchTaskTypes,
    FetchWorkSessions,
    Redirect,
    RefreshMemberResources,
)
from hydration.plan.planner import plan
from hydration.plan.snapshot import AuthUnknown, Authed, ResourceView, Snapshot, Unauthed, build_snapshot
from hydration.routing.route import (
    AcceptInvite,
    Config,
    ConfigSection,
    Login,
    Member,
    MemberSection,
    Org,
    OrgSection,
    ResetPassword,
    ViewMode,
)
from hydration.tests.factories import ADMIN, ALPHA, BETA, GAMMA, MEMBER, signed_in

LOADED = ResourceView(state=CoarseState.LOADED)


def admin_snapshot(**kwargs) -> Snapshot:
    resources = {ResourceKey.ME: LOADED, ResourceKey.PROJECTS: LOADED}
    resources.update(kwargs.pop("resources", {}))
    return Snapshot(
        auth=Authed(OrgRole.ADMIN),
        resources=resources,
        project_ids=kwargs.pop("project_ids", (1, 3)),
        **kwargs,
    )


def test_planning_is_idempotent():
    """Calling plan twice on the same snapshot yields identical commands."""
    route = Config(ConfigSection.TASK_TYPES, 3)
    snapshot = admin_snapshot()
    before = canonical_json_str(snapshot)

    first = plan(route, snapshot)
    second = plan(route, snapshot)

    assert first == second
    assert canonical_json_str(first) == canonical_json_str(second)
    assert canonical_json_str(snapshot) == before


def test_config_members_waits_for_projects():
    """Project list first; members once project 3 is known to exist."""
    route = Config(ConfigSection.MEMBERS, 3)
    not_loaded = Snapshot(auth=Authed(OrgRole.ADMIN), resources={ResourceKey.ME: LOADED})

    assert plan(route, not_loaded) == [FetchProjects()]
    assert plan(route, admin_snapshot(project_ids=(1, 3))) == [FetchMembers(3)]


def test_config_unknown_project_redirects_to_first_available():
    route = Config(ConfigSection.MEMBERS, 99)

    assert plan(route, admin_snapshot(project_ids=(1, 3))) == [
        Redirect(Config(ConfigSection.MEMBERS, 1))
    ]


def test_config_without_project_uses_selected_then_first():
    route = Config(ConfigSection.MEMBERS)

    assert plan(route, admin_snapshot(selected_project_id=3)) == [FetchMembers(3)]
    assert plan(route, admin_snapshot(selected_project_id=42)) == [FetchMembers(1)]
    assert plan(route, admin_snapshot()) == [FetchMembers(1)]


def test_config_task_types_needs_capabilities_too():
    assert plan(Config(ConfigSection.TASK_TYPES, 3), admin_snapshot()) == [
        FetchCapabilities(),
        FetchTaskTypes(3),
    ]


def test_admin_config_loads_independent_resources_alongside_projects():
    snapshot = Snapshot(auth=Authed(OrgRole.ADMIN), resources={ResourceKey.ME: LOADED})

    assert plan(Config(ConfigSection.CAPABILITIES), snapshot) == [FetchProjects(), FetchCapabilities()]


def test_config_requires_admin_or_manager():
    member = Snapshot(
        auth=Authed(OrgRole.MEMBER),
        resources={ResourceKey.PROJECTS: LOADED},
        project_ids=(1, 2),
        managed_project_ids=(),
    )
    manager = Snapshot(
        auth=Authed(OrgRole.MEMBER),
        resources={ResourceKey.PROJECTS: LOADED},
        project_ids=(1, 2),
        managed_project_ids=(2,),
    )

    assert plan(Config(ConfigSection.MEMBERS), member) == [Redirect(Member())]
    assert plan(Config(ConfigSection.MEMBERS), manager) == [FetchMembers(2)]
    # Managers only configure the projects they manage.
    assert plan(Config(ConfigSection.MEMBERS, 1), manager) == [
        Redirect(Config(ConfigSection.MEMBERS, 2))
    ]


def test_org_requires_admin():
    snapshot = Snapshot(auth=Authed(OrgRole.MEMBER))

    assert plan(Org(OrgSection.INVITES), snapshot) == [Redirect(Member())]


def test_org_sections():
    assert plan(Org(OrgSection.INVITES), admin_snapshot()) == [FetchInviteLinks()]
    assert plan(Org(OrgSection.PROJECTS), admin_snapshot()) == []
    assert plan(Org(OrgSection.METRICS), admin_snapshot()) == [FetchOrgMetricsOverview()]


def test_org_metrics_drilldown():
    snapshot = admin_snapshot(drilldown_project_id=3)

    assert plan(Org(OrgSection.METRICS), snapshot) == [
        FetchOrgMetricsOverview(),
        FetchOrgMetricsProjectTasks(3),
    ]


def test_unknown_auth_fetches_me_only():
    snapshot = Snapshot(auth=AuthUnknown())

    assert plan(Member(), snapshot) == [FetchMe()]
    assert plan(Org(OrgSection.METRICS), snapshot) == [FetchMe()]
    assert plan(Login(), snapshot) == [FetchMe()]


def test_me_in_flight_is_not_requested_twice():
    snapshot = Snapshot(
        auth=AuthUnknown(),
        resources={ResourceKey.ME: ResourceView(state=CoarseState.LOADING)},
    )

    assert plan(Member(), snapshot) == []


def test_unauthed_redirects_to_login():
    assert plan(Member(), Snapshot(auth=Unauthed())) == [Redirect(Login())]
    assert plan(Login(), Snapshot(auth=Unauthed())) == []


def test_authed_on_login_goes_to_pool():
    assert plan(Login(), admin_snapshot()) == [Redirect(Member())]


def test_public_routes_plan_nothing():
    for auth in (AuthUnknown(), Unauthed(), Authed(OrgRole.ADMIN)):
        assert plan(AcceptInvite("tok"), Snapshot(auth=auth)) == []
        assert plan(ResetPassword("tok"), Snapshot(auth=auth)) == []


def test_member_pool_fans_out_over_all_projects():
    snapshot = Snapshot(
        auth=Authed(OrgRole.MEMBER),
        resources={ResourceKey.PROJECTS: LOADED},
        project_ids=(1, 2),
    )

    assert plan(Member(MemberSection.POOL), snapshot) == [
        RefreshMemberResources((1, 2)),
        FetchCapabilities(),
        FetchWorkSessions(),
    ]
    assert plan(Member(MemberSection.POOL, 2), snapshot)[0] == RefreshMemberResources((2,))


def test_member_sections_before_projects_load():
    snapshot = Snapshot(auth=Authed(OrgRole.MEMBER))

    assert plan(Member(MemberSection.METRICS), snapshot) == [FetchProjects(), FetchMeMetrics()]
    assert plan(Member(MemberSection.SKILLS), snapshot) == [FetchProjects(), FetchCapabilities()]


def test_member_unknown_project_is_dropped_keeping_view():
    snapshot = Snapshot(
        auth=Authed(OrgRole.MEMBER),
        resources={ResourceKey.PROJECTS: LOADED},
        project_ids=(1, 2),
    )

    assert plan(Member(MemberSection.POOL, 9, ViewMode.LIST), snapshot) == [
        Redirect(Member(MemberSection.POOL, None, ViewMode.LIST))
    ]


def test_loaded_for_other_scope_is_requested_again():
    members_for_3 = ResourceView(state=CoarseState.LOADED, scope=3)
    snapshot = admin_snapshot(resources={ResourceKey.MEMBERS: members_for_3})

    assert plan(Config(ConfigSection.MEMBERS, 3), snapshot) == []
    assert plan(Config(ConfigSection.MEMBERS, 1), snapshot) == [FetchMembers(1)]


def test_failed_resource_is_requested_again():
    failed = ResourceView(state=CoarseState.FAILED)
    snapshot = admin_snapshot(resources={ResourceKey.CAPABILITIES: failed})

    assert plan(Config(ConfigSection.CAPABILITIES), snapshot) == [FetchCapabilities()]


def test_failed_task_types_refresh_member_resources_again():
    """Tasks loaded but task types failed: the refresh is still wanted."""
    def member_snapshot(task_types):
        return Snapshot(
            auth=Authed(OrgRole.MEMBER),
            resources={
                ResourceKey.PROJECTS: LOADED,
                ResourceKey.MEMBER_TASKS: ResourceView(state=CoarseState.LOADED, scope=(1, 2)),
                ResourceKey.MEMBER_TASK_TYPES: task_types,
            },
            project_ids=(1, 2),
        )

    failed = member_snapshot(ResourceView(state=CoarseState.FAILED, scope=(1, 2)))
    assert plan(Member(MemberSection.MY_BAR), failed) == [
        RefreshMemberResources((1, 2)),
        FetchWorkSessions(),
    ]

    in_flight = member_snapshot(ResourceView(state=CoarseState.LOADING, scope=(1, 2)))
    assert plan(Member(MemberSection.MY_BAR), in_flight) == [FetchWorkSessions()]

    other_scope = member_snapshot(ResourceView(state=CoarseState.LOADED, scope=(1,)))
    assert plan(Member(MemberSection.MY_BAR), other_scope)[0] == RefreshMemberResources((1, 2))


def test_refused_scope_is_not_requested_again():
    refused = ResourceView(state=CoarseState.NOT_ASKED, scope=3, refused=True)
    snapshot = admin_snapshot(resources={ResourceKey.MEMBERS: refused})

    assert plan(Config(ConfigSection.MEMBERS, 3), snapshot) == []
    assert plan(Config(ConfigSection.MEMBERS, 1), snapshot) == [FetchMembers(1)]


def test_no_duplicate_in_flight_fetch():
    """Re-planning after executing a pass emits nothing new."""
    model = signed_in(MEMBER, [ALPHA, BETA, GAMMA]).with_core(route=Member(MemberSection.POOL))
    commands = plan(model.core.route, build_snapshot(model))
    assert commands

    for command in commands:
        model, _ = execute(model, command)

    assert plan(model.core.route, build_snapshot(model)) == []


def test_snapshot_reads_roles_and_selection():
    model = signed_in(ADMIN, [ALPHA, BETA]).with_core(selected_project_id=2)
    snapshot = build_snapshot(model)

    assert snapshot.auth == Authed(OrgRole.ADMIN)
    assert snapshot.project_ids == (1, 2)
    assert snapshot.managed_project_ids == (1,)
    assert snapshot.selected_project_id == 2

    routed = build_snapshot(model.with_core(route=Member(MemberSection.POOL, 1)))
    assert routed.selected_project_id == 1

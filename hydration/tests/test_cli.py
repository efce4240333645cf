"""
Tests for the command-line interface.

Critical: --json output is the only thing written to stdout.
"""

import json

from typer.testing import CliRunner

from cli.main import app

# Older click mixes stderr into stdout.
runner = CliRunner(env={"HYDRATION_LOG_LEVEL": "ERROR", "HYDRATION_METRICS_ENABLED": "false"})

ADMIN_FIXTURE = {
    "me": {"id": 1, "email": "admin@example.com", "org_id": 1, "org_role": "admin"},
    "projects": [{"id": 1, "name": "Alpha"}, {"id": 3, "name": "Gamma"}],
    "members": {"3": [{"user_id": 1, "role": "manager"}]},
}

MEMBER_FIXTURE = {
    "me": {"id": 2, "email": "member@example.com", "org_id": 1},
    "projects": [{"id": 1, "name": "Alpha"}, {"id": 2, "name": "Beta"}],
    "tasks": {
        "1": [{"id": 1, "project_id": 1, "type_id": 1, "title": "Fix login"}],
        "2": [{"id": 2, "project_id": 2, "type_id": 1, "title": "Write docs"}],
    },
    "latency_ms": {"tasks:1": 80},
}


def write_fixture(tmp_path, data):
    path = tmp_path / "fixture.json"
    path.write_text(json.dumps(data))
    return str(path)


def test_route_parse_redirect_json():
    result = runner.invoke(app, ["route", "parse", "/app/list?project=2", "--json"])

    assert result.exit_code == 0
    out = json.loads(result.stdout)
    assert out["result"] == "redirect"
    assert out["canonical_url"] == "/app/pool?project=2&view=list"
    assert out["route"] == {"type": "Member", "section": "pool", "project_id": 2, "view": "list"}


def test_route_parse_canonical_json():
    result = runner.invoke(app, ["route", "parse", "/config/members?project=3", "--json"])

    out = json.loads(result.stdout)
    assert out["result"] == "parsed"
    assert out["title"] == "Configuration - Members | ScrumBringer"


def test_route_format():
    result = runner.invoke(app, ["route", "format", "/?project=1#/admin/members", "--json"])

    assert json.loads(result.stdout)["canonical_url"] == "/config/members?project=1"


def test_plan_without_fixture_asks_for_user():
    result = runner.invoke(app, ["plan", "/config/members?project=3", "--json"])

    out = json.loads(result.stdout)
    assert out["commands"] == [{"type": "FetchMe"}]


def test_plan_with_fixture(tmp_path):
    path = write_fixture(tmp_path, ADMIN_FIXTURE)

    result = runner.invoke(app, ["plan", "/config/members?project=3", "--fixture", path, "--json"])

    out = json.loads(result.stdout)
    assert out["commands"] == [{"type": "FetchMembers", "project_id": 3}]


def test_plan_missing_fixture_exits_2(tmp_path):
    result = runner.invoke(app, ["plan", "/", "--fixture", str(tmp_path / "nope.json"), "--json"])

    assert result.exit_code == 2
    assert "error" in json.loads(result.stdout)


def test_simulate_pool(tmp_path):
    path = write_fixture(tmp_path, MEMBER_FIXTURE)

    result = runner.invoke(app, ["simulate", "/app/pool", "--fixture", path, "--json"])

    assert result.exit_code == 0
    out = json.loads(result.stdout)
    assert out["final_url"] == "/app/pool"
    assert out["title"] == "Pool | ScrumBringer"
    assert out["resources"]["member_tasks"] == {"state": "loaded", "scope": [1, 2], "refused": False}
    assert sorted(out["requests"]) == sorted(set(out["requests"]))
    assert out["elapsed_ms"] == 80


def test_simulate_project_switch(tmp_path):
    path = write_fixture(tmp_path, MEMBER_FIXTURE)

    result = runner.invoke(
        app, ["simulate", "/app/pool", "-f", path, "--select-project", "2", "--json"]
    )

    out = json.loads(result.stdout)
    assert out["final_url"] == "/app/pool?project=2"
    assert out["history"] == ["/app/pool", "/app/pool?project=2"]
    assert out["resources"]["member_tasks"]["scope"] == [2]


def test_simulate_signed_out(tmp_path):
    path = write_fixture(tmp_path, {"projects": []})

    result = runner.invoke(app, ["simulate", "/config/members", "-f", path, "--json"])

    out = json.loads(result.stdout)
    assert out["final_url"] == "/"
    assert out["history"] == ["/"]
    assert out["requests"] == ["me"]


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "0.1.0" in result.stdout

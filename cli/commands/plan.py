"""
Plan command: preview the commands a URL triggers
"""

import json
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from hydration.core.api_error import ApiError
from hydration.core.canonical import canonicalize
from hydration.core.state import Model, Slot
from hydration.plan.planner import plan
from hydration.plan.snapshot import build_snapshot
from hydration.routing.codec import RedirectTo, format_route, parse_url
from shell_runtime.api import Fixture, FixtureApi
from shell_runtime.config import RuntimeConfig

console = Console()


def seed_model(fixture: Optional[Fixture]) -> Model:
    """
    Model as it looks once the session is known.

    With a fixture, the current user and the project list are Loaded; a
    fixture without a user means signed out. Without a fixture nothing is
    known yet.
    """
    model = Model.initial(RuntimeConfig.from_env().settings())
    if fixture is None:
        return model
    if fixture.me is None:
        failed = Slot().start().fail(ApiError(status=401, code="AUTH_REQUIRED"))
        return model.with_core(me=failed)
    return model.with_core(
        me=Slot().start().resolve(fixture.me),
        projects=Slot().start().resolve(tuple(fixture.projects)),
    )


def plan_command(
    url: str = typer.Argument(..., help="URL or path to plan for"),
    fixture_path: Optional[str] = typer.Option(None, "--fixture", "-f", help="Fixture JSON with user and projects"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Show the first planning pass for a URL.

    Examples:
        hydration plan '/config/members?project=3'
        hydration plan '/config/members?project=3' --fixture fixtures/admin.json --json
    """
    try:
        fixture = FixtureApi.load(fixture_path).fixture if fixture_path else None
    except (OSError, ValueError) as e:
        if json_output:
            print(json.dumps({"error": str(e)}))
        else:
            console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)

    result = parse_url(url)
    route = result.route
    model = seed_model(fixture).with_core(route=route)
    commands = plan(route, build_snapshot(model))

    if json_output:
        print(json.dumps({
            "url": url,
            "route_url": format_route(route),
            "redirected": isinstance(result, RedirectTo),
            "commands": canonicalize(commands),
        }, indent=2))
        return

    if isinstance(result, RedirectTo):
        console.print(f"[yellow]URL redirects to[/yellow] {format_route(route)}")

    table = Table(title=f"Plan: {format_route(route)}")
    table.add_column("#", style="cyan")
    table.add_column("Command", style="green")
    table.add_column("Scope", style="yellow")
    for i, command in enumerate(commands, start=1):
        table.add_row(str(i), type(command).__name__, repr(command.scope))
    console.print(table)
    if not commands:
        console.print("[dim]Nothing to load[/dim]")

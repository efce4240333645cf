"""
Simulate command: run the engine against a fixture backend
"""

import json
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from hydration.core.canonical import canonicalize
from hydration.core.msgs import Msg, ProjectSelected, SearchInput
from hydration.core.resource import to_coarse_state
from hydration.core.state import SLOT_PATHS
from hydration.routing.codec import format_route
from shell_runtime.api import FixtureApi
from shell_runtime.config import RuntimeConfig
from shell_runtime.metrics import start_metrics_server
from shell_runtime.navigation import MemoryNavigator
from shell_runtime.runtime import Runtime, RuntimeLimitError

console = Console()


def simulate_command(
    url: str = typer.Argument(..., help="URL the browser opens"),
    fixture_path: str = typer.Option(..., "--fixture", "-f", help="Fixture JSON describing the backend"),
    select_project: Optional[int] = typer.Option(None, "--select-project", help="Switch project after load"),
    search: Optional[str] = typer.Option(None, "--search", help="Type a search query after load"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Open a URL and run until every response has been delivered.

    Examples:
        hydration simulate '/app/pool' --fixture fixtures/member.json
        hydration simulate '/app/pool' -f fixtures/member.json --select-project 2 --json
    """
    config = RuntimeConfig.from_env()
    start_metrics_server(config.metrics_enabled, config.metrics_port)

    try:
        api = FixtureApi.load(fixture_path)
    except (OSError, ValueError) as e:
        if json_output:
            print(json.dumps({"error": str(e)}))
        else:
            console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)

    navigator = MemoryNavigator(start_url=url)
    runtime = Runtime(api, navigator, settings=config.settings())
    runtime.open(url)

    followups: List[Msg] = []
    if select_project is not None:
        followups.append(ProjectSelected(project_id=select_project))
    if search is not None:
        followups.append(SearchInput(text=search))

    try:
        runtime.run()
        for msg in followups:
            runtime.send(msg)
            runtime.run()
    except RuntimeLimitError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    model = runtime.model
    resources = {}
    for key in SLOT_PATHS:
        slot = model.slot(key)
        resources[key.value] = {
            "state": to_coarse_state(slot.resource).value,
            "scope": canonicalize(slot.scope),
            "refused": slot.refused,
        }

    if json_output:
        print(json.dumps({
            "url": url,
            "final_url": format_route(model.core.route),
            "title": navigator.title,
            "history": navigator.entries,
            "requests": api.calls,
            "resources": resources,
            "toasts": runtime.toast_log,
            "effects": runtime.effect_counts(),
            "elapsed_ms": runtime.clock.now(),
        }, indent=2))
        return

    console.print(f"[bold]Final URL:[/bold] {format_route(model.core.route)}")
    console.print(f"[bold]Title:[/bold] {navigator.title}")

    table = Table(title="Resources")
    table.add_column("Resource", style="cyan")
    table.add_column("State", style="green")
    table.add_column("Scope", style="yellow")
    for name, info in resources.items():
        state = info["state"]
        if info["refused"]:
            state += " (refused)"
        table.add_row(name, state, json.dumps(info["scope"]))
    console.print(table)

    console.print(f"\n[bold]Requests:[/bold] {len(api.calls)}")
    for call in api.calls:
        console.print(f"  {call}")
    for text in runtime.toast_log:
        console.print(f"[yellow]Toast:[/yellow] {text}")

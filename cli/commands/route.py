"""
Route commands: parse, format
"""

import json

import typer
from rich.console import Console
from rich.table import Table

from hydration.core.canonical import canonicalize
from hydration.routing.codec import RedirectTo, format_route, parse_url
from hydration.routing.route import title_for

app = typer.Typer()
console = Console()


@app.command(name="parse")
def parse_command(
    url: str = typer.Argument(..., help="URL or path, e.g. '/app/pool?project=2'"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Parse a URL into a route.

    Examples:
        hydration route parse '/config/members?project=3'
        hydration route parse '/?project=2#/admin/members' --json
    """
    result = parse_url(url)
    redirected = isinstance(result, RedirectTo)
    canonical = format_route(result.route)

    if json_output:
        print(json.dumps({
            "url": url,
            "result": "redirect" if redirected else "parsed",
            "route": canonicalize(result.route),
            "canonical_url": canonical,
            "title": title_for(result.route),
        }, indent=2))
        return

    table = Table(show_header=False, box=None)
    table.add_row("[bold]Input[/bold]", url)
    table.add_row(
        "[bold]Result[/bold]",
        "[yellow]redirect[/yellow]" if redirected else "[green]parsed[/green]",
    )
    table.add_row("[bold]Route[/bold]", repr(result.route))
    table.add_row("[bold]Canonical[/bold]", canonical)
    table.add_row("[bold]Title[/bold]", title_for(result.route))
    console.print(table)


@app.command(name="format")
def format_command(
    url: str = typer.Argument(..., help="URL or path to normalize"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Normalize a URL: parse it (following any redirect) and format it back.

    Examples:
        hydration route format '/app/list?project=2'
    """
    result = parse_url(url)
    canonical = format_route(result.route)
    if json_output:
        print(json.dumps({"url": url, "canonical_url": canonical}))
    else:
        console.print(canonical)

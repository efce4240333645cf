#!/usr/bin/env python3
"""
Hydration CLI

Main entrypoint for the hydration command-line tool.
"""

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from cli.commands import plan, route, simulate
from shell_runtime.config import RuntimeConfig
from shell_runtime.logging_config import setup_logging

# Initialize Typer app
app = typer.Typer(
    name="hydration",
    help="Route-driven hydration engine CLI",
    add_completion=False,
)

# Console for rich output
console = Console()

# Add command groups
app.add_typer(route.app, name="route", help="URL codec operations")

# Add standalone commands
app.command(name="plan")(plan.plan_command)
app.command(name="simulate")(simulate.simulate_command)


@app.callback()
def configure(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Override HYDRATION_LOG_LEVEL"),
    log_format: Optional[str] = typer.Option(None, "--log-format", help="Override HYDRATION_LOG_FORMAT (json, text)"),
):
    """Configure logging before any command runs."""
    config = RuntimeConfig.from_env()
    setup_logging(level=log_level or config.log_level, fmt=log_format or config.log_format)


@app.command()
def version():
    """Show version information."""
    from cli import __version__
    from hydration import __version__ as engine_version

    table = Table(show_header=False, box=None)
    table.add_row("[bold]Hydration CLI[/bold]", f"v{__version__}")
    table.add_row("Engine", f"v{engine_version}")

    console.print(table)


def main():
    """Main entrypoint."""
    app()


if __name__ == "__main__":
    main()

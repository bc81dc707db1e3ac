"""Main CLI implementation using Typer."""

import asyncio
from pathlib import Path
from typing import Optional, Callable, Any

import typer
from pydantic import ValidationError
from rich.console import Console

from dockside.cli.commands import run_up, run_down, print_report, print_teardown
from dockside.config.loader import get_project_name
from dockside.errors import DocksideError
from dockside.models.config import DocksideSettings
from dockside.utils.logging import setup_logging


# Create Typer app
app = typer.Typer(
    name="dockside",
    help="Dockside - converge a Docker engine onto a Compose file",
    add_completion=False,
)

# Console for rich output
console = Console(stderr=True)


def _load_settings(log_level: Optional[str]) -> DocksideSettings:
    try:
        overrides = {"log_level": log_level} if log_level else {}
        settings = DocksideSettings(**overrides)
    except ValidationError as e:
        console.print(f"[red]Error:[/red] Invalid settings: {e}")
        raise typer.Exit(1) from e
    setup_logging(settings.log_level)
    return settings


def _run_cli_command(handler: Callable[..., Any], **kwargs: Any) -> Any:
    """Helper to run an async command with error handling."""
    try:
        return asyncio.run(handler(**kwargs))
    except DocksideError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


@app.command("up")
def up_command(
    file: Optional[Path] = typer.Option(
        None, "--file", "-f", help="Compose file to load (default: compose.yaml)"
    ),
    project_name: Optional[str] = typer.Option(
        None, "--project-name", "-n", help="Project name (default: the Compose file's folder name)"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", "-l", help="Log level"
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Do not print a summary"),
):
    """Create and start application services."""
    settings = _load_settings(log_level)
    file_path = file or Path(settings.compose_file)
    report = _run_cli_command(run_up, file_path=file_path, project_name=project_name, settings=settings)
    print_report(report, quiet=quiet)


@app.command("down")
def down_command(
    file: Optional[Path] = typer.Option(
        None, "--file", "-f", help="Compose file whose folder names the project"
    ),
    project_name: Optional[str] = typer.Option(
        None, "--project-name", "-n", help="Project name (default: the Compose file's folder name)"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", "-l", help="Log level"
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Do not print a summary"),
):
    """Stop and remove containers, volumes and networks created by `up`."""
    settings = _load_settings(log_level)
    file_path = file or Path(settings.compose_file)
    removed = _run_cli_command(run_down, file_path=file_path, project_name=project_name, settings=settings)
    print_teardown(get_project_name(project_name, file_path), removed, quiet=quiet)


def main():
    """Main entry point for CLI."""
    app()

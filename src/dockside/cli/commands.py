"""Command implementations for CLI."""

import logging
from pathlib import Path
from typing import Optional, List

from rich.console import Console
from rich.table import Table

from dockside.config.loader import load_project, get_project_name
from dockside.engine.reconciler import Reconciler, ReconcileReport, CREATE, KEEP, REPLACE, REMOVE
from dockside.engine.teardown import TeardownDriver
from dockside.models.config import DocksideSettings
from dockside.providers.registry import ProviderRegistry


logger = logging.getLogger(__name__)

console = Console()

ACTION_STYLES = {
    CREATE: "green",
    KEEP: "dim",
    REPLACE: "yellow",
    REMOVE: "red",
}


async def _registry(settings: DocksideSettings, registry: Optional[ProviderRegistry]) -> ProviderRegistry:
    if registry is None:
        registry = ProviderRegistry()
        await registry.initialize(settings)
    return registry


async def run_up(
    file_path: Path,
    project_name: Optional[str],
    settings: DocksideSettings,
    registry: Optional[ProviderRegistry] = None,
) -> ReconcileReport:
    """Load the Compose file, resolve shared resources and reconcile services."""
    spec = await load_project(file_path)
    project = get_project_name(project_name or spec.name, file_path)

    registry = await _registry(settings, registry)
    runtime = registry.get_provider("runtime")
    resolver = registry.get_provider("resources")

    resolved = await resolver.resolve(project, spec)
    observed = await runtime.list_containers(project)

    return await Reconciler(runtime).reconcile(project, spec.services, observed, resolved)


async def run_down(
    file_path: Path,
    project_name: Optional[str],
    settings: DocksideSettings,
    registry: Optional[ProviderRegistry] = None,
) -> List[str]:
    """Remove everything the project owns. The Compose file is not read."""
    project = get_project_name(project_name, file_path)

    registry = await _registry(settings, registry)
    return await TeardownDriver(registry.get_provider("runtime")).teardown(project)


def print_report(report: ReconcileReport, quiet: bool = False):
    """Summarize a reconciliation pass."""
    if quiet:
        return

    if not report.changed:
        console.print(f"Project [cyan]{report.project}[/cyan] is up to date")
        return

    table = Table(title=f"Project {report.project}")
    table.add_column("Service", style="cyan")
    table.add_column("Action")
    table.add_column("Removed", style="dim")
    table.add_column("Created", style="dim")

    for action in report.actions:
        style = ACTION_STYLES.get(action.kind, "white")
        table.add_row(
            action.service or "<unlabelled>",
            f"[{style}]{action.kind}[/{style}]",
            ", ".join(cid[:12] for cid in action.removed),
            action.created[:12] if action.created else "",
        )

    console.print(table)


def print_teardown(project: str, removed: List[str], quiet: bool = False):
    if quiet:
        return
    console.print(f"Removed {len(removed)} containers of project [cyan]{project}[/cyan]")

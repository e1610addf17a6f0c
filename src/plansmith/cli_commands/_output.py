"""Shared CLI output formatters."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from plansmith.core.plan.errors import PlanError

if TYPE_CHECKING:
    from plansmith.core.plan import PlanFunc
    from plansmith.manifests.models import ManifestBundle
    from plansmith.sdk.state import PlanState

console = Console()


def print_plans_table(plans: dict[str, PlanFunc]) -> None:
    """Pretty-print registered plans as a table."""
    table = Table(title="Registered Plans")
    table.add_column("Name", style="cyan")
    table.add_column("Namespace")
    table.add_column("Components", justify="right")
    table.add_column("Child Plans", justify="right")

    for name, func in plans.items():
        plan = func()
        try:
            children = str(len(list(plan.build().walk())) - 1)
        except PlanError as exc:
            children = f"[red]{_truncate(str(exc), 40)}[/red]"
        table.add_row(name, plan.namespace, str(len(plan.components())), children)

    console.print(table)


def print_bundles_table(bundles: list[ManifestBundle], *, as_json: bool = False) -> None:
    """Pretty-print discovered bundles in apply order."""
    if as_json:
        data = [{"local": b.is_local, "files": [str(p) for p in b.paths]} for b in bundles]
        console.print_json(json.dumps(data))
        return

    table = Table(title="Manifest Bundles")
    table.add_column("#", justify="right")
    table.add_column("Locality", style="cyan")
    table.add_column("Files")

    for index, bundle in enumerate(bundles):
        locality = "local" if bundle.is_local else "remote"
        files = "\n".join(_truncate(str(p.relative_to(bundle.root))) for p in bundle.paths)
        table.add_row(str(index), locality, files)

    console.print(table)


def print_state(state: PlanState) -> None:
    """Print a summary of an applied plan."""
    console.print("\n[bold]Plan Summary[/bold]")
    console.print(f"  Components: {len(state.results)}")
    console.print(f"  Bundles: {len(state.bundles)}")
    console.print(f"  Failed (continued): {len(state.errors)}")

    ids = list(dict.fromkeys(state.component_ids()))
    if ids:
        console.print("\n[bold]Components:[/bold]")
        for component_id in ids:
            console.print(f"  {component_id}", markup=False)

    if state.errors:
        console.print("\n[bold yellow]Errors:[/bold yellow]")
        for err in state.errors:
            console.print(f"  {_truncate(str(err))}", markup=False)


def _truncate(text: str, max_len: int = 100) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."

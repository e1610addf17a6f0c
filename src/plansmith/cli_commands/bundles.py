"""``plansmith bundles`` — show how a manifest directory would be applied."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from plansmith.cli_commands._output import console, print_bundles_table


@click.command("bundles")
@click.argument("directory", type=click.Path(exists=True, file_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def bundles(directory: str, as_json: bool) -> None:
    """List the bundles found in DIRECTORY, in apply order."""
    from plansmith.manifests.bundler import discover
    from plansmith.manifests.errors import ManifestError

    try:
        found = discover(Path(directory))
    except ManifestError as exc:
        console.print(f"[red]Discovery error:[/red] {exc}")
        sys.exit(1)

    if not found:
        console.print("[yellow]No manifests found.[/yellow]")
        return
    print_bundles_table(found, as_json=as_json)

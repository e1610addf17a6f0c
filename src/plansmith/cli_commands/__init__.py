"""CLI subcommand registration."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all subcommands on the CLI group."""
    from plansmith.cli_commands.bundles import bundles
    from plansmith.cli_commands.plan import plan

    cli.add_command(plan)
    cli.add_command(bundles)

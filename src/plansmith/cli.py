"""plansmith CLI entrypoint."""

from __future__ import annotations

import click

from plansmith import __version__


@click.group()
@click.version_option(version=__version__, prog_name="plansmith")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    envvar="PLANSMITH_LOG_LEVEL",
    help="Log level for plansmith loggers.",
)
def main(log_level: str | None) -> None:
    """plansmith — plan, synthesize, and apply deployments."""
    from plansmith.utils.log import configure_logging

    configure_logging(log_level or "WARNING")


# Register subcommands
from plansmith.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()

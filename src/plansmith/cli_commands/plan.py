"""``plansmith plan`` — list, preview, and apply registered plans."""

from __future__ import annotations

import asyncio
import importlib
import sys

import click

from plansmith.cli_commands._output import console, print_plans_table, print_state

_module_option = click.option(
    "--module",
    "-m",
    "modules",
    multiple=True,
    help="Import MODULE before running so that its plans get registered. May be repeated.",
)


def _import_modules(modules: tuple[str, ...]) -> None:
    for module in modules:
        try:
            importlib.import_module(module)
        except Exception as exc:
            console.print(f"[red]Cannot import {module}:[/red] {exc}")
            sys.exit(1)


@click.group()
def plan() -> None:
    """Work with registered plans."""


@plan.command("list")
@_module_option
def list_plans(modules: tuple[str, ...]) -> None:
    """List every registered plan."""
    from plansmith.core.plan import registered_plans

    _import_modules(modules)
    plans = registered_plans()
    if not plans:
        console.print("[yellow]No plans registered.[/yellow]")
        return
    print_plans_table(plans)


@plan.command("preview")
@click.argument("name")
@_module_option
def preview(name: str, modules: tuple[str, ...]) -> None:
    """Show the plans and components NAME would construct."""
    from plansmith.core.plan import PlanError, default_registry
    from plansmith.sdk.preview import render_preview

    _import_modules(modules)
    try:
        output = render_preview(default_registry.get(name)())
    except PlanError as exc:
        console.print(f"[red]Plan error:[/red] {exc}")
        sys.exit(1)
    console.print(output, markup=False, highlight=False)


@plan.command("apply")
@click.argument("name")
@_module_option
@click.option(
    "--outdir",
    type=click.Path(file_okay=False),
    default=None,
    help="Write manifests here instead of a temporary directory.",
)
@click.option("--dry-run", is_flag=True, help="Echo local actions instead of running them.")
@click.option("--keep-manifests", is_flag=True, help="Keep the temporary manifest directory.")
@click.option("--timeout", type=float, default=None, help="Deadline for the whole apply, in seconds.")
@click.option("--telemetry", is_flag=True, help="Enable telemetry.")
def apply(
    name: str,
    modules: tuple[str, ...],
    outdir: str | None,
    dry_run: bool,
    keep_manifests: bool,
    timeout: float | None,
    telemetry: bool,
) -> None:
    """Construct, synthesize, and apply the plan NAME."""
    from plansmith.core.errors import CoreError
    from plansmith.core.plan import PlanError, default_registry
    from plansmith.manifests.errors import ManifestError
    from plansmith.runtime.errors import ApplyError
    from plansmith.sdk.errors import PlanConstructionError, SettingsError
    from plansmith.sdk.models import Settings
    from plansmith.utils.log import configure_logging

    _import_modules(modules)

    try:
        settings = Settings.from_env(
            outdir=outdir,
            dry_run=dry_run or None,
            keep_manifests=keep_manifests or None,
            timeout=timeout,
            log_level=click.get_current_context().find_root().params.get("log_level"),
        )
    except SettingsError as exc:
        console.print(f"[red]Invalid settings:[/red] {exc}")
        sys.exit(1)
    configure_logging(settings.log_level)

    if telemetry or settings.telemetry.enabled:
        from plansmith.utils.telemetry import configure_telemetry

        if not (settings.telemetry.export_to_console or settings.telemetry.otlp_endpoint):
            console.print("[yellow]Telemetry enabled but no exporter configured.[/yellow]")
        configure_telemetry(
            export_to_console=settings.telemetry.export_to_console,
            otlp_endpoint=settings.telemetry.otlp_endpoint,
        )

    try:
        plan_func = default_registry.get(name)
    except PlanError as exc:
        console.print(f"[red]Plan error:[/red] {exc}")
        sys.exit(1)

    try:
        state = asyncio.run(plan_func().apply(settings=settings))
    except PlanConstructionError as exc:
        console.print("[red]Construction error:[/red]")
        console.print(str(exc), markup=False)
        sys.exit(1)
    except (CoreError, ManifestError, ApplyError) as exc:
        console.print(f"[red]Apply error:[/red] {exc}")
        sys.exit(1)

    print_state(state)
    if not state.ok:
        sys.exit(2)

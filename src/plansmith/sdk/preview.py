"""Render a plan as a tree without writing or applying anything."""

from __future__ import annotations

import io
from typing import TYPE_CHECKING

from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from plansmith.core.constructs import App, Chart, default_worker
from plansmith.core.context import ApplyContext

if TYPE_CHECKING:
    from plansmith.core.constructs import SynthesisWorker
    from plansmith.core.plan import Plan

PREVIEW_CHART = "preview"


def render_preview(
    plan: Plan,
    ctx: ApplyContext | None = None,
    *,
    worker: SynthesisWorker | None = None,
    width: int = 120,
) -> str:
    """Return a text tree of plans, components, and their direct children.

    Components are constructed on a throwaway app; a failing component is
    shown as an ``<error: ...>`` node instead of aborting the preview.
    """
    worker = worker or default_worker()
    tree, summary = worker.run(_build_tree, ctx or ApplyContext(), plan.build())

    console = Console(file=io.StringIO(), width=width, color_system=None, highlight=False)
    console.print(tree)
    for line in summary:
        console.print(line, markup=False)
    return console.file.getvalue()  # type: ignore[attr-defined]


def _build_tree(ctx: ApplyContext, plan: Plan) -> tuple[Tree, list[str]]:
    app = App()
    scoped = ctx.with_scope(Chart(app, PREVIEW_CHART, namespace=plan.namespace))

    root = Tree(Text(f"{plan.name}.{plan.namespace}"))
    nested = 0
    for current in plan.walk():
        branch = root if current is plan else root.add(Text(f"Plan: {current.name}.{current.namespace}"))
        for component in current.components():
            try:
                unit = component(scoped)
            except Exception as exc:
                branch.add(Text(f"<error: {exc}>"))
                continue
            if unit is None:
                branch.add(Text("<nil component>"))
                continue
            node = branch.add(Text(f"{unit.node.id} ({type(unit).__name__})"))
            for child in unit.node.children:
                node.add(Text(child.node.id))
                nested += 1

    summary = [
        "",
        "Summary:",
        f"- Root Plan: {plan.name}.{plan.namespace}",
        f"- Root Components: {len(plan.components())}",
        f"- All Nested Components: {nested}",
    ]
    return root, summary

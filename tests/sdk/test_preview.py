"""Tests for plan previews."""

from __future__ import annotations

from plansmith.components import client_side_apply
from plansmith.core.constructs import Construct
from plansmith.core.context import ApplyContext
from plansmith.core.plan import Plan, add_plan, component_set, namespace
from plansmith.sdk import render_preview


def _broken(ctx: ApplyContext) -> Construct | None:
    raise RuntimeError("boom")


class TestRenderPreview:
    def test_tree_and_summary(self) -> None:
        child = Plan("child", component_set(client_side_apply("cmd", "echo", "child")))
        root = Plan(
            "root",
            namespace("apps"),
            add_plan(child.plan()),
            component_set(client_side_apply("cmd", "echo", "root"), lambda ctx: None, _broken),
        )

        output = render_preview(root)

        assert output.splitlines()[0] == "root.apps"
        assert "Plan: child.default" in output
        assert "sdk.ClientSideApply-" in output
        assert "(ClientSideApplyResult)" in output
        assert "Resource" in output
        assert "<nil component>" in output
        assert "<error: boom>" in output
        assert "- Root Plan: root.apps" in output
        assert "- Root Components: 3" in output
        assert "- All Nested Components: 2" in output

    def test_single_plan(self) -> None:
        output = render_preview(Plan("lone", component_set(client_side_apply("cmd", "true"))))
        assert "- Root Components: 1" in output

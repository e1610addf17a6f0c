"""Tests for Plan declaration, resolution, and the registry."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from plansmith.core.constructs import Construct, ResolutionPriority, Resolver
from plansmith.core.context import ApplyContext
from plansmith.core.plan import (
    DEFAULT_NAMESPACE,
    Plan,
    PlanCycleError,
    PlanDefinitionError,
    PlanNotFoundError,
    PlanRegistry,
    add_plan,
    component_set,
    image_pull_secrets,
    manifest_resolvers,
    namespace,
)


def _noop(ctx: ApplyContext) -> Construct | None:
    return None


def _other(ctx: ApplyContext) -> Construct | None:
    return None


class TestPlanDeclaration:
    def test_defaults(self) -> None:
        plan = Plan("demo")
        assert plan.name == "demo"
        assert plan.namespace == DEFAULT_NAMESPACE
        assert plan.components() == []
        assert plan.child_plans() == []
        assert plan.resolved

    def test_empty_name_raises(self) -> None:
        with pytest.raises(PlanDefinitionError):
            Plan("")
        with pytest.raises(PlanDefinitionError):
            Plan("   ")

    def test_namespace(self) -> None:
        assert Plan("demo", namespace("apps")).namespace == "apps"

    def test_namespace_twice_raises(self) -> None:
        with pytest.raises(PlanDefinitionError, match="once"):
            Plan("demo", namespace("a"), namespace("b"))

    def test_empty_namespace_raises(self) -> None:
        with pytest.raises(PlanDefinitionError):
            Plan("demo", namespace(""))

    def test_component_set_is_additive(self) -> None:
        plan = Plan("demo", component_set(_noop), component_set(_other, _noop))
        assert plan.components() == [_noop, _other, _noop]

    def test_component_must_be_callable(self) -> None:
        with pytest.raises(PlanDefinitionError, match="callable"):
            Plan("demo", component_set("not-a-component"))  # type: ignore[arg-type]

    def test_child_must_be_callable(self) -> None:
        with pytest.raises(PlanDefinitionError, match="callable"):
            Plan("demo", add_plan(Plan("child")))  # type: ignore[arg-type]

    def test_unresolved_until_built(self) -> None:
        plan = Plan("demo", add_plan(Plan("child").plan()))
        assert not plan.resolved
        assert plan.child_plans() == []

    def test_resolvers_sorted_with_default_name_resolver(self) -> None:
        custom = Resolver(lambda d: None, ResolutionPriority.HIGH)
        plan = Plan("demo", manifest_resolvers(custom), image_pull_secrets("regcred"))
        priorities = [r.priority for r in plan.resolvers()]
        assert priorities == [ResolutionPriority.HIGH, ResolutionPriority.DEFAULT, ResolutionPriority.LOW]
        assert plan.resolvers()[0] is custom


class TestPlanBuild:
    def test_nesting(self) -> None:
        p2 = Plan("p2", component_set(_noop))
        p3 = Plan("p3", component_set(_noop))
        p1 = Plan("p1", component_set(_noop, _other), add_plan(p2.plan()), add_plan(p3.plan()))

        built = p1.build()

        assert built is p1
        assert len(p1.components()) == 2
        assert [p.name for p in p1.child_plans()] == ["p2", "p3"]
        assert p1.resolved

    def test_build_is_idempotent(self) -> None:
        p1 = Plan("p1", add_plan(Plan("p2").plan()))
        p1.build()
        first = p1.child_plans()
        p1.build()
        assert p1.child_plans() == first
        assert len(p1.child_plans()) == 1

    def test_shared_child_resolved_once(self) -> None:
        calls: list[str] = []

        def shared() -> Plan:
            calls.append("shared")
            return Plan("shared")

        left = Plan("left", add_plan(shared))
        right = Plan("right", add_plan(shared))
        root = Plan("root", add_plan(left.plan()), add_plan(right.plan()))
        root.build()

        assert calls == ["shared", "shared"]
        assert left.child_plans()[0] is right.child_plans()[0]

    @pytest.mark.parametrize("start", ["A", "B", "C"])
    def test_cycle_from_any_start(self, start: str) -> None:
        plans: dict[str, Plan] = {}

        def ref(name: str) -> Callable[[], Plan]:
            return lambda: plans[name]

        plans["A"] = Plan("A", add_plan(ref("B")))
        plans["B"] = Plan("B", add_plan(ref("C")))
        plans["C"] = Plan("C", add_plan(ref("A")))

        with pytest.raises(PlanCycleError) as exc_info:
            plans[start].build()

        chain = exc_info.value.chain
        assert set(chain) == {"A", "B", "C"}
        assert chain[0] == chain[-1] == start
        assert "Plan dependency cycle detected" in str(exc_info.value)

    def test_self_cycle(self) -> None:
        holder: list[Plan] = []
        holder.append(Plan("self", add_plan(lambda: holder[0])))
        with pytest.raises(PlanCycleError) as exc_info:
            holder[0].build()
        assert exc_info.value.chain == ["self", "self"]

    def test_walk_children_first(self) -> None:
        leaf = Plan("leaf")
        middle = Plan("middle", add_plan(leaf.plan()))
        other = Plan("other", add_plan(leaf.plan()))
        root = Plan("root", add_plan(middle.plan()), add_plan(other.plan()))

        order = [p.name for p in root.build().walk()]

        assert order == ["leaf", "middle", "other", "root"]

    def test_walk_requires_build(self) -> None:
        root = Plan("root", add_plan(Plan("child").plan()))
        with pytest.raises(PlanDefinitionError, match="build"):
            list(root.walk())


class TestPlanRegistry:
    def test_register_and_get(self) -> None:
        registry = PlanRegistry()

        def example() -> Plan:
            return Plan("example")

        assert registry.register(example) is example
        assert "example" in registry
        assert registry.get("example") is example
        assert len(registry) == 1

    def test_reregistering_same_function_is_noop(self) -> None:
        registry = PlanRegistry()

        def example() -> Plan:
            return Plan("example")

        registry.register(example)
        registry.register(example)
        assert len(registry) == 1

    def test_name_conflict(self) -> None:
        registry = PlanRegistry()
        registry.register(lambda: Plan("example"))
        with pytest.raises(PlanDefinitionError, match="already registered"):
            registry.register(lambda: Plan("example"))

    def test_not_found_lists_known(self) -> None:
        registry = PlanRegistry()
        registry.register(lambda: Plan("known"))
        with pytest.raises(PlanNotFoundError, match="known"):
            registry.get("missing")

    def test_reference_is_lazy(self) -> None:
        registry = PlanRegistry()
        ref = registry.reference("later")
        registry.register(lambda: Plan("later"))

        root = Plan("root", add_plan(ref))
        root.build()
        assert [p.name for p in root.child_plans()] == ["later"]

    def test_plans_sorted(self) -> None:
        registry = PlanRegistry()
        registry.register(lambda: Plan("b"))
        registry.register(lambda: Plan("a"))
        assert list(registry.plans()) == ["a", "b"]

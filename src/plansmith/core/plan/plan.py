"""Plan — a named, ordered collection of components and child plans.

Plans are declared with option functions and resolved lazily::

    plan = Plan(
        "my-plan",
        namespace("my-ns"),
        add_plan(bootstrap_plan),            # a zero-arg function returning a Plan
        add_plan(registered_plan("example")),  # looked up in the registry
        component_set(client_side_apply("cmd", "echo", "hello")),
    )
    state = await plan.apply()

Child plans run before their parent. Components run in declaration order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING

from plansmith.core.constructs.resolvers import (
    ResolutionPriority,
    Resolver,
    image_pull_secret_resolver,
    name_resolver,
    sort_resolvers,
)
from plansmith.core.plan.errors import PlanCycleError, PlanDefinitionError

if TYPE_CHECKING:
    from plansmith.core.constructs import Construct
    from plansmith.core.context import ApplyContext
    from plansmith.sdk.models import Settings
    from plansmith.sdk.state import PlanState

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "default"

ComponentFunc = Callable[["ApplyContext"], "Construct | None"]
PlanFunc = Callable[[], "Plan"]
PlanOption = Callable[["Plan"], None]


class Plan:
    """An intent to apply a set of resources in a prescribed order.

    The plan name must be unique among the plans known to the registry; it
    is also the key used for memoization and cycle detection during
    :meth:`build`.
    """

    def __init__(self, name: str, *opts: PlanOption) -> None:
        if not name or not name.strip():
            raise PlanDefinitionError("plan name must not be empty")
        self._name = name
        self._namespace = ""
        self._components: list[ComponentFunc] = []
        self._child_plans: list[Plan] = []
        self._child_funcs: list[PlanFunc] = []
        self._resolvers: list[Resolver] = [Resolver(name_resolver, ResolutionPriority.LOW)]
        for opt in opts:
            opt(self)
        if not self._namespace:
            self._namespace = DEFAULT_NAMESPACE

    def __repr__(self) -> str:
        return f"Plan({self._name!r}, namespace={self._namespace!r})"

    @property
    def name(self) -> str:
        return self._name

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def resolved(self) -> bool:
        """True once every child reference has been resolved."""
        return not self._child_funcs

    def components(self) -> list[ComponentFunc]:
        return list(self._components)

    def child_plans(self) -> list[Plan]:
        return list(self._child_plans)

    def resolvers(self) -> list[Resolver]:
        """Post-processing hooks, highest priority first."""
        return sort_resolvers(self._resolvers)

    def plan(self) -> PlanFunc:
        """Return a zero-arg function yielding this plan, for :func:`add_plan`."""
        return lambda: self

    def build(self) -> Plan:
        """Resolve child plan references depth-first.

        Each plan name is expanded once; later references reuse the first
        resolved instance. Calling ``build`` again on a resolved plan is a
        no-op.

        Raises:
            PlanCycleError: A plan transitively lists itself as a child.
        """
        visited: dict[str, Plan] = {}
        on_stack: set[str] = set()
        frames: list[str] = []

        def resolve(plan: Plan) -> Plan:
            if plan.name in on_stack:
                raise PlanCycleError([*frames, plan.name])
            if plan.name in visited:
                return visited[plan.name]

            on_stack.add(plan.name)
            frames.append(plan.name)
            resolved = [resolve(fn()) for fn in plan._child_funcs]
            frames.pop()
            on_stack.discard(plan.name)

            plan._child_plans.extend(resolved)
            plan._child_funcs = []
            visited[plan.name] = plan
            return plan

        result = resolve(self)
        logger.debug("Resolved plan %r (%d plan(s) total)", self._name, len(visited))
        return result

    def walk(self) -> Iterator[Plan]:
        """Yield resolved plans in apply order.

        Children come first, depth-first; every plan is yielded once and the
        plan itself comes last.
        """
        seen: set[str] = set()

        def visit(plan: Plan) -> Iterator[Plan]:
            if plan.name in seen:
                return
            if not plan.resolved:
                raise PlanDefinitionError(f"plan {plan.name!r} has unresolved child plans; call build() first")
            seen.add(plan.name)
            for child in plan._child_plans:
                yield from visit(child)
            yield plan

        yield from visit(self)

    async def apply(
        self,
        ctx: ApplyContext | None = None,
        *,
        settings: Settings | None = None,
    ) -> PlanState:
        """Build, synthesize, and apply this plan in one call.

        Manifests are written to a temporary directory unless
        ``settings.outdir`` is set.
        """
        from plansmith.core.context import ApplyContext
        from plansmith.sdk.service import PlanService

        ctx = ctx or ApplyContext()
        service = PlanService(settings=settings)
        app_plan = await service.create_plan(ctx, self.build())
        try:
            return await app_plan.apply(ctx)
        finally:
            app_plan.cleanup()


def namespace(ns: str) -> PlanOption:
    """Set the plan's target namespace. May be used once per plan."""

    def apply(plan: Plan) -> None:
        if plan._namespace:
            raise PlanDefinitionError(f"namespace may only be declared once per plan ({plan.name!r})")
        if not ns:
            raise PlanDefinitionError(f"namespace must not be empty ({plan.name!r})")
        plan._namespace = ns

    return apply


def add_plan(child: PlanFunc) -> PlanOption:
    """Depend on the plan returned by *child*; resolved during :meth:`Plan.build`."""

    def apply(plan: Plan) -> None:
        if not callable(child):
            raise PlanDefinitionError(f"child plan reference for {plan.name!r} must be callable")
        plan._child_funcs.append(child)

    return apply


def component_set(*components: ComponentFunc) -> PlanOption:
    """Append components to the plan. May be repeated."""

    def apply(plan: Plan) -> None:
        for component in components:
            if not callable(component):
                raise PlanDefinitionError(f"component for {plan.name!r} must be callable, got {component!r}")
        plan._components.extend(components)

    return apply


def manifest_resolvers(*resolvers: Resolver) -> PlanOption:
    """Append document resolvers run at synthesis time."""

    def apply(plan: Plan) -> None:
        plan._resolvers.extend(resolvers)

    return apply


def image_pull_secrets(*secrets: str) -> PlanOption:
    """Add ``imagePullSecrets`` to every pod-bearing resource of the plan.

    The secrets are not created; they must already exist or be created by
    the plan.
    """
    return manifest_resolvers(Resolver(image_pull_secret_resolver(*secrets), ResolutionPriority.DEFAULT))

"""Composite — wires components together by what they produce and consume.

Component order inside a composite does not matter: a dependency graph is
built from the declared tags and components run once their producers have
run. A component repeated several times contributes several values, which a
``Many`` consumer receives in execution order::

    component = new_composite(
        lambda: Producer("a"),
        lambda: Producer("b"),
        GroupConsumer,
    )
    Plan("demo", component_set(component))
"""

from __future__ import annotations

import functools
import logging
import threading
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from plansmith.core.composition.builtins import ChartFactoryProvider, ContextProvider
from plansmith.core.composition.component import AutoComponent, analyze, factory_label
from plansmith.core.composition.errors import (
    AmbiguousProducerError,
    CircularDependencyError,
    ComponentDefinitionError,
    ComponentExecutionError,
    MissingDependencyError,
    RegistrationError,
)
from plansmith.core.composition.selectors import Many, One, Satisfies, Selector, Tag, tag_name
from plansmith.core.constructs.tree import Chart
from plansmith.core.errors import ConstructError, IdentityError
from plansmith.core.identity import encode, fnv_hash, resource_id

if TYPE_CHECKING:
    from plansmith.core.constructs import Construct
    from plansmith.core.context import ApplyContext
    from plansmith.core.plan import ComponentFunc

logger = logging.getLogger(__name__)

COMPOSITE_PREFIX = "sdk.composite"


@dataclass(frozen=True)
class ExecutionRecord:
    component: str
    tag: Tag
    value: Any


class Composite:
    """A set of components executed in dependency order.

    Registration happens in the constructor: every factory is called and
    analyzed, failures are collected into one :class:`RegistrationError`,
    then the dependency graph is validated.

    Raises:
        RegistrationError: One or more factories are unusable.
        AmbiguousProducerError: A ``One`` selector matches several producers.
            When several selectors are ambiguous they are raised together as a
            :class:`RegistrationError` whose ``errors`` are the ambiguities.
    """

    def __init__(self, factories: Iterable[Any], *, builtins: Sequence[Any] = ()) -> None:
        self._lock = threading.RLock()
        self._results: dict[Tag, Any] = {}
        self._collected: dict[Tag, list[Any]] = {}
        self._log: list[ExecutionRecord] = []

        components: list[AutoComponent] = []
        errors: list[ComponentDefinitionError] = []
        for index, factory in enumerate([*builtins, *factories]):
            try:
                components.append(analyze(factory, index))
            except ComponentDefinitionError as exc:
                errors.append(exc)
        if errors:
            raise RegistrationError(errors)

        self._components = components
        self._by_name = {c.name: c for c in components}
        self._graph = self._build_graph()

    @property
    def components(self) -> list[AutoComponent]:
        return list(self._components)

    def dependency_graph(self) -> dict[str, list[str]]:
        """Consumer name → names of the producers it depends on."""
        return {name: list(deps) for name, deps in self._graph.items()}

    def apply(self) -> None:
        """Execute every component once, producers before consumers.

        Raises:
            CircularDependencyError: Components depend on each other in a loop.
            MissingDependencyError: A consumed value has no producer.
            ComponentExecutionError: A component's ``apply`` raised.
        """
        executed: set[str] = set()
        stack: list[str] = []

        def visit(name: str) -> None:
            if name in executed:
                return
            if name in stack:
                raise CircularDependencyError([*stack[stack.index(name) :], name])
            stack.append(name)
            for dep in self._graph[name]:
                visit(dep)
            stack.pop()
            self._execute(self._by_name[name])
            executed.add(name)

        for component in self._components:
            visit(component.name)

    def result(self, tag: Tag) -> Any:
        """The last value produced for *tag*."""
        with self._lock:
            if tag not in self._results:
                raise KeyError(tag_name(tag))
            return self._results[tag]

    def results(self, tag: Tag) -> list[Any]:
        """Every value produced for *tag*, in execution order."""
        with self._lock:
            return list(self._collected.get(tag, ()))

    def execution_log(self) -> list[ExecutionRecord]:
        with self._lock:
            return list(self._log)

    def _build_graph(self) -> dict[str, list[str]]:
        graph: dict[str, list[str]] = {c.name: [] for c in self._components}
        ambiguities: list[AmbiguousProducerError] = []
        for consumer in self._components:
            for selector in consumer.consumes:
                producers = [
                    p.name for p in self._components if p.name != consumer.name and selector.matches(p.produces)
                ]
                if isinstance(selector, One) and len(producers) > 1:
                    ambiguities.append(AmbiguousProducerError(consumer.name, tag_name(selector.tag), producers))
                    continue
                graph[consumer.name].extend(p for p in producers if p not in graph[consumer.name])
            if consumer.collects_many:
                logger.debug("Component %s collects %s", consumer.name, graph[consumer.name])
        if len(ambiguities) == 1:
            raise ambiguities[0]
        if ambiguities:
            raise RegistrationError(ambiguities)
        return graph

    def _execute(self, component: AutoComponent) -> None:
        args = [self._value_for(component, selector) for selector in component.consumes]
        try:
            value = component.invoke(args)
        except Exception as exc:
            raise ComponentExecutionError(component.name, exc) from exc

        if component.produces is not None:
            with self._lock:
                self._results[component.produces] = value
                self._collected.setdefault(component.produces, []).append(value)
                self._log.append(ExecutionRecord(component.name, component.produces, value))
        logger.debug("Executed component %s", component.name)

    def _value_for(self, component: AutoComponent, selector: Selector) -> Any:
        with self._lock:
            if isinstance(selector, Many):
                return list(self._collected.get(selector.tag, ()))
            if isinstance(selector, Satisfies):
                for record in self._log:
                    if selector.matches(record.tag):
                        return record.value
                raise MissingDependencyError(component.name, str(selector))
            if selector.tag not in self._results:
                raise MissingDependencyError(component.name, tag_name(selector.tag))
            return self._results[selector.tag]


class CompositeChart(Chart):
    """The chart a composite's components are created under."""

    def __init__(self, scope: Construct, id: str) -> None:
        super().__init__(scope, id)
        self.composite: Composite | None = None

    def outputs(self, tag: Tag) -> list[Any]:
        """Values produced for *tag* inside this composite, in execution order."""
        if self.composite is None:
            return []
        return self.composite.results(tag)


def new_composite(*factories: Any) -> ComponentFunc:
    """Return a component function that runs *factories* as one composite.

    The composite chart id is derived from each factory's registration index
    and qualified name (plus the bound arguments of ``functools.partial``
    factories and closures), so it is stable across processes.
    """
    key = [registration_key(index, factory) for index, factory in enumerate(factories)]

    def component(ctx: ApplyContext) -> CompositeChart:
        if ctx.scope is None:
            raise ConstructError("a composite requires a construct scope in its context")
        chart = CompositeChart(ctx.scope, resource_id(COMPOSITE_PREFIX, key))
        scoped = ctx.with_scope(chart)
        composite = Composite(
            factories,
            builtins=(functools.partial(ContextProvider, scoped), ChartFactoryProvider),
        )
        chart.composite = composite
        composite.apply()
        return chart

    return component


def registration_key(index: int, factory: Any) -> dict[str, Any]:
    """A JSON-friendly description of *factory* at position *index*."""
    bound: list[Any] = []
    target = factory
    if isinstance(factory, functools.partial):
        target = factory.func
        bound = [*factory.args, *sorted(factory.keywords.items())]
    elif getattr(factory, "__closure__", None):
        bound = [_cell_value(cell) for cell in factory.__closure__]
    module = getattr(target, "__module__", None) or type(target).__module__
    return {
        "index": index,
        "factory": f"{module}.{factory_label(target)}",
        "bound": [_jsonable(v) for v in bound],
    }


def _cell_value(cell: Any) -> Any:
    try:
        return cell.cell_contents
    except ValueError:  # empty cell
        return None


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in sorted(value.items(), key=lambda kv: str(kv[0]))}
    if callable(value):
        return f"{getattr(value, '__module__', '')}.{factory_label(value)}"
    try:
        return fnv_hash(encode(value))
    except IdentityError:
        # No stable content form; fall back to the type.
        return f"{type(value).__module__}.{type(value).__qualname__}"

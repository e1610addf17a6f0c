"""Producers every composite registers ahead of user components.

- :class:`ContextProvider` produces the active :class:`ApplyContext`, scoped
  to the composite's chart.
- :class:`ChartFactoryProvider` produces a :class:`ChartFactory`, which
  creates charts under that scope with generated resource ids::

      class MyComponent:
          produces = MyResult
          consumes = (ChartFactory,)

          def apply(self, factory):
              chart = factory.create_chart(self)
              ...
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from plansmith.core.constructs.tree import Chart
from plansmith.core.context import ApplyContext
from plansmith.core.errors import ConstructError
from plansmith.core.identity import resource_id


@runtime_checkable
class ChartFactory(Protocol):
    """Creates charts without the scope and resource-id boilerplate."""

    def create_chart(self, value: Any, *, name: str | None = None) -> Chart: ...


class ContextProvider:
    name = "sdk.composite.builtin.context"
    produces = ApplyContext
    consumes = ()

    def __init__(self, ctx: ApplyContext) -> None:
        self._ctx = ctx

    def apply(self) -> ApplyContext:
        return self._ctx


class ScopedChartFactory:
    """:class:`ChartFactory` bound to the scope of an :class:`ApplyContext`."""

    def __init__(self, ctx: ApplyContext) -> None:
        self._ctx = ctx

    def create_chart(self, value: Any, *, name: str | None = None) -> Chart:
        """Create a chart with id ``resource_id(name, value)``.

        ``name`` defaults to ``str(value)`` when the value's type overrides
        ``__str__``, else to the value's class name.
        """
        scope = self._ctx.scope
        if scope is None:
            raise ConstructError("no construct scope available to create a chart")
        if name is None:
            cls = type(value)
            name = str(value) if cls.__str__ is not object.__str__ else cls.__name__
        return Chart(scope, resource_id(name, value))


class ChartFactoryProvider:
    name = "sdk.composite.builtin.chartFactory"
    produces = ChartFactory
    consumes = (ApplyContext,)

    def apply(self, ctx: ApplyContext) -> ChartFactory:
        return ScopedChartFactory(ctx)

"""Auto-wiring composition engine."""

from plansmith.core.composition.builtins import (
    ChartFactory,
    ChartFactoryProvider,
    ContextProvider,
    ScopedChartFactory,
)
from plansmith.core.composition.component import AutoComponent, analyze, component_name
from plansmith.core.composition.engine import (
    Composite,
    CompositeChart,
    ExecutionRecord,
    new_composite,
    registration_key,
)
from plansmith.core.composition.errors import (
    AmbiguousProducerError,
    CircularDependencyError,
    ComponentDefinitionError,
    ComponentExecutionError,
    CompositionError,
    MissingDependencyError,
    RegistrationError,
)
from plansmith.core.composition.selectors import Many, One, Satisfies, Selector, Tag, as_selector

__all__ = [
    "AmbiguousProducerError",
    "AutoComponent",
    "ChartFactory",
    "ChartFactoryProvider",
    "CircularDependencyError",
    "ComponentDefinitionError",
    "ComponentExecutionError",
    "Composite",
    "CompositeChart",
    "CompositionError",
    "ContextProvider",
    "ExecutionRecord",
    "Many",
    "MissingDependencyError",
    "One",
    "RegistrationError",
    "Satisfies",
    "ScopedChartFactory",
    "Selector",
    "Tag",
    "analyze",
    "as_selector",
    "component_name",
    "new_composite",
    "registration_key",
]

"""AutoComponent — a registered component and its declared wiring.

A factory is any zero-argument callable. The instance it returns must have
an ``apply`` method and may declare::

    class Consumer:
        produces = Report                       # class or string tag
        consumes = (Many(Result), ChartFactory)  # one argument per selector

        def apply(self, results, factory): ...
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any

from plansmith.core.composition.errors import ComponentDefinitionError
from plansmith.core.composition.selectors import Many, Selector, Tag, as_selector, is_tag

NAME_SEPARATOR = "::"


@dataclass(frozen=True)
class AutoComponent:
    """A component instance with its produced tag and consumed selectors."""

    instance: Any
    name: str
    produces: Tag | None
    consumes: tuple[Selector, ...]

    @property
    def collects_many(self) -> bool:
        return any(isinstance(s, Many) for s in self.consumes)

    def invoke(self, args: list[Any]) -> Any:
        return self.instance.apply(*args)


def component_name(instance: Any) -> str:
    """Human-readable name for *instance*.

    Precedence: a ``name`` attribute or method, an overridden ``__str__``,
    then the qualified class name.
    """
    name = getattr(instance, "name", None)
    if callable(name):
        name = name()
    if isinstance(name, str) and name:
        return name
    cls = type(instance)
    if cls.__str__ is not object.__str__:
        return str(instance)
    return f"{cls.__module__}.{cls.__qualname__}"


def factory_label(factory: Any) -> str:
    return getattr(factory, "__qualname__", None) or type(factory).__qualname__


def analyze(factory: Any, index: int) -> AutoComponent:
    """Call *factory* and derive the component's wiring.

    Raises:
        ComponentDefinitionError: The factory or its instance is unusable.
    """
    if factory is None:
        raise ComponentDefinitionError(f"#{index}", "cannot register None")
    if not callable(factory):
        raise ComponentDefinitionError(
            f"#{index}", f"object of type {type(factory).__name__} is not callable; a factory is required"
        )

    label = f"#{index} ({factory_label(factory)})"
    required = _required_parameters(factory)
    if required:
        raise ComponentDefinitionError(
            label, f"factory has required parameters {', '.join(required)} (is the component a closure?)"
        )

    try:
        instance = factory()
    except Exception as exc:
        raise ComponentDefinitionError(label, f"factory raised {type(exc).__name__}: {exc}") from exc
    if instance is None:
        raise ComponentDefinitionError(label, "factory returned None")

    name = f"{index}{NAME_SEPARATOR}{component_name(instance)}"
    apply = getattr(instance, "apply", None)
    if not callable(apply):
        raise ComponentDefinitionError(repr(name), "missing apply method")

    produces = getattr(instance, "produces", None)
    if produces is not None and not is_tag(produces):
        raise ComponentDefinitionError(repr(name), f"invalid produced tag {produces!r}")

    raw_consumes = getattr(instance, "consumes", ()) or ()
    if isinstance(raw_consumes, (str, type)):
        raw_consumes = (raw_consumes,)
    try:
        consumes = tuple(as_selector(entry) for entry in raw_consumes)
    except TypeError as exc:
        raise ComponentDefinitionError(repr(name), str(exc)) from exc

    if not _accepts(apply, len(consumes)):
        raise ComponentDefinitionError(
            repr(name), f"apply() cannot take {len(consumes)} argument(s) for its declared dependencies"
        )

    return AutoComponent(instance=instance, name=name, produces=produces, consumes=consumes)


def _required_parameters(fn: Any) -> list[str]:
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return []
    return [
        p.name
        for p in sig.parameters.values()
        if p.default is inspect.Parameter.empty
        and p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    ]


def _accepts(fn: Any, count: int) -> bool:
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return True
    try:
        sig.bind(*([None] * count))
    except TypeError:
        return False
    return True

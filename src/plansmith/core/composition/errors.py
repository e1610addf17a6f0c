"""Error types for the composition engine."""

from __future__ import annotations

from collections.abc import Sequence

from plansmith.core.errors import CoreError


class CompositionError(CoreError):
    """Base error for composition failures."""


class ComponentDefinitionError(CompositionError):
    """A single factory or component instance is unusable."""

    def __init__(self, component: str, detail: str) -> None:
        self.component = component
        self.detail = detail
        super().__init__(f"cannot register component {component}: {detail}")


class RegistrationError(CompositionError):
    """One or more factories failed registration.

    Every failure is collected in ``errors`` so they can be reported together.
    """

    def __init__(self, errors: Sequence[CompositionError]) -> None:
        self.errors = list(errors)
        lines = "\n".join(f"  - {err}" for err in self.errors)
        super().__init__(f"{len(self.errors)} component(s) failed registration:\n{lines}")


class AmbiguousProducerError(CompositionError):
    """A component consumes a single value that several components produce."""

    def __init__(self, consumer: str, tag: str, producers: Sequence[str]) -> None:
        self.consumer = consumer
        self.tag = tag
        self.producers = list(producers)
        super().__init__(
            f"component {consumer!r} consumes a single {tag} but multiple producers exist: "
            f"{', '.join(self.producers)}. Only the last produced value would be used; "
            f"declare Many({tag}) to collect all of them"
        )


class CircularDependencyError(CompositionError):
    """Components depend on each other in a loop."""

    def __init__(self, chain: Sequence[str]) -> None:
        self.chain = list(chain)
        super().__init__("circular dependency detected: " + " -> ".join(self.chain))


class MissingDependencyError(CompositionError):
    """No registered component provides a consumed value."""

    def __init__(self, consumer: str, tag: str) -> None:
        self.consumer = consumer
        self.tag = tag
        super().__init__(f"no registered component provides {tag} required by {consumer!r}")


class ComponentExecutionError(CompositionError):
    """A component's ``apply`` method raised."""

    def __init__(self, component: str, cause: BaseException) -> None:
        self.component = component
        self.cause = cause
        super().__init__(f"executing component {component!r}: {cause}")

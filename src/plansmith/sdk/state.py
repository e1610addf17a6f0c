"""PlanState — what an applied plan reports back to the caller."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING, TypeVar

from plansmith.core.identity import extract_resource

if TYPE_CHECKING:
    from plansmith.core.constructs import Construct
    from plansmith.core.results import ResultIndex
    from plansmith.manifests.models import ManifestBundle
    from plansmith.runtime.errors import ContinueError
    from plansmith.runtime.models import RunnerResult

T = TypeVar("T")


class PlanState:
    """Read-only view of a plan's results.

    Iteration always follows the order in which components were executed.
    Ids may be given with or without their hash suffix::

        for chart in state.component_by_name("sdk.ClientSideApply"):
            result = component_state(chart, ClientSideApplyResult)
    """

    def __init__(
        self,
        results: ResultIndex,
        *,
        bundles: Sequence[ManifestBundle] = (),
        errors: Sequence[ContinueError] = (),
        outputs: Sequence[RunnerResult] = (),
    ) -> None:
        self._results = results
        self.bundles = list(bundles)
        self.errors = list(errors)
        self.outputs = list(outputs)

    @property
    def results(self) -> ResultIndex:
        return self._results

    @property
    def ok(self) -> bool:
        """True when no bundle failed under a ``continue`` policy."""
        return not self.errors

    def component_by_name(self, id: str) -> Iterator[Construct]:
        return self._results.get(id)

    def components(self) -> Iterator[Construct]:
        return self._results.components()

    def component_ids(self) -> Iterator[str]:
        for component in self._results.components():
            yield extract_resource(component.node.id)


def component_state(component: object, cls: type[T]) -> T:
    """Return *component* typed as *cls*.

    Raises:
        TypeError: *component* is not an instance of *cls*.
    """
    if not isinstance(component, cls):
        raise TypeError(f"component {component!r} is a {type(component).__name__}, not a {cls.__name__}")
    return component

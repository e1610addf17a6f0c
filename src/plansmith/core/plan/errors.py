"""Error types for plan definition and resolution."""

from __future__ import annotations

from collections.abc import Sequence

from plansmith.core.errors import CoreError


class PlanError(CoreError):
    """Base error for plan failures."""


class PlanDefinitionError(PlanError):
    """A plan was declared incorrectly (e.g. namespace set twice)."""


class PlanCycleError(PlanError):
    """A plan transitively depends on itself.

    ``chain`` lists plan names from the resolution root to the repeated plan.
    """

    def __init__(self, chain: Sequence[str]) -> None:
        self.chain = list(chain)
        super().__init__("Plan dependency cycle detected: " + " -> ".join(self.chain))


class PlanNotFoundError(PlanError):
    """No plan with the requested name is registered."""

    def __init__(self, name: str, known: Sequence[str] = ()) -> None:
        self.name = name
        self.known = list(known)
        msg = f"Plan not found: {name!r}"
        if self.known:
            msg += f" (registered: {', '.join(self.known)})"
        super().__init__(msg)

"""ApplyContext — the immutable context threaded through plan operations.

A context carries the current construct scope, an optional deadline, and
arbitrary request values. Every ``with_*`` method returns a new context;
the original is never modified.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from plansmith.core.constructs import Construct


@dataclass(frozen=True)
class ApplyContext:
    """Scope, deadline, and values for one plan run.

    ``deadline`` is expressed on the :func:`time.monotonic` clock.
    """

    scope: Construct | None = None
    deadline: float | None = None
    values: Mapping[str, Any] = field(default_factory=dict)

    def with_scope(self, scope: Construct) -> ApplyContext:
        return replace(self, scope=scope)

    def with_value(self, key: str, value: Any) -> ApplyContext:
        return replace(self, values={**self.values, key: value})

    def value(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def with_timeout(self, seconds: float) -> ApplyContext:
        """Return a context that expires *seconds* from now.

        An earlier existing deadline is kept.
        """
        deadline = time.monotonic() + seconds
        if self.deadline is not None and self.deadline < deadline:
            deadline = self.deadline
        return replace(self, deadline=deadline)

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or ``None`` if there is none."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0

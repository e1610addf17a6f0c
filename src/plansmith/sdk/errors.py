"""SDK error types."""

from __future__ import annotations

from collections.abc import Sequence


class PlanConstructionError(Exception):
    """One or more components failed while the plan was being constructed.

    Every failure is kept in ``errors``; nothing was synthesized or applied.
    """

    def __init__(self, plan: str, errors: Sequence[BaseException]) -> None:
        self.plan = plan
        self.errors = list(errors)
        lines = "\n".join(f"  - {type(err).__name__}: {err}" for err in self.errors)
        super().__init__(f"{len(self.errors)} component(s) of plan {plan!r} failed:\n{lines}")


class SettingsError(Exception):
    """Raised when settings fail validation."""

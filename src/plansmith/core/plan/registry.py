"""Plan registry — lets plans be referenced and applied by name.

Usage::

    @register_plan
    def example_plan() -> Plan:
        return Plan("example", component_set(...))

    Plan("parent", add_plan(registered_plan("example")))
"""

from __future__ import annotations

import logging
import threading

from plansmith.core.plan.errors import PlanDefinitionError, PlanNotFoundError
from plansmith.core.plan.plan import Plan, PlanFunc

logger = logging.getLogger(__name__)


class PlanRegistry:
    """Name → plan function map."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._plans: dict[str, PlanFunc] = {}

    def register(self, func: PlanFunc) -> PlanFunc:
        """Register *func* under the name of the plan it returns.

        Re-registering the same function is a no-op; registering a different
        function under a taken name raises :class:`PlanDefinitionError`.
        """
        name = func().name
        with self._lock:
            existing = self._plans.get(name)
            if existing is not None and existing is not func:
                raise PlanDefinitionError(f"a plan named {name!r} is already registered")
            self._plans[name] = func
        logger.debug("Registered plan %r", name)
        return func

    def get(self, name: str) -> PlanFunc:
        with self._lock:
            func = self._plans.get(name)
            known = sorted(self._plans)
        if func is None:
            raise PlanNotFoundError(name, known)
        return func

    def reference(self, name: str) -> PlanFunc:
        """Return a lazy reference; the lookup happens when it is called."""

        def resolve() -> Plan:
            return self.get(name)()

        return resolve

    def plans(self) -> dict[str, PlanFunc]:
        with self._lock:
            return {name: self._plans[name] for name in sorted(self._plans)}

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._plans

    def __len__(self) -> int:
        with self._lock:
            return len(self._plans)


default_registry = PlanRegistry()


def register_plan(func: PlanFunc) -> PlanFunc:
    """Decorator registering *func* in the default registry."""
    return default_registry.register(func)


def registered_plan(name: str) -> PlanFunc:
    """Reference a plan in the default registry by name, for ``add_plan``."""
    return default_registry.reference(name)


def registered_plans() -> dict[str, PlanFunc]:
    return default_registry.plans()

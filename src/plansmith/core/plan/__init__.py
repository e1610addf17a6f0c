"""Plan declaration, resolution, and the plan registry."""

from plansmith.core.plan.errors import PlanCycleError, PlanDefinitionError, PlanError, PlanNotFoundError
from plansmith.core.plan.plan import (
    DEFAULT_NAMESPACE,
    ComponentFunc,
    Plan,
    PlanFunc,
    PlanOption,
    add_plan,
    component_set,
    image_pull_secrets,
    manifest_resolvers,
    namespace,
)
from plansmith.core.plan.registry import (
    PlanRegistry,
    default_registry,
    register_plan,
    registered_plan,
    registered_plans,
)

__all__ = [
    "DEFAULT_NAMESPACE",
    "ComponentFunc",
    "Plan",
    "PlanCycleError",
    "PlanDefinitionError",
    "PlanError",
    "PlanFunc",
    "PlanNotFoundError",
    "PlanOption",
    "PlanRegistry",
    "add_plan",
    "component_set",
    "default_registry",
    "image_pull_secrets",
    "manifest_resolvers",
    "namespace",
    "register_plan",
    "registered_plan",
    "registered_plans",
]

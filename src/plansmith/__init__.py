"""plansmith — declare deployment plans, synthesize manifests, apply them in order."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from plansmith.components.client_side_apply import client_side_apply as client_side_apply
    from plansmith.components.raw_manifests import raw_manifests as raw_manifests
    from plansmith.core.composition.builtins import ChartFactory as ChartFactory
    from plansmith.core.composition.engine import new_composite as new_composite
    from plansmith.core.composition.selectors import Many as Many
    from plansmith.core.composition.selectors import One as One
    from plansmith.core.composition.selectors import Satisfies as Satisfies
    from plansmith.core.context import ApplyContext as ApplyContext
    from plansmith.core.identity import extract_resource as extract_resource
    from plansmith.core.identity import resource_id as resource_id
    from plansmith.core.plan.plan import Plan as Plan
    from plansmith.core.plan.plan import add_plan as add_plan
    from plansmith.core.plan.plan import component_set as component_set
    from plansmith.core.plan.plan import image_pull_secrets as image_pull_secrets
    from plansmith.core.plan.plan import namespace as namespace
    from plansmith.core.plan.registry import register_plan as register_plan
    from plansmith.core.plan.registry import registered_plan as registered_plan
    from plansmith.sdk.models import Settings as Settings
    from plansmith.sdk.preview import render_preview as render_preview
    from plansmith.sdk.service import PlanService as PlanService
    from plansmith.sdk.state import PlanState as PlanState
    from plansmith.sdk.state import component_state as component_state

_SDK_EXPORTS = {
    "Plan": "plansmith.core.plan.plan",
    "add_plan": "plansmith.core.plan.plan",
    "component_set": "plansmith.core.plan.plan",
    "image_pull_secrets": "plansmith.core.plan.plan",
    "namespace": "plansmith.core.plan.plan",
    "register_plan": "plansmith.core.plan.registry",
    "registered_plan": "plansmith.core.plan.registry",
    "ApplyContext": "plansmith.core.context",
    "resource_id": "plansmith.core.identity",
    "extract_resource": "plansmith.core.identity",
    "new_composite": "plansmith.core.composition.engine",
    "One": "plansmith.core.composition.selectors",
    "Many": "plansmith.core.composition.selectors",
    "Satisfies": "plansmith.core.composition.selectors",
    "ChartFactory": "plansmith.core.composition.builtins",
    "client_side_apply": "plansmith.components.client_side_apply",
    "raw_manifests": "plansmith.components.raw_manifests",
    "PlanService": "plansmith.sdk.service",
    "PlanState": "plansmith.sdk.state",
    "component_state": "plansmith.sdk.state",
    "Settings": "plansmith.sdk.models",
    "render_preview": "plansmith.sdk.preview",
}


def __getattr__(name: str) -> object:
    module_path = _SDK_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'plansmith' has no attribute {name!r}")

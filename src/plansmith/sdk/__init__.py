"""plansmith SDK — create, preview, and apply plans."""

from plansmith.sdk.errors import PlanConstructionError, SettingsError
from plansmith.sdk.models import Settings, TelemetrySettings
from plansmith.sdk.preview import render_preview
from plansmith.sdk.service import AppPlan, PlanService
from plansmith.sdk.state import PlanState, component_state

__all__ = [
    "AppPlan",
    "PlanConstructionError",
    "PlanService",
    "PlanState",
    "Settings",
    "SettingsError",
    "TelemetrySettings",
    "component_state",
    "render_preview",
]

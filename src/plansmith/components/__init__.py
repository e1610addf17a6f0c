"""Built-in components."""

from plansmith.components.client_side_apply import (
    ClientSideApply,
    ClientSideApplyProps,
    ClientSideApplyResult,
    client_side_apply,
    new_client_side_apply,
)
from plansmith.components.raw_manifests import RawManifestsChart, new_raw_manifests, raw_manifests

__all__ = [
    "ClientSideApply",
    "ClientSideApplyProps",
    "ClientSideApplyResult",
    "RawManifestsChart",
    "client_side_apply",
    "new_client_side_apply",
    "new_raw_manifests",
    "raw_manifests",
]

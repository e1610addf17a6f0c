"""Manifest models, discovery, and bundling."""

from plansmith.manifests.bundler import ManifestBundler, discover, is_local_manifest, normalize
from plansmith.manifests.errors import (
    BundleError,
    ManifestDiscoveryError,
    ManifestError,
    ManifestValidationError,
)
from plansmith.manifests.loader import load_client_manifest, parse_client_manifest, read_envelope
from plansmith.manifests.models import (
    API_VERSION,
    CLIENT_SIDE_APPLY,
    Action,
    ClientSideApplyManifest,
    ClientSideApplySpec,
    ManifestBundle,
    ManifestEnvelope,
    ManifestFile,
    OnFailure,
)

__all__ = [
    "API_VERSION",
    "CLIENT_SIDE_APPLY",
    "Action",
    "BundleError",
    "ClientSideApplyManifest",
    "ClientSideApplySpec",
    "ManifestBundle",
    "ManifestBundler",
    "ManifestDiscoveryError",
    "ManifestEnvelope",
    "ManifestError",
    "ManifestFile",
    "ManifestValidationError",
    "OnFailure",
    "discover",
    "is_local_manifest",
    "load_client_manifest",
    "normalize",
    "parse_client_manifest",
    "read_envelope",
]

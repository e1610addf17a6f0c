"""Read manifest files from disk."""

from __future__ import annotations

from pathlib import Path  # noqa: TC003
from typing import Any

import yaml
from pydantic import ValidationError

from plansmith.manifests.errors import ManifestDiscoveryError, ManifestValidationError
from plansmith.manifests.models import ClientSideApplyManifest, ManifestEnvelope


def read_manifest(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise ManifestDiscoveryError(path, str(exc)) from exc


def first_document(raw: bytes | str) -> Any:
    """Return the first non-empty YAML document in *raw*, or ``None``."""
    for doc in yaml.safe_load_all(raw):
        if doc is not None:
            return doc
    return None


def read_envelope(path: Path) -> ManifestEnvelope | None:
    """Parse only the envelope of the file at *path*.

    Returns ``None`` when the file is not a YAML mapping; such files are
    treated as ordinary cluster resources.

    Raises:
        ManifestDiscoveryError: The file cannot be read.
    """
    raw = read_manifest(path)
    try:
        data = first_document(raw)
    except yaml.YAMLError:
        return None
    if not isinstance(data, dict):
        return None
    try:
        return ManifestEnvelope.model_validate(data)
    except ValidationError:
        return None


def parse_client_manifest(raw: bytes | str, *, path: Path | None = None) -> ClientSideApplyManifest:
    """Parse and validate a full local-execution manifest.

    Raises:
        ManifestValidationError: On YAML errors, a non-mapping document, or
            schema validation failures.
    """
    try:
        data = first_document(raw)
    except yaml.YAMLError as exc:
        raise ManifestValidationError(path, f"YAML parse error: {exc}") from exc
    if not isinstance(data, dict):
        raise ManifestValidationError(path, "manifest must be a mapping")

    try:
        manifest = ClientSideApplyManifest.model_validate(data)
    except ValidationError as exc:
        raise ManifestValidationError(path, str(exc)) from exc
    if not manifest.is_local:
        raise ManifestValidationError(path, f"unexpected envelope {manifest.api_version}/{manifest.kind}")
    return manifest


def load_client_manifest(path: Path) -> ClientSideApplyManifest:
    return parse_client_manifest(read_manifest(path), path=path)

"""Error types for manifest discovery and parsing."""

from __future__ import annotations

from pathlib import Path  # noqa: TC003


class ManifestError(Exception):
    """Base error for manifest failures."""


class ManifestDiscoveryError(ManifestError):
    """The manifest directory or one of its files could not be read."""

    def __init__(self, path: Path, detail: str = "") -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Cannot read {path}" + (f": {detail}" if detail else ""))


class ManifestValidationError(ManifestError):
    """A local-execution manifest is malformed."""

    def __init__(self, path: Path | None, detail: str) -> None:
        self.path = path
        self.detail = detail
        where = f" {path}" if path is not None else ""
        super().__init__(f"Invalid manifest{where}: {detail}")


class BundleError(ManifestError):
    """A bundle does not have the shape its locality requires."""

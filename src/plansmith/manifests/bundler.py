"""ManifestBundler — turns a synthesized manifest directory into bundles.

Files are grouped by directory (directories in lexicographic order, files in
name order). Within a directory, contiguous remote files share a bundle and
every local file gets a bundle of its own. Given one directory holding::

    a.yaml (remote), b.yaml (remote), c.yaml (local), d.yaml (remote), e.yaml (remote)

the result is ``[{a, b}, {c}, {d, e}]``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from pathlib import Path

from plansmith.manifests.errors import ManifestDiscoveryError
from plansmith.manifests.loader import read_envelope
from plansmith.manifests.models import ManifestBundle, ManifestFile

logger = logging.getLogger(__name__)

MANIFEST_SUFFIXES = (".yaml", ".yml")


def is_manifest_file(path: Path) -> bool:
    return path.suffix.lower() in MANIFEST_SUFFIXES


def is_local_manifest(path: Path) -> bool:
    """Classify *path* by its envelope; unparseable files count as remote."""
    envelope = read_envelope(path)
    return envelope is not None and envelope.is_local


class ManifestBundler:
    """Discover and bundle manifests under *root*."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def scan(self) -> dict[Path, list[ManifestFile]]:
        """Map each directory to its manifest files, in name order.

        Raises:
            ManifestDiscoveryError: *root* or a file below it cannot be read.
        """
        if not self.root.is_dir():
            raise ManifestDiscoveryError(self.root, "not a directory")

        def fail(exc: OSError) -> None:
            raise ManifestDiscoveryError(Path(exc.filename or self.root), str(exc)) from exc

        found: dict[Path, list[ManifestFile]] = {}
        for dirpath, dirnames, filenames in os.walk(self.root, onerror=fail):
            dirnames.sort()
            directory = Path(dirpath)
            for filename in sorted(filenames):
                path = directory / filename
                if not is_manifest_file(path) or not path.is_file():
                    continue
                found.setdefault(directory, []).append(ManifestFile(path, is_local_manifest(path)))
        return found

    def discover(self) -> list[ManifestBundle]:
        bundles = normalize(self.root, self.scan())
        logger.debug(
            "Discovered %d bundle(s) under %s (%d local)",
            len(bundles),
            self.root,
            sum(1 for b in bundles if b.is_local),
        )
        return bundles


def normalize(root: Path, groups: Mapping[Path, Sequence[ManifestFile]]) -> list[ManifestBundle]:
    """Split per-directory file lists into locality-homogeneous bundles."""
    bundles: list[ManifestBundle] = []

    def directory_key(directory: Path) -> str:
        try:
            return directory.relative_to(root).as_posix()
        except ValueError:
            return directory.as_posix()

    for directory in sorted(groups, key=directory_key):
        remote: list[ManifestFile] = []
        for manifest in groups[directory]:
            if not manifest.is_local:
                remote.append(manifest)
                continue
            if remote:
                bundles.append(ManifestBundle(root, tuple(remote), is_local=False))
                remote = []
            bundles.append(ManifestBundle(root, (manifest,), is_local=True))
        if remote:
            bundles.append(ManifestBundle(root, tuple(remote), is_local=False))
    return bundles


def discover(root: Path) -> list[ManifestBundle]:
    """Discover the ordered bundles under *root*."""
    return ManifestBundler(root).discover()

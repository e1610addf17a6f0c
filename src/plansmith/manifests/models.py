"""Manifest envelope models.

Every synthesized file is a Kubernetes-style document. Documents with the
reserved envelope below are *local*: they describe a command to run on the
client instead of a resource to send to the cluster.

Example YAML::

    apiVersion: plansmith.dev/v1alpha1
    kind: ClientSideApply
    metadata:
      name: create-cluster
    spec:
      onFailure: abort
      action: kind
      args: [create, cluster, --name, demo]
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

API_VERSION = "plansmith.dev/v1alpha1"
CLIENT_SIDE_APPLY = "ClientSideApply"


class Action(str, Enum):
    """Tools a local manifest may invoke."""

    AWS = "aws"
    CMD = "cmd"
    CRIBCTL = "cribctl"
    DOCKER = "docker"
    HELM = "helm"
    KIND = "kind"
    KUBECTL = "kubectl"
    TASK = "task"
    TELEPRESENCE = "telepresence"


class OnFailure(str, Enum):
    """What the apply loop does when a manifest's action fails."""

    CONTINUE = "continue"
    ABORT = "abort"


class ManifestEnvelope(BaseModel):
    """The minimal header read to classify a document."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    api_version: str = Field(default="", alias="apiVersion")
    kind: str = ""

    @property
    def is_local(self) -> bool:
        return self.api_version == API_VERSION and self.kind == CLIENT_SIDE_APPLY


class ClientSideApplySpec(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    on_failure: OnFailure = Field(alias="onFailure")
    action: Action
    args: list[str] = Field(min_length=1, description="Arguments passed to the action.")


class ClientSideApplyManifest(ManifestEnvelope):
    """A fully parsed local-execution manifest."""

    api_version: str = Field(default=API_VERSION, alias="apiVersion")
    kind: str = CLIENT_SIDE_APPLY
    metadata: dict[str, Any] = Field(default_factory=dict)
    spec: ClientSideApplySpec

    @classmethod
    def build(
        cls,
        action: Action | str,
        args: list[str],
        *,
        on_failure: OnFailure | str = OnFailure.ABORT,
        name: str | None = None,
    ) -> ClientSideApplyManifest:
        metadata = {"name": name} if name else {}
        return cls(
            metadata=metadata,
            spec=ClientSideApplySpec(on_failure=OnFailure(on_failure), action=Action(action), args=list(args)),
        )

    def to_document(self) -> dict[str, Any]:
        """Render as a plain mapping with the wire field names."""
        return self.model_dump(mode="json", by_alias=True)


@dataclass(frozen=True)
class ManifestFile:
    path: Path
    is_local: bool


@dataclass(frozen=True)
class ManifestBundle:
    """A locality-homogeneous, ordered group of manifest files.

    Local bundles always hold exactly one file.
    """

    root: Path
    files: tuple[ManifestFile, ...]
    is_local: bool

    @property
    def paths(self) -> list[Path]:
        return [f.path for f in self.files]

    def client_manifest(self) -> ClientSideApplyManifest:
        """The manifest describing how to apply this bundle.

        A local bundle is its own file, fully parsed. A remote bundle becomes
        a single ``kubectl apply`` of all its files that aborts on failure.

        Raises:
            BundleError: The bundle's shape does not match its locality.
            ManifestValidationError: The local file is malformed.
            ManifestDiscoveryError: The local file cannot be read.
        """
        from plansmith.manifests.errors import BundleError
        from plansmith.manifests.loader import load_client_manifest

        if not self.files:
            raise BundleError(f"bundle under {self.root} contains no manifests")
        if self.is_local:
            if len(self.files) != 1:
                raise BundleError(f"local bundle {self} contains {len(self.files)} manifests, expected 1")
            return load_client_manifest(self.files[0].path)
        return ClientSideApplyManifest.build(
            Action.KUBECTL,
            ["apply", "-f", str(self), "--wait"],
            on_failure=OnFailure.ABORT,
        )

    def __str__(self) -> str:
        return ",".join(str(p) for p in self.paths)

    def __len__(self) -> int:
        return len(self.files)

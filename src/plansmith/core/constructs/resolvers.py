"""Post-processing hooks applied to every manifest document at synthesis.

A resolver receives the rendered document (a plain ``dict``) and may mutate
it in place. Resolvers run in priority order, highest first.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from plansmith.core.identity import DEFAULT, RESOURCE, UNKNOWN, to_dns_label

ResolverFn = Callable[[dict[str, Any]], None]

POD_SPEC_KINDS = frozenset({"Pod", "Job", "CronJob", "Workflow"})
POD_TEMPLATE_KINDS = frozenset({"Deployment", "StatefulSet", "DaemonSet", "DeploymentConfig"})


class ResolutionPriority(IntEnum):
    LOW = 0
    DEFAULT = 10
    HIGH = 100


@dataclass(frozen=True)
class Resolver:
    """A prioritized document hook."""

    fn: ResolverFn
    priority: int = ResolutionPriority.DEFAULT

    def __call__(self, doc: dict[str, Any]) -> None:
        self.fn(doc)


def sort_resolvers(resolvers: Iterable[Resolver | None]) -> list[Resolver]:
    """Return a copy of *resolvers* ordered by descending priority.

    ``None`` entries are dropped; ties keep their declaration order.
    """
    present = [r for r in resolvers if r is not None]
    return sorted(present, key=lambda r: -r.priority)


def name_resolver(doc: dict[str, Any]) -> None:
    """Normalize ``metadata.name`` into a DNS label."""
    metadata = doc.get("metadata")
    if not isinstance(metadata, dict):
        return
    name = metadata.get("name")
    if not isinstance(name, str) or name in (DEFAULT, RESOURCE, UNKNOWN):
        return
    metadata["name"] = to_dns_label(name)


def image_pull_secret_resolver(*secrets: str) -> ResolverFn:
    """Build a resolver adding ``imagePullSecrets`` to pod-bearing resources.

    The secrets must already exist in the cluster or be created by the plan.
    """

    def resolve(doc: dict[str, Any]) -> None:
        if not secrets:
            return
        kind = doc.get("kind")
        spec = doc.get("spec")
        if kind in POD_TEMPLATE_KINDS and isinstance(spec, dict):
            spec = spec.get("template", {}).get("spec")
        elif kind not in POD_SPEC_KINDS:
            return
        if not isinstance(spec, dict):
            return

        existing: list[dict[str, str]] = spec.setdefault("imagePullSecrets", [])
        for secret in secrets:
            entry = {"name": secret}
            if entry not in existing:
                existing.append(entry)

    return resolve

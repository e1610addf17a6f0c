"""RawManifests — emit arbitrary manifest documents as cluster resources."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from plansmith.core.constructs import ApiObject, Chart, Construct
from plansmith.core.errors import ConstructError
from plansmith.core.identity import resource_id

if TYPE_CHECKING:
    from plansmith.core.context import ApplyContext
    from plansmith.core.plan import ComponentFunc


class RawManifestsChart(Chart):
    def __init__(self, scope: Construct, id: str, documents: list[dict[str, Any]]) -> None:
        super().__init__(scope, id)
        self.documents = documents


def new_raw_manifests(scope: Construct, name: str, documents: list[dict[str, Any]]) -> RawManifestsChart:
    """Create a chart with one API object per document.

    Raises:
        ConstructError: A document lacks ``apiVersion`` or ``kind``.
    """
    chart = RawManifestsChart(scope, resource_id(name, documents), documents)
    for index, document in enumerate(documents):
        body = copy.deepcopy(document)
        api_version = body.pop("apiVersion", None)
        kind = body.pop("kind", None)
        if not api_version or not kind:
            raise ConstructError(f"document #{index} of {name!r} needs apiVersion and kind", path=chart.node.path)
        metadata = body.pop("metadata", None) or {}
        object_name = metadata.get("name") or str(index)
        ApiObject(
            chart,
            f"{kind.lower()}-{object_name}",
            api_version=api_version,
            kind=kind,
            metadata={"name": object_name, **metadata},
            **body,
        )
    return chart


def raw_manifests(name: str, *documents: Mapping[str, Any]) -> ComponentFunc:
    """Return a component function emitting *documents* under a chart named *name*."""
    docs = [dict(d) for d in documents]

    def component(ctx: ApplyContext) -> RawManifestsChart:
        if ctx.scope is None:
            raise ConstructError(f"{name} requires a construct scope")
        return new_raw_manifests(ctx.scope, name, docs)

    return component

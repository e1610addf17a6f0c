"""A minimal construct tree: App → Chart → ApiObject.

Components build resources by attaching constructs to a scope. The tree is
later synthesized into one YAML file per resource, one folder per chart::

    app = App(outdir)
    chart = Chart(app, resource_id("my-chart", props), namespace="demo")
    ApiObject(chart, "config", api_version="v1", kind="ConfigMap", data={"k": "v"})
    app.synth()
"""

from __future__ import annotations

import copy
import logging
import re
import shutil
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Any

import yaml

from plansmith.core.constructs.resolvers import Resolver, sort_resolvers
from plansmith.core.errors import ConstructError
from plansmith.core.identity import DEFAULT, RESOURCE, to_dns_label

logger = logging.getLogger(__name__)

PATH_SEPARATOR = "/"
SYNTH_MARKER = ".plansmith"

_CHART_DIR_RE = re.compile(r"^\d{4}-")


class Node:
    """Tree bookkeeping for a single :class:`Construct`."""

    __slots__ = ("_children", "host", "id", "scope")

    def __init__(self, host: Construct, scope: Construct | None, id: str) -> None:
        self.host = host
        self.scope = scope
        self.id = id
        self._children: dict[str, Construct] = {}

    @property
    def path(self) -> str:
        """Ids from the root down to this node, root excluded."""
        ids: list[str] = []
        node: Node = self
        while node.scope is not None:
            ids.append(node.id)
            node = node.scope.node
        return PATH_SEPARATOR.join(reversed(ids))

    @property
    def children(self) -> list[Construct]:
        return list(self._children.values())

    @property
    def root(self) -> Construct:
        node: Node = self
        while node.scope is not None:
            node = node.scope.node
        return node.host

    def try_find_child(self, id: str) -> Construct | None:
        return self._children.get(id)

    def find_all(self) -> list[Construct]:
        """Return this construct and all descendants in pre-order."""
        found: list[Construct] = [self.host]
        for child in self._children.values():
            found.extend(child.node.find_all())
        return found

    def _add_child(self, child: Construct, id: str) -> None:
        if id in self._children:
            raise ConstructError(f"there is already a construct named {id!r}", path=self.path)
        self._children[id] = child


class Construct:
    """Base building block. Every construct except the root has a scope."""

    def __init__(self, scope: Construct | None, id: str) -> None:
        if scope is not None and not id:
            raise ConstructError("only the root construct may have an empty id", path=scope.node.path)
        id = id.replace(PATH_SEPARATOR, "--")
        self.node = Node(self, scope, id)
        if scope is not None:
            scope.node._add_child(self, id)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.node.path or '<root>'!r})"


class Chart(Construct):
    """A group of API objects synthesized into one folder.

    ``namespace`` defaults to the namespace of the nearest enclosing chart.
    """

    def __init__(self, scope: Construct, id: str, *, namespace: str | None = None) -> None:
        super().__init__(scope, id)
        if namespace is None:
            enclosing = _find_chart(scope)
            namespace = enclosing.namespace if enclosing is not None else None
        self.namespace = namespace

    @staticmethod
    def of(construct: Construct) -> Chart:
        """Return the chart that *construct* belongs to."""
        chart = _find_chart(construct)
        if chart is None:
            raise ConstructError("construct is not within a chart", path=construct.node.path)
        return chart

    def api_objects(self) -> list[ApiObject]:
        """API objects owned by this chart, excluding nested charts."""
        found: list[ApiObject] = []
        pending = list(reversed(self.node.children))
        while pending:
            construct = pending.pop()
            if isinstance(construct, Chart):
                continue
            if isinstance(construct, ApiObject):
                found.append(construct)
            pending.extend(reversed(construct.node.children))
        return found

    def to_json(self) -> list[dict[str, Any]]:
        return [obj.to_json() for obj in self.api_objects()]


class ApiObject(Construct):
    """A single Kubernetes-style manifest document."""

    def __init__(
        self,
        scope: Construct,
        id: str,
        *,
        api_version: str,
        kind: str,
        metadata: dict[str, Any] | None = None,
        **body: Any,
    ) -> None:
        super().__init__(scope, id)
        self.api_version = api_version
        self.kind = kind
        self.metadata: dict[str, Any] = dict(metadata or {})
        self.body: dict[str, Any] = body
        self.chart = Chart.of(self)

    @property
    def default_name(self) -> str:
        """``metadata.name`` when none is given; magic ids take the chart's id."""
        if self.node.id in (RESOURCE, DEFAULT):
            return self.chart.node.id
        return self.node.id

    def to_json(self) -> dict[str, Any]:
        metadata: dict[str, Any] = {"name": self.default_name, **copy.deepcopy(self.metadata)}
        if self.chart.namespace and "namespace" not in metadata:
            metadata["namespace"] = self.chart.namespace
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": metadata,
            **copy.deepcopy(self.body),
        }


class App(Construct):
    """Root of the tree; owns the output directory and the resolvers."""

    def __init__(
        self,
        outdir: str | Path | None = None,
        *,
        resolvers: Sequence[Resolver | None] = (),
    ) -> None:
        super().__init__(None, "")
        self.outdir = Path(outdir) if outdir is not None else None
        self.resolvers = sort_resolvers(resolvers)

    def charts(self) -> list[Chart]:
        return [c for c in self.node.find_all() if isinstance(c, Chart)]

    def resolve(self, obj: ApiObject) -> dict[str, Any]:
        """Render *obj* and run every resolver over the document."""
        doc = obj.to_json()
        for resolver in self.resolvers:
            resolver(doc)
        return doc

    def documents(self) -> Iterator[dict[str, Any]]:
        for chart in self.charts():
            for obj in chart.api_objects():
                yield self.resolve(obj)

    def synth_yaml(self) -> str:
        """Render every document as a single multi-document YAML string."""
        return yaml.safe_dump_all(list(self.documents()), sort_keys=False)

    def synth(self) -> list[Path]:
        """Write one folder per chart and one file per API object.

        Folder and file names carry zero-padded indexes so that sorting them
        lexicographically reproduces creation order. Chart folders left by an
        earlier synthesis are replaced; anything else in the directory is
        left alone.

        Raises:
            ConstructError: No outdir is set, or it is a non-empty directory
                that an earlier synthesis did not create.
        """
        if self.outdir is None:
            raise ConstructError("cannot synthesize an app without an outdir")
        self._prepare_outdir(self.outdir)

        written: list[Path] = []
        for chart_idx, chart in enumerate(self.charts()):
            objects = chart.api_objects()
            if not objects:
                continue
            chart_dir = self.outdir / f"{chart_idx:04d}-{to_dns_label(chart.node.id)}"
            chart_dir.mkdir()
            for obj_idx, obj in enumerate(objects):
                doc = self.resolve(obj)
                name = to_dns_label(str(doc.get("metadata", {}).get("name", obj.default_name)))
                path = chart_dir / f"{obj_idx:04d}-{obj.kind.lower()}-{name}.yaml"
                path.write_text(yaml.safe_dump(doc, sort_keys=False), encoding="utf-8")
                written.append(path)

        logger.debug("Synthesized %d manifest(s) into %s", len(written), self.outdir)
        return written

    @staticmethod
    def _prepare_outdir(outdir: Path) -> None:
        if outdir.exists():
            if not outdir.is_dir():
                raise ConstructError(f"outdir {outdir} is not a directory")
            if not (outdir / SYNTH_MARKER).is_file() and any(outdir.iterdir()):
                raise ConstructError(
                    f"refusing to synthesize into {outdir}: directory is not empty and was not created by plansmith"
                )
            for entry in outdir.iterdir():
                if entry.is_dir() and _CHART_DIR_RE.match(entry.name):
                    shutil.rmtree(entry)
        else:
            outdir.mkdir(parents=True)
        (outdir / SYNTH_MARKER).touch()


def _find_chart(construct: Construct | None) -> Chart | None:
    while construct is not None:
        if isinstance(construct, Chart):
            return construct
        construct = construct.node.scope
    return None

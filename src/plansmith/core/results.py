"""ResultIndex — records every unit a plan produced, by resource id.

Units are indexed under their id with the trailing hash removed, so callers
can look results up by the prefix they passed to ``resource_id``. Lookups
return lazy iterators over a snapshot taken under the index lock.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from plansmith.core.constructs.tree import PATH_SEPARATOR
from plansmith.core.identity import extract_resource

if TYPE_CHECKING:
    from plansmith.core.constructs import Construct

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResultNode:
    """One recorded unit and its position in the construct tree."""

    id: str
    parent_id: str
    path: str
    component: Construct


class ResultIndex:
    """Thread-safe index of plan results."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._by_id: dict[str, list[ResultNode]] = {}
        self._ordered: list[ResultNode] = []

    def add(self, unit: Construct | None) -> ResultNode | None:
        """Record *unit*. ``None`` is ignored."""
        if unit is None:
            logger.debug("Skipping empty result unit")
            return None

        path = unit.node.path
        segments = [s for s in path.split(PATH_SEPARATOR) if s]
        parent_id = extract_resource(segments[-2]) if len(segments) >= 2 else ""
        node = ResultNode(
            id=extract_resource(unit.node.id),
            parent_id=parent_id,
            path=path,
            component=unit,
        )
        with self._lock:
            self._by_id.setdefault(node.id, []).append(node)
            self._ordered.append(node)
        return node

    def get(self, id: str) -> Iterator[Construct]:
        """Yield every unit recorded under *id* (hash suffix optional)."""
        with self._lock:
            snapshot = list(self._by_id.get(extract_resource(id), ()))
        for node in snapshot:
            yield node.component

    def components(self) -> Iterator[Construct]:
        """Yield every recorded unit in insertion order."""
        for node in self.nodes():
            yield node.component

    def nodes(self) -> Iterator[ResultNode]:
        with self._lock:
            snapshot = list(self._ordered)
        yield from snapshot

    def ids(self) -> list[str]:
        """Distinct ids in first-insertion order."""
        with self._lock:
            return list(self._by_id)

    def children(self, parent: ResultNode) -> Iterator[ResultNode]:
        for node in self.nodes():
            if node.parent_id and node.parent_id == parent.id:
                yield node

    def root_nodes(self) -> Iterator[ResultNode]:
        for node in self.nodes():
            if not node.parent_id:
                yield node

    def __len__(self) -> int:
        with self._lock:
            return len(self._ordered)

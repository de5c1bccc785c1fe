from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from enum import Enum
from logging import getLogger
from typing import Collection, List, Optional, Tuple, Union

import numpy as np

from ..errors import EmptyGraphError, FocalNotFoundError
from .core import Graph
from .types import NodeKind

logger = getLogger(__name__)


class ViewKind(str, Enum):
    OVERVIEW = "overview"
    ROLE = "role"
    USER = "user"
    STORE = "store"
    MODULE = "module"


@dataclass(frozen=True, slots=True)
class Subgraph:
    """
    Read-only projection of a Graph for one view request.

    `graph` is the induced graph; the remaining fields record the parameters
    that produced it (they take part in the layout fingerprint).
    """

    graph: Graph
    view_kind: ViewKind
    focal_id: Optional[str]
    depth: int
    max_nodes: int
    truncated: bool = False
    exclude_kinds: Tuple[NodeKind, ...] = ()

    @property
    def node_count(self) -> int:
        return self.graph.num_vertices

    @property
    def edge_count(self) -> int:
        return self.graph.num_edges


def select_view(
    graph: Graph,
    view_kind: Union[ViewKind, str],
    focal_id: Optional[str] = None,
    depth: int = 2,
    max_nodes: int = 500,
    *,
    exclude_kinds: Collection[Union[NodeKind, str]] = (),
) -> Subgraph:
    """
    Extract the part of `graph` shown by one view.

    - overview: the whole graph, cut down to the `max_nodes` vertices with the
      highest incident edge weight when it is larger.
    - role/user/store/module: everything within `depth` hops of `focal_id`,
      following edges in both directions, capped at `max_nodes` vertices.

    Nodes whose kind is in `exclude_kinds` are dropped first (the focal node
    is always kept).

    Raises FocalNotFoundError if the focal node is missing and
    EmptyGraphError if nothing is left to show.
    """
    view_kind = ViewKind(view_kind)
    if depth < 1:
        raise ValueError(f"depth must be >= 1, got {depth}")
    if max_nodes < 1:
        raise ValueError(f"max_nodes must be >= 1, got {max_nodes}")

    if view_kind is not ViewKind.OVERVIEW:
        if focal_id is None:
            raise FocalNotFoundError(None)
        if focal_id not in graph:
            raise FocalNotFoundError(focal_id)
    else:
        focal_id = None

    source = _without_kinds(graph, exclude_kinds, keep=focal_id)
    if source.num_vertices == 0:
        raise EmptyGraphError()

    if view_kind is ViewKind.OVERVIEW:
        selected, truncated = _heaviest_vertices(source, max_nodes)
    else:
        focal = source.node(focal_id)
        if focal.kind.value != view_kind.value:
            logger.debug(
                "Focal node %r is a %s, requested %s view",
                focal_id, focal.kind.value, view_kind.value,
            )
        selected, truncated = _expand(source, source.index_of(focal_id), depth, max_nodes)

    if truncated:
        logger.warning(
            "%s view truncated to %d of %d nodes (max_nodes=%d)",
            view_kind.value, len(selected), source.num_vertices, max_nodes,
        )

    sub = source.induced(selected)
    logger.debug(
        "Selected %s view focal=%r depth=%d: %d nodes, %d edges",
        view_kind.value, focal_id, depth, sub.num_vertices, sub.num_edges,
    )
    return Subgraph(
        graph=sub,
        view_kind=view_kind,
        focal_id=focal_id,
        depth=depth,
        max_nodes=max_nodes,
        truncated=truncated,
        exclude_kinds=tuple(sorted({NodeKind(k) for k in exclude_kinds}, key=lambda k: k.value)),
    )


def search_nodes(graph: Graph, query: str) -> List[str]:
    """Ids of nodes whose label contains `query` (case-insensitive), ascending."""
    needle = query.strip().lower()
    if not needle:
        return []
    return [n.id for n in graph.nodes if needle in n.label.lower()]


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _without_kinds(
    graph: Graph,
    exclude_kinds: Collection[Union[NodeKind, str]],
    *,
    keep: Optional[str],
) -> Graph:
    if not exclude_kinds:
        return graph
    excluded = {NodeKind(k) for k in exclude_kinds}
    return graph.induced(
        i for i, n in enumerate(graph.nodes) if n.kind not in excluded or n.id == keep
    )


def _heaviest_vertices(graph: Graph, max_nodes: int) -> Tuple[np.ndarray, bool]:
    """
    All vertices when they fit, else the `max_nodes` with the largest total
    incident weight. Vertex indices follow id order, so a stable sort on
    descending weight breaks ties by id.
    """
    if graph.num_vertices <= max_nodes:
        return np.arange(graph.num_vertices), False

    weights = graph.incident_weights()
    ranked = np.argsort(-weights, kind="stable")
    return np.sort(ranked[:max_nodes]), True


def _expand(graph: Graph, start: int, depth: int, max_nodes: int) -> Tuple[List[int], bool]:
    """
    Breadth-first expansion over both edge directions from `start`, up to
    `depth` hops and `max_nodes` vertices. Neighbors are visited in id order.
    """
    seen = {start}
    order = [start]
    frontier = deque([(start, 0)])

    while frontier:
        vertex, dist = frontier.popleft()
        if dist == depth:
            continue
        neighbors = np.union1d(graph.get_out_neighbors(vertex), graph.get_in_neighbors(vertex))
        for nxt in neighbors:
            nxt = int(nxt)
            if nxt in seen:
                continue
            if len(order) == max_nodes:
                return order, True
            seen.add(nxt)
            order.append(nxt)
            frontier.append((nxt, dist + 1))

    return order, False

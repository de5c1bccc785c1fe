from __future__ import annotations

import heapq
from enum import Enum
from logging import getLogger
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import graphblas as gb
from graphblas import Matrix

from ..errors import DanglingEdgeError, DuplicateNodeError
from .types import Edge, GraphPayload, Node

logger = getLogger(__name__)

# DFS colors
WHITE, GREY, BLACK = 0, 1, 2


class Direction(str, Enum):
    IN = "in"
    OUT = "out"
    BOTH = "both"


def _compressed(keys: np.ndarray, values: np.ndarray, size: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Build CSR-style (indptr, indices) arrays from (key, value) pairs already
    sorted by key then value.
    """
    counts = np.bincount(keys, minlength=size)
    indptr = np.zeros(size + 1, dtype=np.int64)
    np.cumsum(counts, out=indptr[1:])
    indices = np.ascontiguousarray(values, dtype=np.int64)
    indptr.setflags(write=False)
    indices.setflags(write=False)
    return indptr, indices


class Neighbors:
    """
    Adjacent node ids of one vertex, ascending and without duplicates.

    Iterating walks the adjacency arrays lazily; the object can be iterated
    any number of times.
    """

    __slots__ = ("_graph", "_index", "_direction")

    def __init__(self, graph: Graph, vertex_index: int, direction: Direction) -> None:
        self._graph = graph
        self._index = vertex_index
        self._direction = direction

    def _indices(self) -> Iterator[int]:
        if self._direction is Direction.OUT:
            yield from (int(i) for i in self._graph.get_out_neighbors(self._index))
            return
        if self._direction is Direction.IN:
            yield from (int(i) for i in self._graph.get_in_neighbors(self._index))
            return

        last = -1
        for i in heapq.merge(
            self._graph.get_out_neighbors(self._index),
            self._graph.get_in_neighbors(self._index),
        ):
            if i != last:
                yield int(i)
                last = int(i)

    def __iter__(self) -> Iterator[str]:
        ids = self._graph.node_ids
        for i in self._indices():
            yield ids[i]

    def __len__(self) -> int:
        return sum(1 for _ in self._indices())

    def __repr__(self) -> str:
        node_id = self._graph.node_ids[self._index]
        return f"Neighbors({node_id!r}, direction={self._direction.value!r})"


class Graph:
    """
    Immutable directed graph over integer vertex indices.

    Structure:
      - Vertices are 0..num_vertices-1, assigned in ascending id order, so
        comparing indices is the same as comparing ids.
      - Edges: parallel numpy arrays (source index, target index, weight)
        aligned with the `edges` tuple.
      - Adjacency: CSR arrays over the distinct (source, target) pairs, one
        set for outgoing and one for incoming neighbors, each sorted.
      - adjacency: weighted GraphBLAS Matrix[FP64] (num_vertices x
        num_vertices), parallel edges summed. Built on first use.

    Use `Graph.build` (validating) rather than the constructor.
    """

    __slots__ = (
        "_nodes",
        "_ids",
        "_index",
        "_edges",
        "_src",
        "_dst",
        "_weights",
        "_out_ptr",
        "_out_idx",
        "_in_ptr",
        "_in_idx",
        "_adjacency",   # Matrix | None
    )

    # ------------------------------------------------------------------ #
    # Construction
    # ------------------------------------------------------------------ #
    def __init__(self, nodes: Sequence[Node], edges: Sequence[Edge]) -> None:
        """
        nodes: unique, sorted by id.
        edges: endpoints present in `nodes`, sorted by Edge.sort_key.
        """
        self._nodes: Tuple[Node, ...] = tuple(nodes)
        self._ids: Tuple[str, ...] = tuple(n.id for n in self._nodes)
        self._index: Dict[str, int] = {nid: i for i, nid in enumerate(self._ids)}
        self._edges: Tuple[Edge, ...] = tuple(edges)
        self._adjacency: Optional[Matrix] = None

        num_edges = len(self._edges)
        self._src = np.fromiter(
            (self._index[e.source] for e in self._edges), dtype=np.int64, count=num_edges
        )
        self._dst = np.fromiter(
            (self._index[e.target] for e in self._edges), dtype=np.int64, count=num_edges
        )
        self._weights = np.fromiter(
            (e.weight for e in self._edges), dtype=np.float64, count=num_edges
        )
        for arr in (self._src, self._dst, self._weights):
            arr.setflags(write=False)

        size = len(self._ids)
        if num_edges:
            pairs = np.unique(np.stack([self._src, self._dst], axis=1), axis=0)
        else:
            pairs = np.empty((0, 2), dtype=np.int64)

        self._out_ptr, self._out_idx = _compressed(pairs[:, 0], pairs[:, 1], size)
        by_target = np.lexsort((pairs[:, 0], pairs[:, 1]))
        self._in_ptr, self._in_idx = _compressed(
            pairs[by_target, 1], pairs[by_target, 0], size
        )

    @classmethod
    def build(cls, nodes: Iterable[Node], edges: Iterable[Edge]) -> Graph:
        """
        Validate and index a node/edge collection.

        Raises DuplicateNodeError on the first repeated node id and
        DanglingEdgeError on the first edge whose source or target is not a
        node of the graph.
        """
        by_id: Dict[str, Node] = {}
        for node in nodes:
            if node.id in by_id:
                raise DuplicateNodeError(node.id)
            by_id[node.id] = node

        edge_list: List[Edge] = list(edges)
        for edge in edge_list:
            if edge.source not in by_id or edge.target not in by_id:
                raise DanglingEdgeError(edge.source, edge.target)

        edge_list.sort(key=Edge.sort_key)
        graph = cls([by_id[k] for k in sorted(by_id)], edge_list)
        logger.debug("Built %r", graph)
        return graph

    @classmethod
    def from_payload(cls, payload: Union[GraphPayload, Mapping[str, Any]]) -> Graph:
        """Build from the upstream `{nodes, edges}` payload (dict or parsed model)."""
        if not isinstance(payload, GraphPayload):
            payload = GraphPayload.model_validate(payload)
        return cls.build(
            (n.to_node() for n in payload.nodes),
            (e.to_edge() for e in payload.edges),
        )

    # ------------------------------------------------------------------ #
    # Structural accessors
    # ------------------------------------------------------------------ #
    @property
    def num_vertices(self) -> int:
        return len(self._ids)

    @property
    def num_edges(self) -> int:
        return len(self._edges)

    @property
    def nodes(self) -> Tuple[Node, ...]:
        return self._nodes

    @property
    def edges(self) -> Tuple[Edge, ...]:
        return self._edges

    @property
    def node_ids(self) -> Tuple[str, ...]:
        return self._ids

    def node(self, node_id: str) -> Node:
        return self._nodes[self.index_of(node_id)]

    def index_of(self, node_id: str) -> int:
        try:
            return self._index[node_id]
        except KeyError:
            raise KeyError(f"Unknown node id {node_id!r}") from None

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    def edge_arrays(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """(source indices, target indices, weights), aligned with `edges`. Read-only."""
        return self._src, self._dst, self._weights

    def get_out_neighbors(self, vertex_index: int) -> np.ndarray:
        """Distinct successor indices of vertex_index, ascending."""
        return self._out_idx[self._out_ptr[vertex_index]:self._out_ptr[vertex_index + 1]]

    def get_in_neighbors(self, vertex_index: int) -> np.ndarray:
        """Distinct predecessor indices of vertex_index, ascending."""
        return self._in_idx[self._in_ptr[vertex_index]:self._in_ptr[vertex_index + 1]]

    def distinct_pairs(self) -> Tuple[np.ndarray, np.ndarray]:
        """(source, target) index arrays with parallel edges collapsed, sorted by source."""
        sources = np.repeat(np.arange(self.num_vertices, dtype=np.int64), np.diff(self._out_ptr))
        return sources, self._out_idx

    def in_degrees(self) -> np.ndarray:
        """Number of distinct predecessors per vertex."""
        return np.diff(self._in_ptr)

    def neighbors(self, node_id: str, direction: Union[Direction, str] = Direction.BOTH) -> Neighbors:
        """
        Adjacent node ids of node_id in the given direction ("in", "out" or
        "both"). The result is lazy and can be iterated repeatedly.
        """
        return Neighbors(self, self.index_of(node_id), Direction(direction))

    @property
    def adjacency(self) -> Matrix:
        """Weighted adjacency matrix; rows = sources, columns = targets."""
        if self._adjacency is None:
            size = self.num_vertices
            self._adjacency = gb.Matrix.from_coo(
                self._src.copy(),
                self._dst.copy(),
                self._weights.copy(),
                dtype=gb.dtypes.FP64,
                nrows=size,
                ncols=size,
                dup_op=gb.binary.plus,
            )
        return self._adjacency

    def incident_weights(self) -> np.ndarray:
        """
        Total weight of all edges touching each vertex (in + out), as a dense
        float array indexed by vertex.
        """
        totals = np.zeros(self.num_vertices, dtype=np.float64)
        if self.num_edges == 0:
            return totals

        mat = self.adjacency
        out_sums = mat.reduce_rowwise(gb.monoid.plus).new()
        in_sums = mat.reduce_columnwise(gb.monoid.plus).new()
        for vec in (out_sums, in_sums):
            idx, vals = vec.to_coo()
            totals[idx] += vals
        return totals

    # ------------------------------------------------------------------ #
    # Derived graphs / analysis
    # ------------------------------------------------------------------ #
    def induced(self, vertex_indices: Iterable[int]) -> Graph:
        """
        Return the subgraph on the given vertices, with every edge whose
        endpoints are both kept.
        """
        keep = np.zeros(self.num_vertices, dtype=bool)
        keep[np.fromiter(vertex_indices, dtype=np.int64)] = True
        edge_mask = keep[self._src] & keep[self._dst]
        return Graph(
            [self._nodes[int(i)] for i in np.flatnonzero(keep)],
            [self._edges[int(i)] for i in np.flatnonzero(edge_mask)],
        )

    def detect_cycle(self) -> Optional[List[str]]:
        """
        Return the first cycle found as a closed path of node ids
        (``[a, b, c, a]``), or None for an acyclic graph.

        Iterative three-color depth-first search; roots and successors are
        visited in ascending id order, so the result is deterministic.
        """
        color = np.zeros(self.num_vertices, dtype=np.int8)

        for root in range(self.num_vertices):
            if color[root] != WHITE:
                continue

            path: List[int] = [root]
            cursor: List[int] = [0]
            color[root] = GREY

            while path:
                vertex = path[-1]
                successors = self.get_out_neighbors(vertex)
                pos = cursor[-1]

                if pos == len(successors):
                    color[vertex] = BLACK
                    path.pop()
                    cursor.pop()
                    continue

                cursor[-1] = pos + 1
                nxt = int(successors[pos])
                if color[nxt] == GREY:
                    start = path.index(nxt)
                    cycle = [self._ids[i] for i in path[start:]]
                    cycle.append(self._ids[nxt])
                    logger.debug("Cycle detected: %s", cycle)
                    return cycle
                if color[nxt] == WHITE:
                    color[nxt] = GREY
                    path.append(nxt)
                    cursor.append(0)

        return None

    # ------------------------------------------------------------------ #
    # Introspection
    # ------------------------------------------------------------------ #
    def __repr__(self) -> str:
        return f"Graph(num_vertices={self.num_vertices}, num_edges={self.num_edges})"

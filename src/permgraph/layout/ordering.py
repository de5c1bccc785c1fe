from __future__ import annotations

from logging import getLogger
from typing import Dict, List, Mapping

import numpy as np

from ..graph.core import Graph

logger = getLogger(__name__)

# Alternating down/up barycenter sweeps; fixed regardless of graph size.
SWEEPS = 4


def order_layers(graph: Graph, layers: Mapping[str, int]) -> Dict[str, int]:
    """
    Order the nodes inside each layer to reduce edge crossings.

    Starts from every layer sorted by id, then runs SWEEPS barycenter sweeps
    (down, up, down, up). The ordering with the fewest crossings seen,
    including the starting one, is returned as node id -> position.
    """
    layer_of = _layer_array(graph, layers)
    ordering = _baseline(layer_of)
    position = _positions(ordering, graph.num_vertices)

    best = [list(row) for row in ordering]
    best_crossings = _crossings(graph, layer_of, position)
    logger.debug("Baseline ordering has %d crossings", best_crossings)

    for sweep in range(SWEEPS):
        downward = sweep % 2 == 0
        _sweep(graph, layer_of, ordering, position, downward=downward)
        crossings = _crossings(graph, layer_of, position)
        logger.debug(
            "Sweep %d (%s): %d crossings", sweep + 1, "down" if downward else "up", crossings
        )
        if crossings < best_crossings:
            best = [list(row) for row in ordering]
            best_crossings = crossings

    ids = graph.node_ids
    return {ids[v]: pos for row in best for pos, v in enumerate(row)}


def count_crossings(graph: Graph, layers: Mapping[str, int], orders: Mapping[str, int]) -> int:
    """
    Number of crossing edge pairs between adjacent layers, summed over all
    adjacent layer pairs. Edges spanning more than one layer are ignored.
    """
    layer_of = _layer_array(graph, layers)
    position = np.fromiter(
        (orders[nid] for nid in graph.node_ids), dtype=np.int64, count=graph.num_vertices
    )
    return _crossings(graph, layer_of, position)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _layer_array(graph: Graph, layers: Mapping[str, int]) -> np.ndarray:
    return np.fromiter(
        (layers[nid] for nid in graph.node_ids), dtype=np.int64, count=graph.num_vertices
    )


def _baseline(layer_of: np.ndarray) -> List[List[int]]:
    num_layers = int(layer_of.max()) + 1 if len(layer_of) else 0
    ordering: List[List[int]] = [[] for _ in range(num_layers)]
    # vertex indices follow id order
    for vertex, layer in enumerate(layer_of):
        ordering[int(layer)].append(vertex)
    return ordering


def _positions(ordering: List[List[int]], size: int) -> np.ndarray:
    position = np.zeros(size, dtype=np.int64)
    for row in ordering:
        position[row] = np.arange(len(row))
    return position


def _sweep(
    graph: Graph,
    layer_of: np.ndarray,
    ordering: List[List[int]],
    position: np.ndarray,
    *,
    downward: bool,
) -> None:
    """
    One barycenter pass, updating `ordering` and `position` in place.

    Each layer is sorted by the mean position of its neighbors in the layer
    just visited. A node with no such neighbor uses its current position.
    """
    num_layers = len(ordering)
    rows = range(1, num_layers) if downward else range(num_layers - 2, -1, -1)

    for layer in rows:
        ref_layer = layer - 1 if downward else layer + 1
        keys: Dict[int, float] = {}
        for vertex in ordering[layer]:
            if downward:
                adjacent = graph.get_in_neighbors(vertex)
            else:
                adjacent = graph.get_out_neighbors(vertex)
            adjacent = adjacent[layer_of[adjacent] == ref_layer]
            if len(adjacent):
                keys[vertex] = float(position[adjacent].mean())
            else:
                keys[vertex] = float(position[vertex])

        ordering[layer].sort(key=lambda v: (keys[v], v))
        position[ordering[layer]] = np.arange(len(ordering[layer]))


def _crossings(graph: Graph, layer_of: np.ndarray, position: np.ndarray) -> int:
    sources, targets = graph.distinct_pairs()
    if len(sources) == 0:
        return 0

    src_layer = layer_of[sources]
    adjacent = layer_of[targets] - src_layer == 1

    total = 0
    for layer in np.unique(src_layer[adjacent]):
        sel = adjacent & (src_layer == layer)
        total += _inversions(position[sources[sel]], position[targets[sel]])
    return total


def _inversions(upper: np.ndarray, lower: np.ndarray) -> int:
    """
    Count pairs (i, j) with upper[i] < upper[j] and lower[i] > lower[j]
    using a Fenwick tree over `lower` positions.
    """
    order = np.lexsort((lower, upper))
    upper = upper[order]
    lower = lower[order]
    size = int(lower.max()) + 1
    tree = [0] * (size + 1)

    def insert(pos: int) -> None:
        pos += 1
        while pos <= size:
            tree[pos] += 1
            pos += pos & -pos

    def at_most(pos: int) -> int:
        pos += 1
        count = 0
        while pos > 0:
            count += tree[pos]
            pos -= pos & -pos
        return count

    total = 0
    inserted = 0
    start = 0
    n = len(upper)
    while start < n:
        end = start
        while end < n and upper[end] == upper[start]:
            end += 1
        # edges sharing an upper endpoint never cross each other
        for k in range(start, end):
            total += inserted - at_most(int(lower[k]))
        for k in range(start, end):
            insert(int(lower[k]))
            inserted += 1
        start = end
    return total

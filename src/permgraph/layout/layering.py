from __future__ import annotations

import heapq
from logging import getLogger
from typing import Dict

import numpy as np

from ..errors import CyclicGraphError
from ..graph.core import Graph

logger = getLogger(__name__)


def assign_layers(graph: Graph) -> Dict[str, int]:
    """
    Longest-path layering: sources sit on layer 0 and every other node one
    layer below its deepest predecessor, so each edge points strictly
    downwards.

    Raises CyclicGraphError when the graph has a cycle.
    """
    layer_of = layer_array(graph)
    return {nid: int(layer) for nid, layer in zip(graph.node_ids, layer_of)}


def layer_array(graph: Graph) -> np.ndarray:
    """Layer per vertex index (see assign_layers)."""
    cycle = graph.detect_cycle()
    if cycle is not None:
        raise CyclicGraphError(cycle)

    layer_of = np.zeros(graph.num_vertices, dtype=np.int64)
    pending = graph.in_degrees().copy()

    # Kahn's algorithm, always releasing the smallest ready index first.
    ready = [int(i) for i in np.flatnonzero(pending == 0)]
    heapq.heapify(ready)
    while ready:
        vertex = heapq.heappop(ready)
        below = layer_of[vertex] + 1
        for nxt in graph.get_out_neighbors(vertex):
            if layer_of[nxt] < below:
                layer_of[nxt] = below
            pending[nxt] -= 1
            if pending[nxt] == 0:
                heapq.heappush(ready, int(nxt))

    logger.debug(
        "Assigned %d vertices to %d layers",
        graph.num_vertices,
        int(layer_of.max()) + 1 if graph.num_vertices else 0,
    )
    return layer_of

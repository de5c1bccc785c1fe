from __future__ import annotations

import random
from typing import Callable, Iterable, Optional, Sequence, Tuple

import pytest

from permgraph.graph import Edge, EdgeKind, Graph, Node, NodeKind

EdgeSpec = Tuple[str, str]


def build_graph(
    edges: Iterable[EdgeSpec],
    nodes: Optional[Sequence[str]] = None,
    *,
    kind: NodeKind = NodeKind.ROLE,
) -> Graph:
    """Graph with one node per id (default: every edge endpoint) and unit-weight edges."""
    edges = list(edges)
    if nodes is None:
        nodes = sorted({n for e in edges for n in e})
    return Graph.build(
        [Node(n, kind, label=n) for n in nodes],
        [Edge(s, t, EdgeKind.GRANTS) for s, t in edges],
    )


def random_dag(seed: int, size: int = 30, density: float = 0.12) -> Graph:
    """
    Random acyclic graph: ids are shuffled, edges only point forwards in the
    shuffled order, so id order says nothing about the topology.
    """
    rng = random.Random(seed)
    ids = [f"n{i:03d}" for i in range(size)]
    rng.shuffle(ids)
    edges = [
        (ids[i], ids[j])
        for i in range(size)
        for j in range(i + 1, size)
        if rng.random() < density
    ]
    return build_graph(edges, nodes=ids)


@pytest.fixture
def make_graph() -> Callable[..., Graph]:
    return build_graph


@pytest.fixture
def make_random_dag() -> Callable[..., Graph]:
    return random_dag

from __future__ import annotations

import pytest

from permgraph.errors import CyclicGraphError
from permgraph.graph import Graph
from permgraph.layout import assign_layers


def test_longest_path_layers(make_graph) -> None:
    graph = make_graph([("A", "B"), ("B", "C"), ("A", "C")])

    assert assign_layers(graph) == {"A": 0, "B": 1, "C": 2}


def test_cycle_is_reported(make_graph) -> None:
    graph = make_graph([("A", "B"), ("B", "C"), ("C", "A")])

    with pytest.raises(CyclicGraphError) as excinfo:
        assign_layers(graph)

    assert excinfo.value.cycle == ["A", "B", "C", "A"]


def test_components_are_layered_independently(make_graph) -> None:
    graph = make_graph([("a", "b"), ("y", "z"), ("z", "w")], nodes=["a", "b", "x", "y", "z", "w"])

    assert assign_layers(graph) == {"a": 0, "b": 1, "x": 0, "y": 0, "z": 1, "w": 2}


def test_node_sits_below_deepest_predecessor(make_graph) -> None:
    graph = make_graph([("r", "m1"), ("m1", "m2"), ("m2", "m3"), ("r", "s"), ("m3", "s")])

    layers = assign_layers(graph)

    assert layers["s"] == 4


@pytest.mark.parametrize("seed", range(8))
def test_every_edge_points_down(make_random_dag, seed: int) -> None:
    graph = make_random_dag(seed=seed)

    layers = assign_layers(graph)

    assert set(layers) == set(graph.node_ids)
    for edge in graph.edges:
        assert layers[edge.target] > layers[edge.source]
    # sources, and only sources, sit on layer 0
    for node_id in graph.node_ids:
        has_preds = len(graph.neighbors(node_id, "in")) > 0
        assert (layers[node_id] == 0) == (not has_preds)


def test_layering_is_deterministic(make_random_dag) -> None:
    graph = make_random_dag(seed=3, size=80)

    assert assign_layers(graph) == assign_layers(graph)


def test_empty_graph() -> None:
    assert assign_layers(Graph.build([], [])) == {}

from __future__ import annotations

from threading import Thread

import pytest

from permgraph.cache import LayoutCache, fingerprint
from permgraph.config import LayoutSettings
from permgraph.graph import Graph, Node, NodeKind, select_view
from permgraph.layout import BoundingBox, LayoutResult, NodePlacement


def make_result(tag: str) -> LayoutResult:
    return LayoutResult(
        nodes={tag: NodePlacement(layer=0, order=0, x=80.0, y=80.0)},
        edges=(),
        bounding_box=BoundingBox(340.0, 260.0),
    )


def test_round_trip() -> None:
    cache = LayoutCache()
    result = make_result("a")

    cache.put("k", result)

    assert cache.get("k") == result
    assert cache.get("k") is result
    assert cache.hits == 2
    assert cache.misses == 0


def test_miss() -> None:
    cache = LayoutCache()

    assert cache.get("nope") is None
    assert cache.misses == 1
    assert "nope" not in cache


def test_33rd_entry_evicts_least_recently_used() -> None:
    cache = LayoutCache(capacity=32)
    for i in range(33):
        cache.put(f"k{i}", make_result(str(i)))

    assert len(cache) == 32
    assert "k0" not in cache
    assert "k1" in cache
    assert "k32" in cache


def test_get_refreshes_recency() -> None:
    cache = LayoutCache(capacity=32)
    for i in range(32):
        cache.put(f"k{i}", make_result(str(i)))

    cache.get("k0")
    cache.put("k32", make_result("32"))

    assert "k0" in cache
    assert "k1" not in cache


def test_put_refreshes_recency_and_replaces() -> None:
    cache = LayoutCache(capacity=2)
    cache.put("a", make_result("a"))
    cache.put("b", make_result("b"))

    replacement = make_result("a2")
    cache.put("a", replacement)
    cache.put("c", make_result("c"))

    assert "b" not in cache
    assert cache.get("a") is replacement


def test_clear() -> None:
    cache = LayoutCache(capacity=4)
    cache.put("a", make_result("a"))
    cache.get("a")

    cache.clear()

    assert len(cache) == 0
    assert cache.hits == 0


def test_invalid_capacity() -> None:
    with pytest.raises(ValueError):
        LayoutCache(capacity=0)


def test_concurrent_access_stays_bounded() -> None:
    cache = LayoutCache(capacity=8)

    def worker(offset: int) -> None:
        for i in range(200):
            key = f"k{(offset + i) % 20}"
            if cache.get(key) is None:
                cache.put(key, make_result(key))

    threads = [Thread(target=worker, args=(n,)) for n in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(cache) == 8
    assert cache.hits + cache.misses == 800


def test_fingerprint_is_stable(make_graph) -> None:
    graph = make_graph([("a", "b"), ("b", "c")])

    first = fingerprint(select_view(graph, "overview"))
    second = fingerprint(select_view(make_graph([("b", "c"), ("a", "b")]), "overview"))

    assert first == second
    assert len(first) == 64


def test_fingerprint_tracks_view_parameters(make_graph) -> None:
    graph = make_graph([("a", "b"), ("b", "c")])

    keys = {
        fingerprint(select_view(graph, "overview")),
        fingerprint(select_view(graph, "overview", max_nodes=100)),
        fingerprint(select_view(graph, "role", "b", depth=1)),
        fingerprint(select_view(graph, "role", "b", depth=2)),
        fingerprint(select_view(make_graph([("a", "b"), ("a", "c")]), "overview")),
    }

    assert len(keys) == 5


def test_fingerprint_tracks_layout_settings(make_graph) -> None:
    view = select_view(make_graph([("a", "b")]), "overview")

    assert fingerprint(view, LayoutSettings()) != fingerprint(view, LayoutSettings(direction="LR"))
    assert fingerprint(view, LayoutSettings()) == fingerprint(view, LayoutSettings())


def test_fingerprint_tracks_truncation_and_excluded_kinds(make_graph) -> None:
    graph = make_graph([("a", "b"), ("b", "c")])
    with_user = Graph.build(
        list(graph.nodes) + [Node("u", NodeKind.USER)],
        list(graph.edges),
    )

    truncated = select_view(with_user, "overview", max_nodes=3)
    filtered = select_view(with_user, "overview", max_nodes=3, exclude_kinds=["user"])
    exact = select_view(graph, "overview", max_nodes=3)

    assert truncated.graph.node_ids == filtered.graph.node_ids == exact.graph.node_ids
    assert truncated.truncated
    assert len({fingerprint(truncated), fingerprint(filtered), fingerprint(exact)}) == 3

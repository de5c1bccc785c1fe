"""Error hierarchy for graph construction, view selection and layering."""

from __future__ import annotations

from typing import Optional, Sequence


class GraphLayoutError(Exception):
    """Base exception for all permission graph errors."""
    pass


# ─────────────────────────────────────────────────────────────
# Structural errors (raised while building a Graph)
# ─────────────────────────────────────────────────────────────


class StructuralError(GraphLayoutError):
    """The node/edge payload does not describe a valid graph."""
    pass


class DuplicateNodeError(StructuralError):
    def __init__(self, node_id: str) -> None:
        super().__init__(f"Duplicate node id {node_id!r}")
        self.node_id = node_id


class DanglingEdgeError(StructuralError):
    def __init__(self, source: str, target: str) -> None:
        super().__init__(
            f"Edge {source!r} -> {target!r} references a node that does not exist"
        )
        self.source = source
        self.target = target


# ─────────────────────────────────────────────────────────────
# Semantic errors (raised while selecting a view)
# ─────────────────────────────────────────────────────────────


class ViewError(GraphLayoutError):
    """The requested view cannot be produced from the graph."""
    pass


class FocalNotFoundError(ViewError):
    def __init__(self, focal_id: Optional[str]) -> None:
        super().__init__(f"Focal node {focal_id!r} not found in graph")
        self.focal_id = focal_id


class EmptyGraphError(ViewError):
    def __init__(self) -> None:
        super().__init__("Graph has no nodes to lay out")


# ─────────────────────────────────────────────────────────────
# Topological errors (raised before layering)
# ─────────────────────────────────────────────────────────────


class CyclicGraphError(GraphLayoutError):
    def __init__(self, cycle: Sequence[str]) -> None:
        self.cycle = list(cycle)
        super().__init__("Graph contains a cycle: " + " -> ".join(self.cycle))


__all__ = [
    "GraphLayoutError",
    "StructuralError",
    "DuplicateNodeError",
    "DanglingEdgeError",
    "ViewError",
    "FocalNotFoundError",
    "EmptyGraphError",
    "CyclicGraphError",
]

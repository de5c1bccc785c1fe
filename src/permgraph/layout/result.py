"""Immutable layout output handed to the renderer."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from ..graph.types import EdgeKind

Point = Tuple[float, float]


@dataclass(frozen=True, slots=True)
class NodePlacement:
    layer: int
    order: int
    x: float
    y: float


@dataclass(frozen=True, slots=True)
class EdgeRoute:
    source: str
    target: str
    kind: EdgeKind
    points: Tuple[Point, ...]
    is_long_edge: bool = False


@dataclass(frozen=True, slots=True)
class BoundingBox:
    width: float
    height: float


@dataclass(frozen=True, slots=True)
class LayoutResult:
    """
    Positions for every node and a path for every edge of one subgraph.

    Created once per request and never mutated; the mappings are exposed
    read-only.
    """

    nodes: Mapping[str, NodePlacement]
    edges: Tuple[EdgeRoute, ...]
    bounding_box: BoundingBox
    truncated: bool = False
    focal_id: Optional[str] = None
    kind_counts: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "nodes", MappingProxyType(dict(self.nodes)))
        object.__setattr__(self, "edges", tuple(self.edges))
        object.__setattr__(self, "kind_counts", MappingProxyType(dict(self.kind_counts)))

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def to_dict(self) -> Dict[str, Any]:
        """Response shape for the renderer (camelCase keys, nodes sorted by id)."""
        return {
            "nodes": [
                {"id": nid, "layer": p.layer, "order": p.order, "x": p.x, "y": p.y}
                for nid, p in sorted(self.nodes.items())
            ],
            "edges": [
                {
                    "from": e.source,
                    "to": e.target,
                    "kind": e.kind.value,
                    "points": [[x, y] for x, y in e.points],
                    "isLongEdge": e.is_long_edge,
                }
                for e in self.edges
            ],
            "boundingBox": {
                "width": self.bounding_box.width,
                "height": self.bounding_box.height,
            },
            "truncated": self.truncated,
            "nodeCount": self.node_count,
            "edgeCount": self.edge_count,
            "focalId": self.focal_id,
            "kindCounts": dict(sorted(self.kind_counts.items())),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))

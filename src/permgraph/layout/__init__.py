"""
permgraph.layout
================

Layered (rank-based) layout of a subgraph.

Public API:

- assign_layers      : longest-path layer per node.
- order_layers       : barycenter ordering within each layer.
- count_crossings    : adjacent-layer edge crossings of an ordering.
- assign_coordinates : pixel positions, edge paths and bounding box.
- LayoutResult       : immutable output (plus NodePlacement, EdgeRoute, BoundingBox).
"""

from __future__ import annotations

from .layering import assign_layers
from .ordering import order_layers, count_crossings
from .coordinates import assign_coordinates
from .result import LayoutResult, NodePlacement, EdgeRoute, BoundingBox

__all__ = [
    "assign_layers",
    "order_layers",
    "count_crossings",
    "assign_coordinates",
    "LayoutResult",
    "NodePlacement",
    "EdgeRoute",
    "BoundingBox",
]

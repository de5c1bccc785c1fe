try:
    from ._version import version as __version__  # populated by setuptools-scm
except ModuleNotFoundError:
    __version__ = "0.0.0"

from .errors import (
    GraphLayoutError,
    DuplicateNodeError,
    DanglingEdgeError,
    CyclicGraphError,
    FocalNotFoundError,
    EmptyGraphError,
)
from .graph import Graph, Node, Edge, NodeKind, EdgeKind, ViewKind, select_view
from .layout import LayoutResult, assign_layers, order_layers, assign_coordinates
from .cache import LayoutCache, fingerprint
from .service import LayoutService, LayoutRequest

__all__ = [
    "__version__",
    "GraphLayoutError",
    "DuplicateNodeError",
    "DanglingEdgeError",
    "CyclicGraphError",
    "FocalNotFoundError",
    "EmptyGraphError",
    "Graph",
    "Node",
    "Edge",
    "NodeKind",
    "EdgeKind",
    "ViewKind",
    "select_view",
    "LayoutResult",
    "assign_layers",
    "order_layers",
    "assign_coordinates",
    "LayoutCache",
    "fingerprint",
    "LayoutService",
    "LayoutRequest",
]

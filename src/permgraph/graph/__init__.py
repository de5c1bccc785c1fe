"""
permgraph.graph
===============

Graph model + view selection.

Public API:

- Graph         : immutable, index-based directed graph (build, neighbors, detect_cycle).
- Node, Edge    : validated node / edge records.
- NodeKind      : user, role, store, module, screen, permission.
- EdgeKind      : assigned_to, member_of, owns, grants.
- GraphPayload  : pydantic model of the upstream `{nodes, edges}` payload.
- Direction     : neighbor direction (in, out, both).
- ViewKind      : overview, role, user, store, module.
- Subgraph      : the view-scoped projection returned by select_view.
- select_view   : extract the subgraph for a view request.
- search_nodes  : label search over a graph.

All other modules in this package are considered internal implementation details.
"""

from __future__ import annotations

from .types import Node, Edge, NodeKind, EdgeKind, GraphPayload
from .core import Graph, Direction
from .view import ViewKind, Subgraph, select_view, search_nodes

__all__ = [
    "Graph",
    "Node",
    "Edge",
    "NodeKind",
    "EdgeKind",
    "GraphPayload",
    "Direction",
    "ViewKind",
    "Subgraph",
    "select_view",
    "search_nodes",
]

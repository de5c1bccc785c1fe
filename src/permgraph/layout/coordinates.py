from __future__ import annotations

from collections import Counter
from logging import getLogger
from typing import Mapping, Optional

import numpy as np

from ..config import LayoutSettings
from ..graph.core import Graph
from .result import BoundingBox, EdgeRoute, LayoutResult, NodePlacement

logger = getLogger(__name__)


def assign_coordinates(
    graph: Graph,
    layers: Mapping[str, int],
    orders: Mapping[str, int],
    config: Optional[LayoutSettings] = None,
    *,
    truncated: bool = False,
    focal_id: Optional[str] = None,
) -> LayoutResult:
    """
    Turn (layer, order) into pixel positions.

    Layers run along the major axis (`layer * layer_spacing`); inside a layer
    nodes take consecutive slots of `node extent + node_margin` along the
    minor axis, and each layer is centered against the widest one. TB/BT
    stack layers vertically, LR/RL horizontally; BT and RL mirror the major
    axis.

    Node (x, y) is the top-left corner; the drawing is shifted so that every
    node lies `node_margin` inside the bounding box. Edges are straight
    center-to-center segments, flagged as long when they skip a layer.
    """
    config = config or LayoutSettings()
    kind_counts = Counter(n.kind.value for n in graph.nodes)

    if graph.num_vertices == 0:
        return LayoutResult(
            nodes={},
            edges=(),
            bounding_box=BoundingBox(0.0, 0.0),
            truncated=truncated,
            focal_id=focal_id,
            kind_counts=kind_counts,
        )

    ids = graph.node_ids
    size = graph.num_vertices
    layer_of = np.fromiter((layers[nid] for nid in ids), dtype=np.int64, count=size)
    order_of = np.fromiter((orders[nid] for nid in ids), dtype=np.int64, count=size)

    vertical = config.direction in ("TB", "BT")
    minor_extent = config.node_width if vertical else config.node_height
    margin = config.node_margin

    num_layers = int(layer_of.max()) + 1
    layer_sizes = np.bincount(layer_of, minlength=num_layers)
    spans = layer_sizes * minor_extent + np.maximum(layer_sizes - 1, 0) * margin
    offsets = (spans.max() - spans) / 2.0

    minor = offsets[layer_of] + order_of * (minor_extent + margin)
    major = layer_of * config.layer_spacing
    if config.direction in ("BT", "RL"):
        major = (num_layers - 1) * config.layer_spacing - major

    xs, ys = (minor, major) if vertical else (major, minor)
    xs = xs - xs.min() + margin
    ys = ys - ys.min() + margin
    bounding_box = BoundingBox(
        width=float(xs.max() + config.node_width + margin),
        height=float(ys.max() + config.node_height + margin),
    )

    nodes = {
        nid: NodePlacement(
            layer=int(layer_of[i]), order=int(order_of[i]), x=float(xs[i]), y=float(ys[i])
        )
        for i, nid in enumerate(ids)
    }

    cx = xs + config.node_width / 2.0
    cy = ys + config.node_height / 2.0
    sources, targets, _ = graph.edge_arrays()
    edges = tuple(
        EdgeRoute(
            source=edge.source,
            target=edge.target,
            kind=edge.kind,
            points=(
                (float(cx[s]), float(cy[s])),
                (float(cx[t]), float(cy[t])),
            ),
            is_long_edge=bool(layer_of[t] - layer_of[s] > 1),
        )
        for edge, s, t in zip(graph.edges, sources, targets)
    )

    logger.debug(
        "Placed %d nodes on %d layers (%s), bounding box %.0fx%.0f",
        size, num_layers, config.direction, bounding_box.width, bounding_box.height,
    )
    return LayoutResult(
        nodes=nodes,
        edges=edges,
        bounding_box=bounding_box,
        truncated=truncated,
        focal_id=focal_id,
        kind_counts=kind_counts,
    )

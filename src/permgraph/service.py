from __future__ import annotations

from logging import getLogger
from typing import Any, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .cache import LayoutCache, fingerprint
from .config import AppSettings, LayoutSettings, get_settings
from .graph.core import Graph
from .graph.types import GraphPayload, NodeKind, parse_kind
from .graph.view import Subgraph, ViewKind, select_view
from .layout.coordinates import assign_coordinates
from .layout.layering import assign_layers
from .layout.ordering import order_layers
from .layout.result import LayoutResult

logger = getLogger(__name__)


class LayoutRequest(BaseModel):
    """
    One view request. Accepts the renderer's camelCase keys (`viewKind`,
    `focalId`, `maxNodes`, `excludeKinds`) as well as snake_case.

    `depth` / `max_nodes` left as None fall back to the view settings.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        frozen=True,
    )

    view_kind: ViewKind = ViewKind.OVERVIEW
    focal_id: Optional[str] = None
    depth: Optional[int] = Field(default=None, ge=1)
    max_nodes: Optional[int] = Field(default=None, ge=1)
    exclude_kinds: Tuple[NodeKind, ...] = ()

    @field_validator("exclude_kinds", mode="before")
    @classmethod
    def normalise_kinds(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple, set, frozenset)):
            return tuple(parse_kind(v) for v in value)
        return value

    @model_validator(mode="after")
    def check_focal(self) -> LayoutRequest:
        if self.view_kind is not ViewKind.OVERVIEW and self.focal_id is None:
            raise ValueError(f"{self.view_kind.value!r} view requires focalId")
        return self


def compute_layout(view: Subgraph, config: LayoutSettings) -> LayoutResult:
    """Layer, order and place one subgraph. Raises CyclicGraphError."""
    graph = view.graph
    layers = assign_layers(graph)
    orders = order_layers(graph, layers)
    return assign_coordinates(
        graph,
        layers,
        orders,
        config,
        truncated=view.truncated,
        focal_id=view.focal_id,
    )


class LayoutService:
    """
    Entry point for the visualization panels.

    payload -> Graph.build -> select_view -> [cache] -> layers -> ordering
    -> coordinates -> LayoutResult -> [cache]

    The pipeline itself is pure; the cache is the only shared state and may
    be handed to several services.
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        cache: Optional[LayoutCache] = None,
    ) -> None:
        self._settings = settings or get_settings()
        if cache is None and self._settings.cache.enabled:
            cache = LayoutCache(self._settings.cache.capacity)
        self._cache = cache

        logger.info(
            "LayoutService created with direction=%s cache=%r",
            self._settings.layout.direction,
            self._cache,
        )

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    @property
    def settings(self) -> AppSettings:
        return self._settings

    @property
    def cache(self) -> Optional[LayoutCache]:
        return self._cache

    def layout(
        self,
        payload: Union[GraphPayload, Mapping[str, Any]],
        request: Union[LayoutRequest, Mapping[str, Any], None] = None,
    ) -> LayoutResult:
        """
        Build the graph from the upstream payload and lay out the requested
        view. Raises DuplicateNodeError / DanglingEdgeError (payload),
        FocalNotFoundError / EmptyGraphError (view) or CyclicGraphError.
        """
        graph = Graph.from_payload(payload)
        return self.layout_graph(graph, request)

    def layout_graph(
        self,
        graph: Graph,
        request: Union[LayoutRequest, Mapping[str, Any], None] = None,
    ) -> LayoutResult:
        request = self._coerce_request(request)
        view_settings = self._settings.view

        view = select_view(
            graph,
            request.view_kind,
            request.focal_id,
            depth=request.depth or view_settings.default_depth,
            max_nodes=request.max_nodes or view_settings.default_max_nodes,
            exclude_kinds=request.exclude_kinds,
        )

        key = fingerprint(view, self._settings.layout)
        if self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug("Layout cache hit for %s view %s", view.view_kind.value, key[:12])
                return cached

        result = compute_layout(view, self._settings.layout)

        if self._cache is not None:
            self._cache.put(key, result)
        logger.debug(
            "Computed %s view layout: %d nodes, %d edges, truncated=%s",
            view.view_kind.value, result.node_count, result.edge_count, result.truncated,
        )
        return result

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _coerce_request(request: Union[LayoutRequest, Mapping[str, Any], None]) -> LayoutRequest:
        if request is None:
            return LayoutRequest()
        if isinstance(request, LayoutRequest):
            return request
        return LayoutRequest.model_validate(request)

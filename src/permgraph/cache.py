from __future__ import annotations

import hashlib
import json
import time
from collections import OrderedDict
from dataclasses import dataclass
from logging import getLogger
from threading import RLock
from typing import Optional

from .config import LayoutSettings
from .graph.view import Subgraph
from .layout.result import LayoutResult

logger = getLogger(__name__)


def fingerprint(view: Subgraph, layout: Optional[LayoutSettings] = None) -> str:
    """
    Stable SHA-256 over the view parameters (including the excluded kinds
    and whether the selection was truncated) and the subgraph's shape
    (sorted node ids and sorted edge tuples), plus the layout geometry when
    given.

    The fingerprint only reflects what it is given: if the upstream data
    changes, the caller must rebuild the subgraph to get a fresh key.
    """
    graph = view.graph
    key = {
        "view_kind": view.view_kind.value,
        "focal_id": view.focal_id,
        "depth": view.depth,
        "max_nodes": view.max_nodes,
        "exclude_kinds": [kind.value for kind in view.exclude_kinds],
        "truncated": view.truncated,
        # Graph keeps nodes and edges sorted already.
        "nodes": list(graph.node_ids),
        "edges": [list(edge.sort_key()) for edge in graph.edges],
    }
    if layout is not None:
        key["layout"] = layout.model_dump(mode="json")

    canonical = json.dumps(key, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


@dataclass(slots=True)
class CacheEntry:
    fingerprint: str
    result: LayoutResult
    last_used_at: float


class LayoutCache:
    """
    Fixed-capacity LRU cache of completed layouts keyed by fingerprint.

    Both `get` hits and `put` refresh an entry's recency; inserting past
    capacity evicts the least recently used entry. All access goes through
    one lock, so a cache can be shared by concurrent layout calls.
    """

    def __init__(self, capacity: int = 32) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self._capacity = int(capacity)
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = RLock()
        self._hits = 0
        self._misses = 0

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def hits(self) -> int:
        return self._hits

    @property
    def misses(self) -> int:
        return self._misses

    def get(self, key: str) -> Optional[LayoutResult]:
        """Return the cached layout for `key`, or None on a miss."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._misses += 1
                return None
            self._entries.move_to_end(key)
            entry.last_used_at = time.monotonic()
            self._hits += 1
            return entry.result

    def put(self, key: str, result: LayoutResult) -> None:
        with self._lock:
            now = time.monotonic()
            entry = self._entries.get(key)
            if entry is not None:
                entry.result = result
                entry.last_used_at = now
                self._entries.move_to_end(key)
                return

            self._entries[key] = CacheEntry(fingerprint=key, result=result, last_used_at=now)
            while len(self._entries) > self._capacity:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted layout %s from cache", evicted[:12])

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def __contains__(self, key: object) -> bool:
        # Membership does not count as a use.
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __repr__(self) -> str:
        return (
            f"LayoutCache(capacity={self._capacity}, size={len(self)}, "
            f"hits={self._hits}, misses={self._misses})"
        )

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class NodeKind(str, Enum):
    USER = "user"
    ROLE = "role"
    STORE = "store"
    MODULE = "module"
    SCREEN = "screen"
    PERMISSION = "permission"


class EdgeKind(str, Enum):
    ASSIGNED_TO = "assigned_to"
    MEMBER_OF = "member_of"
    OWNS = "owns"
    GRANTS = "grants"


def parse_kind(value: object) -> object:
    # Upstream sends "User", "MemberOf", ...; normalise to the enum values.
    if isinstance(value, str):
        lowered = value.strip()
        out = []
        for i, ch in enumerate(lowered):
            if ch.isupper() and i > 0 and lowered[i - 1].islower():
                out.append("_")
            out.append(ch.lower())
        return "".join(out)
    return value


@dataclass(frozen=True, slots=True)
class Node:
    """A principal in the permission model (user, role, store, ...)."""

    id: str
    kind: NodeKind
    label: str = ""
    attributes: Dict[str, str] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", NodeKind(parse_kind(self.kind)))


@dataclass(frozen=True, slots=True)
class Edge:
    """Directed relationship ``source -> target``."""

    source: str
    target: str
    kind: EdgeKind
    weight: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", EdgeKind(parse_kind(self.kind)))
        if not self.weight >= 0:
            raise ValueError(
                f"Edge {self.source!r} -> {self.target!r} has invalid weight {self.weight}"
            )

    def sort_key(self) -> tuple[str, str, str, float]:
        return (self.source, self.target, self.kind.value, float(self.weight))


# ─────────────────────────────────────────────────────────────
# Upstream payload shape
# ─────────────────────────────────────────────────────────────


class NodePayload(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    kind: NodeKind
    label: str = ""
    attributes: Dict[str, str] = Field(default_factory=dict)

    @field_validator("kind", mode="before")
    @classmethod
    def normalise_kind(cls, value: object) -> object:
        return parse_kind(value)

    def to_node(self) -> Node:
        return Node(self.id, self.kind, self.label, dict(self.attributes))


class EdgePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    source: str = Field(alias="from")
    target: str = Field(alias="to")
    kind: EdgeKind
    weight: float = Field(1.0, ge=0)

    @field_validator("kind", mode="before")
    @classmethod
    def normalise_kind(cls, value: object) -> object:
        return parse_kind(value)

    def to_edge(self) -> Edge:
        return Edge(self.source, self.target, self.kind, self.weight)


class GraphPayload(BaseModel):
    """`{nodes: [...], edges: [...]}` as delivered by the relationship-data provider."""

    nodes: List[NodePayload] = Field(default_factory=list)
    edges: List[EdgePayload] = Field(default_factory=list)

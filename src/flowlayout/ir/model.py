"""Diagram data structures: nodes, edges and projects.

These are the shapes exchanged with the editor and its persistence layer.
The layout engine never mutates them; it returns new instances carrying
fresh positions and handles.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from flowlayout.types import SHAPE_DIMENSIONS, Handle, ShapeType

logger = logging.getLogger(__name__)


@dataclass
class Position:
    x: float = 0.0
    y: float = 0.0


@dataclass
class Node:
    id: str
    type: ShapeType = field(default_factory=ShapeType.default)
    position: Position = field(default_factory=Position)
    label: str = ""
    width: float = 140
    height: float = 80

    @classmethod
    def new(cls, id: str, type: ShapeType, label: str = "") -> Node:
        """Create a node sized from the default dimensions of its shape."""
        width, height = SHAPE_DIMENSIONS[type]
        return cls(id=id, type=type, label=label, width=width, height=height)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "position": {"x": self.position.x, "y": self.position.y},
            "label": self.label,
            "width": self.width,
            "height": self.height,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Node:
        if not isinstance(data, dict):
            raise ValueError(f"node record must be an object, got {type(data).__name__}")
        node_id = data.get("id")
        if node_id is None or node_id == "":
            raise ValueError("node record is missing 'id'")

        raw_type = data.get("type") or ShapeType.default().value
        try:
            shape = ShapeType(raw_type)
        except ValueError:
            raise ValueError(f"node '{node_id}' has unknown type '{raw_type}'") from None

        default_w, default_h = SHAPE_DIMENSIONS[shape]
        pos = data.get("position") or {}
        if not isinstance(pos, dict):
            raise ValueError(f"node '{node_id}' has a non-object 'position'")
        return cls(
            id=str(node_id),
            type=shape,
            position=Position(x=_number(pos, "x", 0.0), y=_number(pos, "y", 0.0)),
            label=str(data.get("label") or ""),
            width=_number(data, "width", default_w),
            height=_number(data, "height", default_h),
        )


@dataclass
class Edge:
    id: str
    source: str
    target: str
    source_handle: Handle | None = None
    target_handle: Handle | None = None
    label: str | None = None
    is_loop: bool = False

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id, "source": self.source, "target": self.target}
        if self.source_handle is not None:
            out["sourceHandle"] = self.source_handle.value
        if self.target_handle is not None:
            out["targetHandle"] = self.target_handle.value
        if self.label is not None:
            out["label"] = self.label
        if self.is_loop:
            out["isLoop"] = True
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Edge:
        if not isinstance(data, dict):
            raise ValueError(f"edge record must be an object, got {type(data).__name__}")
        for key in ("id", "source", "target"):
            if data.get(key) is None or data.get(key) == "":
                raise ValueError(f"edge record is missing '{key}'")
        label = data.get("label")
        return cls(
            id=str(data["id"]),
            source=str(data["source"]),
            target=str(data["target"]),
            source_handle=_handle(data.get("sourceHandle")),
            target_handle=_handle(data.get("targetHandle")),
            label=None if label is None else str(label),
            is_loop=bool(data.get("isLoop", False)),
        )


@dataclass
class Project:
    id: str
    name: str
    nodes: list[Node] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Project:
        """Build a project; a bare ``{nodes, edges}`` object is accepted too."""
        if not isinstance(data, dict):
            raise ValueError(f"project must be an object, got {type(data).__name__}")
        nodes_raw = data.get("nodes") or []
        edges_raw = data.get("edges") or []
        if not isinstance(nodes_raw, list) or not isinstance(edges_raw, list):
            raise ValueError("'nodes' and 'edges' must be lists")
        return cls(
            id=str(data.get("id") or "project"),
            name=str(data.get("name") or "Untitled"),
            nodes=[Node.from_dict(n) for n in nodes_raw],
            edges=[Edge.from_dict(e) for e in edges_raw],
        )


def _number(record: dict[str, Any], key: str, default: float) -> float:
    value = record.get(key)
    if value is None:
        return float(default)
    if isinstance(value, bool):
        raise ValueError(f"'{key}' must be a number, got {value!r}")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            pass
    raise ValueError(f"'{key}' must be a number, got {value!r}")


def _handle(value: Any) -> Handle | None:
    # Handles are recomputed by the layout; unreadable ones are dropped.
    if value is None or isinstance(value, bool):
        return None
    try:
        return Handle(int(value))
    except (TypeError, ValueError):
        logger.debug("ignoring unreadable handle value %r", value)
        return None

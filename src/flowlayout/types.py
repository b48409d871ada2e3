"""Shared type definitions for flowlayout.

Enums and small lookup tables used across the model, layout and CLI.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flowlayout.ir.model import Node, Position


class Orientation(Enum):
    Horizontal = "horizontal"  # layers advance left → right
    Vertical = "vertical"  # layers advance top → bottom

    @classmethod
    def default(cls) -> Orientation:
        return cls.Horizontal

    @classmethod
    def parse(cls, value: str | Orientation) -> Orientation:
        if isinstance(value, Orientation):
            return value
        key = str(value).strip().lower()
        for member in cls:
            if member.value == key:
                return member
        raise ValueError(f"Unknown orientation '{value}'; use horizontal or vertical")


class ShapeType(Enum):
    Process = "Process"
    Decision = "Decision"
    Start = "Start"
    End = "End"
    Email = "Email"

    @classmethod
    def default(cls) -> ShapeType:
        return cls.Process


class Handle(Enum):
    """Side of a node box where an edge attaches."""

    Top = 0
    Right = 1
    Bottom = 2
    Left = 3

    def offset(self, width: float, height: float) -> tuple[float, float]:
        """Attachment point relative to the node's top-left corner."""
        if self is Handle.Top:
            return (width / 2, 0.0)
        if self is Handle.Right:
            return (float(width), height / 2)
        if self is Handle.Bottom:
            return (width / 2, float(height))
        return (0.0, height / 2)

    def anchor(self, node: Node) -> Position:
        """Absolute attachment point of this side on ``node``."""
        from flowlayout.ir.model import Position

        dx, dy = self.offset(node.width, node.height)
        return Position(x=node.position.x + dx, y=node.position.y + dy)


# Default (width, height) per shape, used when a record omits dimensions.
SHAPE_DIMENSIONS: dict[ShapeType, tuple[int, int]] = {
    ShapeType.Process: (140, 80),
    ShapeType.Decision: (140, 100),
    ShapeType.Start: (140, 60),
    ShapeType.End: (140, 60),
    ShapeType.Email: (100, 100),
}

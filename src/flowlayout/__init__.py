"""flowlayout: automatic layered layout for flowchart diagrams."""

from __future__ import annotations

import json
from collections.abc import Sequence

from flowlayout.config import LayoutConfig
from flowlayout.ir.model import Edge, Node, Position, Project
from flowlayout.layout import LayoutResult, full_layout, layout_project
from flowlayout.types import Handle, Orientation, ShapeType


def layout(
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    orientation: str | Orientation = "horizontal",
    config: LayoutConfig | None = None,
) -> LayoutResult:
    """Arrange a diagram into layers and assign edge handles.

    Args:
        nodes: All nodes of one diagram; positions on input are ignored.
        edges: All edges of that diagram; handles on input are ignored.
        orientation: 'horizontal' (left to right) or 'vertical' (top to bottom).
        config: Gap and sweep settings; None uses the defaults.

    Returns:
        A LayoutResult whose ``new_nodes``/``new_edges`` are fresh objects.
        The inputs are not mutated.

    Raises:
        ValueError: If ``orientation`` is unknown.
    """
    return full_layout(nodes, edges, orientation, config)


def layout_json(
    src: str,
    orientation: str | Orientation = "horizontal",
    config: LayoutConfig | None = None,
    indent: int | None = 2,
) -> str:
    """Lay out a project JSON document and return the re-serialised project.

    Raises:
        ValueError: If the document is not valid JSON or a record is malformed.
    """
    try:
        data = json.loads(src)
    except json.JSONDecodeError as e:
        raise ValueError(f"invalid JSON: {e}") from e
    project = Project.from_dict(data)
    arranged = layout_project(project, orientation, config)
    return json.dumps(arranged.to_dict(), indent=indent)


__all__ = [
    "Edge",
    "Handle",
    "LayoutConfig",
    "LayoutResult",
    "Node",
    "Orientation",
    "Position",
    "Project",
    "ShapeType",
    "layout",
    "layout_json",
    "layout_project",
]

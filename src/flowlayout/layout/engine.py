"""Layout engine convenience functions."""

from __future__ import annotations

from collections.abc import Sequence

from flowlayout.config import LayoutConfig
from flowlayout.ir.model import Edge, Node, Project
from flowlayout.layout.sugiyama import SugiyamaLayout
from flowlayout.layout.types import LayoutResult
from flowlayout.types import Orientation


def full_layout(
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    orientation: str | Orientation = Orientation.Horizontal,
    config: LayoutConfig | None = None,
) -> LayoutResult:
    """Run the default (Sugiyama) layout pipeline."""
    engine = SugiyamaLayout(config)
    return engine.layout(nodes, edges, Orientation.parse(orientation))


def auto_layout(
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    orientation: str | Orientation = Orientation.Horizontal,
) -> tuple[list[Node], list[Edge]]:
    """Lay out with default settings, returning (new_nodes, new_edges)."""
    result = full_layout(nodes, edges, orientation)
    return result.new_nodes, result.new_edges


def layout_project(
    project: Project,
    orientation: str | Orientation = Orientation.Horizontal,
    config: LayoutConfig | None = None,
) -> Project:
    """Lay out a project, returning a new project with the same id and name."""
    result = full_layout(project.nodes, project.edges, orientation, config)
    return Project(id=project.id, name=project.name, nodes=result.new_nodes, edges=result.new_edges)

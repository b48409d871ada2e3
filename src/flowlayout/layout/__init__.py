"""Layout engine registry and public API."""

from __future__ import annotations

from flowlayout.layout.engine import auto_layout, full_layout, layout_project
from flowlayout.layout.handles import (
    BACK_EDGE_HANDLES,
    FORWARD_HANDLES,
    SELF_LOOP_HANDLES,
    assign_edge_handles,
    connector_position,
    forward_handles,
)
from flowlayout.layout.sugiyama import (
    NO_NEIGHBOR_POSITION,
    AugmentedGraph,
    LayerAssignment,
    SugiyamaLayout,
    assign_coordinates,
    count_crossings,
    find_back_edges,
    insert_dummy_nodes,
    minimise_crossings,
    node_dimensions,
    remove_cycles,
    stack_fallback,
)
from flowlayout.layout.types import DummyNode, LayoutResult, NodeKey, is_dummy

__all__ = [
    "BACK_EDGE_HANDLES",
    "FORWARD_HANDLES",
    "NO_NEIGHBOR_POSITION",
    "SELF_LOOP_HANDLES",
    "AugmentedGraph",
    "DummyNode",
    "LayerAssignment",
    "LayoutResult",
    "NodeKey",
    "SugiyamaLayout",
    "assign_coordinates",
    "assign_edge_handles",
    "auto_layout",
    "connector_position",
    "count_crossings",
    "find_back_edges",
    "forward_handles",
    "full_layout",
    "insert_dummy_nodes",
    "is_dummy",
    "layout_project",
    "minimise_crossings",
    "node_dimensions",
    "remove_cycles",
    "stack_fallback",
]

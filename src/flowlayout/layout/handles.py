"""Edge handle assignment: which side of each node box an edge attaches to."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import replace

from flowlayout.ir.model import Edge, Node, Position
from flowlayout.types import Handle, Orientation

logger = logging.getLogger(__name__)

# Back-edges return against the flow along the outside of the layers.
BACK_EDGE_HANDLES: dict[Orientation, tuple[Handle, Handle]] = {
    Orientation.Horizontal: (Handle.Bottom, Handle.Bottom),
    Orientation.Vertical: (Handle.Right, Handle.Right),
}

# Along-flow handles for edges whose endpoints line up across the flow.
FORWARD_HANDLES: dict[Orientation, tuple[Handle, Handle]] = {
    Orientation.Horizontal: (Handle.Right, Handle.Left),
    Orientation.Vertical: (Handle.Bottom, Handle.Top),
}

# Self-loops leave on the right and re-enter from the top; renderers key the
# loop geometry off Edge.is_loop.
SELF_LOOP_HANDLES: tuple[Handle, Handle] = (Handle.Right, Handle.Top)


def connector_position(node: Node, handle: Handle) -> Position:
    """Absolute attachment point of ``handle`` on ``node``."""
    return handle.anchor(node)


def forward_handles(source: Node, target: Node, orientation: Orientation, tolerance: float) -> tuple[Handle, Handle]:
    """Pick handles for a forward edge from the endpoints' cross-axis offset."""
    if orientation is Orientation.Horizontal:
        if source.position.y > target.position.y + tolerance:
            return (Handle.Top, Handle.Bottom)
        if source.position.y < target.position.y - tolerance:
            return (Handle.Bottom, Handle.Top)
    else:
        if source.position.x > target.position.x + tolerance:
            return (Handle.Left, Handle.Right)
        if source.position.x < target.position.x - tolerance:
            return (Handle.Right, Handle.Left)
    return FORWARD_HANDLES[orientation]


def assign_edge_handles(
    edges: Sequence[Edge],
    nodes: Mapping[str, Node],
    back_edges: set[tuple[str, str]],
    orientation: Orientation,
    tolerance: float = 10,
) -> list[Edge]:
    """Return new edges with source/target handles derived from final positions.

    Edges whose endpoints are missing from ``nodes`` are copied unchanged.
    """
    result: list[Edge] = []
    for edge in edges:
        source = nodes.get(edge.source)
        target = nodes.get(edge.target)
        if source is None or target is None:
            logger.debug("edge %s left unhandled: endpoint not placed", edge.id)
            result.append(replace(edge))
            continue

        if edge.source == edge.target:
            src_handle, tgt_handle = SELF_LOOP_HANDLES
            result.append(replace(edge, source_handle=src_handle, target_handle=tgt_handle, is_loop=True))
            continue

        if (edge.source, edge.target) in back_edges:
            src_handle, tgt_handle = BACK_EDGE_HANDLES[orientation]
        else:
            src_handle, tgt_handle = forward_handles(source, target, orientation, tolerance)
        result.append(replace(edge, source_handle=src_handle, target_handle=tgt_handle, is_loop=False))

    return result

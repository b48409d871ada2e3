"""Layout types shared across the pipeline stages and callers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import NamedTuple, Union

from flowlayout.ir.model import Edge, Node
from flowlayout.types import Orientation


class DummyNode(NamedTuple):
    """Placeholder for one intermediate layer of a long edge.

    Keyed structurally by the edge it belongs to and its layer, so real ids
    may contain any characters without colliding.
    """

    source: str
    target: str
    layer: int


NodeKey = Union[str, DummyNode]


def is_dummy(key: NodeKey) -> bool:
    return isinstance(key, DummyNode)


@dataclass
class LayoutResult:
    """Self-contained layout output — everything the editor needs."""

    new_nodes: list[Node]
    new_edges: list[Edge]
    orientation: Orientation
    layers: list[list[str]] = field(default_factory=list)
    back_edges: set[tuple[str, str]] = field(default_factory=set)

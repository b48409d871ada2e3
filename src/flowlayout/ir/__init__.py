"""Intermediate representation: diagram model and GraphIR."""

from flowlayout.ir.graph import GraphIR
from flowlayout.ir.model import Edge, Node, Position, Project

__all__ = [
    "Edge",
    "GraphIR",
    "Node",
    "Position",
    "Project",
]

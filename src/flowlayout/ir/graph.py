"""Graph IR — converts diagram nodes/edges into a networkx DiGraph for layout.

This module owns the working graph used by all layout phases. Node and edge
insertion order follows the input lists, which keeps every downstream
traversal deterministic. Edges naming a node id absent from the node list
are left out of the graph.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

import networkx as nx

from flowlayout.ir.model import Edge, Node

logger = logging.getLogger(__name__)


class GraphIR:
    """The graph intermediate representation built from diagram records.

    Wraps a networkx DiGraph whose nodes carry ``data=Node`` and whose edges
    carry ``edges=[Edge, ...]`` (parallel edges share one graph edge).
    """

    def __init__(self, digraph: nx.DiGraph) -> None:
        self.digraph = digraph

    @classmethod
    def from_diagram(cls, nodes: Iterable[Node], edges: Iterable[Edge]) -> GraphIR:
        """Build a GraphIR from node and edge records."""
        digraph: nx.DiGraph = nx.DiGraph()
        for node in nodes:
            if node.id not in digraph:
                digraph.add_node(node.id, data=node)

        for edge in edges:
            if edge.source not in digraph or edge.target not in digraph:
                logger.debug("skipping edge %s: endpoint %s -> %s not found", edge.id, edge.source, edge.target)
                continue
            if digraph.has_edge(edge.source, edge.target):
                digraph.edges[edge.source, edge.target]["edges"].append(edge)
            else:
                digraph.add_edge(edge.source, edge.target, edges=[edge])

        return cls(digraph=digraph)

    def node_count(self) -> int:
        return self.digraph.number_of_nodes()

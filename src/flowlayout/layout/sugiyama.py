"""Sugiyama-style layered graph layout engine.

Phases:
  1. Cycle breaking (depth-first back-edge detection)
  2. Layer assignment (Kahn waves)
  3. Dummy node insertion
  4. Crossing minimization (median barycenter sweeps)
  5. Coordinate assignment
  6. Edge handle assignment (see handles.py)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, replace

import networkx as nx

from flowlayout.config import LayoutConfig
from flowlayout.ir.graph import GraphIR
from flowlayout.ir.model import Edge, Node, Position
from flowlayout.layout.handles import assign_edge_handles
from flowlayout.layout.types import DummyNode, LayoutResult, NodeKey, is_dummy
from flowlayout.types import Orientation

logger = logging.getLogger(__name__)

# Sort key for nodes with no neighbour in the fixed layer: ahead of every
# real median, ties among them kept in their current order.
NO_NEIGHBOR_POSITION: float = -1.0


# ─── Cycle Breaking ──────────────────────────────────────────────────────────


def find_back_edges(graph: nx.DiGraph) -> set[tuple[str, str]]:
    """Return the edges that close a cycle in a DFS rooted in node order.

    An edge is a back-edge when its target is still on the traversal stack.
    Self-loops always qualify.
    """
    back_edges: set[tuple[str, str]] = set()
    visited: set[str] = set()
    on_stack: set[str] = set()

    for root in graph.nodes:
        if root in visited:
            continue
        visited.add(root)
        on_stack.add(root)
        stack = [(root, iter(graph.successors(root)))]
        while stack:
            node, children = stack[-1]
            for child in children:
                if child not in visited:
                    visited.add(child)
                    on_stack.add(child)
                    stack.append((child, iter(graph.successors(child))))
                    break
                if child in on_stack:
                    back_edges.add((node, child))
            else:
                stack.pop()
                on_stack.discard(node)

    return back_edges


def remove_cycles(graph: nx.DiGraph) -> tuple[nx.DiGraph, set[tuple[str, str]]]:
    """Split off back-edges. Returns (dag, back_edges); the input is untouched."""
    back_edges = find_back_edges(graph)

    dag: nx.DiGraph = nx.DiGraph()
    for node_id in graph.nodes:
        dag.add_node(node_id, **graph.nodes[node_id])
    for src, tgt, edge_attrs in graph.edges(data=True):
        if (src, tgt) in back_edges:
            continue
        dag.add_edge(src, tgt, **edge_attrs)

    return dag, back_edges


# ─── Layer Assignment ────────────────────────────────────────────────────────


class LayerAssignment:
    def __init__(self, layers: list[list[str]], ranks: dict[str, int]) -> None:
        self.layers = layers
        self.ranks = ranks

    @property
    def layer_count(self) -> int:
        return len(self.layers)

    def covers(self, graph: nx.DiGraph) -> bool:
        return len(self.ranks) == graph.number_of_nodes()

    @classmethod
    def assign(cls, dag: nx.DiGraph) -> LayerAssignment:
        """Level nodes in waves of zero in-degree.

        A graph with no zero in-degree node yields no layers at all; nodes
        trapped behind a cycle are left unranked.
        """
        in_degree: dict[str, int] = {node_id: dag.in_degree(node_id) for node_id in dag.nodes}
        wave = [node_id for node_id in dag.nodes if in_degree[node_id] == 0]

        layers: list[list[str]] = []
        while wave:
            layers.append(wave)
            next_wave: list[str] = []
            for u in wave:
                for v in dag.successors(u):
                    in_degree[v] -= 1
                    if in_degree[v] == 0:
                        next_wave.append(v)
            wave = next_wave

        ranks = {node_id: idx for idx, layer in enumerate(layers) for node_id in layer}
        return cls(layers=layers, ranks=ranks)


# ─── Dummy Node Insertion ────────────────────────────────────────────────────


@dataclass
class AugmentedGraph:
    graph: nx.DiGraph
    layers: list[list[NodeKey]]
    ranks: dict[NodeKey, int]


def insert_dummy_nodes(dag: nx.DiGraph, la: LayerAssignment) -> AugmentedGraph:
    """Insert dummy nodes so every edge joins adjacent layers."""
    g: nx.DiGraph = nx.DiGraph()
    layers: list[list[NodeKey]] = [list(layer) for layer in la.layers]
    ranks: dict[NodeKey, int] = dict(la.ranks)

    for layer in la.layers:
        for node_id in layer:
            g.add_node(node_id, **dag.nodes[node_id])

    for layer in la.layers:
        for u in layer:
            for v in dag.successors(u):
                u_rank = ranks[u]
                v_rank = ranks.get(v)
                if v_rank is None:
                    continue
                if v_rank - u_rank <= 1:
                    g.add_edge(u, v)
                    continue

                prev: NodeKey = u
                for rank in range(u_rank + 1, v_rank):
                    dummy = DummyNode(u, v, rank)
                    g.add_node(dummy)
                    layers[rank].append(dummy)
                    ranks[dummy] = rank
                    g.add_edge(prev, dummy)
                    prev = dummy
                g.add_edge(prev, v)

    return AugmentedGraph(graph=g, layers=layers, ranks=ranks)


# ─── Crossing Minimization ───────────────────────────────────────────────────


def minimise_crossings(aug: AugmentedGraph, sweeps: int = 4) -> list[list[NodeKey]]:
    """Reorder each layer by the median position of its neighbours.

    Sweeps alternate downward (predecessors) and upward (successors),
    starting downward. Layer membership never changes.
    """
    ordering: list[list[NodeKey]] = [list(layer) for layer in aug.layers]
    layer_count = len(ordering)

    for sweep in range(sweeps):
        if sweep % 2 == 0:
            for layer_idx in range(1, layer_count):
                _reorder(ordering[layer_idx], ordering[layer_idx - 1], aug.graph.predecessors)
        else:
            for layer_idx in range(layer_count - 2, -1, -1):
                _reorder(ordering[layer_idx], ordering[layer_idx + 1], aug.graph.successors)

    return ordering


def _reorder(
    layer: list[NodeKey],
    fixed: Sequence[NodeKey],
    neighbors: Callable[[NodeKey], Iterable[NodeKey]],
) -> None:
    fixed_pos: dict[NodeKey, int] = {nid: i for i, nid in enumerate(fixed)}
    current: dict[NodeKey, int] = {nid: i for i, nid in enumerate(layer)}

    def key(node_id: NodeKey) -> tuple[float, int]:
        positions = [fixed_pos[nb] for nb in neighbors(node_id) if nb in fixed_pos]
        return (_median(positions), current[node_id])

    layer.sort(key=key)


def _median(values: list[int]) -> float:
    if not values:
        return NO_NEIGHBOR_POSITION
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2:
        return float(ordered[mid])
    return (ordered[mid - 1] + ordered[mid]) / 2


def count_crossings(ordering: list[list[NodeKey]], graph: nx.DiGraph) -> int:
    total = 0
    for l_idx in range(len(ordering) - 1):
        tgt_pos: dict[NodeKey, int] = {nid: i for i, nid in enumerate(ordering[l_idx + 1])}
        edges: list[tuple[int, int]] = []
        for sp, src_id in enumerate(ordering[l_idx]):
            if src_id in graph:
                for nb in graph.successors(src_id):
                    if nb in tgt_pos:
                        edges.append((sp, tgt_pos[nb]))
        for i in range(len(edges)):
            for j in range(i + 1, len(edges)):
                ei, ej = edges[i], edges[j]
                if (ei[0] < ej[0] and ei[1] > ej[1]) or (ei[0] > ej[0] and ei[1] < ej[1]):
                    total += 1
    return total


# ─── Coordinate Assignment ───────────────────────────────────────────────────


def node_dimensions(aug: AugmentedGraph, config: LayoutConfig) -> dict[NodeKey, tuple[float, float]]:
    """(width, height) of every working node, dummies included."""
    dims: dict[NodeKey, tuple[float, float]] = {}
    for node_id in aug.graph.nodes:
        if is_dummy(node_id):
            dims[node_id] = (config.dummy_width, config.dummy_height)
            continue
        node: Node | None = aug.graph.nodes[node_id].get("data")
        dims[node_id] = (node.width, node.height) if node is not None else (config.dummy_width, config.dummy_height)
    return dims


def assign_coordinates(
    ordering: list[list[NodeKey]],
    dims: dict[NodeKey, tuple[float, float]],
    orientation: Orientation,
    config: LayoutConfig,
) -> dict[NodeKey, Position]:
    """Assign (x, y) to every node in ``ordering``.

    Layers advance along the flow axis; nodes of one layer stack across it,
    each layer centred against the longest one.
    """
    horizontal = orientation is Orientation.Horizontal
    stack_gap = config.y_gap if horizontal else config.x_gap
    layer_gap = config.x_gap if horizontal else config.y_gap

    def sizes(node_id: NodeKey) -> tuple[float, float]:
        # (thickness along flow, extent across flow)
        width, height = dims.get(node_id, (config.dummy_width, config.dummy_height))
        return (width, height) if horizontal else (height, width)

    extents: list[float] = []
    for layer in ordering:
        total = sum(sizes(nid)[1] for nid in layer)
        extents.append(total + max(0, len(layer) - 1) * stack_gap)
    max_extent = max(extents, default=0)

    positions: dict[NodeKey, Position] = {}
    flow = config.margin
    for layer_idx, layer in enumerate(ordering):
        across = (max_extent - extents[layer_idx]) / 2 + config.margin
        thickness = 0.0
        for node_id in layer:
            along_size, across_size = sizes(node_id)
            if horizontal:
                positions[node_id] = Position(x=flow, y=across)
            else:
                positions[node_id] = Position(x=across, y=flow)
            across += across_size + stack_gap
            thickness = max(thickness, along_size)
        flow += thickness + layer_gap

    return positions


def stack_fallback(nodes: Sequence[Node], config: LayoutConfig) -> list[Node]:
    """Trivial vertical stack used when no layering could be produced."""
    return [
        replace(node, position=Position(x=config.margin, y=config.margin + i * config.fallback_spacing))
        for i, node in enumerate(nodes)
    ]


# ─── SugiyamaLayout Engine ───────────────────────────────────────────────────


class SugiyamaLayout:
    """Sugiyama layered layout engine."""

    def __init__(self, config: LayoutConfig | None = None) -> None:
        self.config = config if config is not None else LayoutConfig()

    def layout(self, nodes: Sequence[Node], edges: Sequence[Edge], orientation: Orientation) -> LayoutResult:
        nodes = list(nodes)
        edges = list(edges)
        if not nodes:
            return LayoutResult(new_nodes=[], new_edges=[], orientation=orientation)

        gir = GraphIR.from_diagram(nodes, edges)
        dag, back_edges = remove_cycles(gir.digraph)
        la = LayerAssignment.assign(dag)
        logger.debug("%d nodes, %d back-edges, %d layers", gir.node_count(), len(back_edges), la.layer_count)

        if not la.layers or not la.covers(dag):
            logger.debug("layering incomplete; falling back to a vertical stack")
            placed = stack_fallback(nodes, self.config)
            new_edges = self._handles(edges, placed, back_edges, orientation)
            return LayoutResult(new_nodes=placed, new_edges=new_edges, orientation=orientation, back_edges=back_edges)

        aug = insert_dummy_nodes(dag, la)
        logger.debug("inserted %d dummy nodes", aug.graph.number_of_nodes() - gir.node_count())
        ordering = minimise_crossings(aug, self.config.sweeps)
        positions = assign_coordinates(ordering, node_dimensions(aug, self.config), orientation, self.config)

        placed = [replace(node, position=replace(positions[node.id])) for node in nodes]
        new_edges = self._handles(edges, placed, back_edges, orientation)
        layers = [[nid for nid in layer if not is_dummy(nid)] for layer in ordering]
        return LayoutResult(
            new_nodes=placed,
            new_edges=new_edges,
            orientation=orientation,
            layers=layers,
            back_edges=back_edges,
        )

    def _handles(
        self,
        edges: list[Edge],
        placed: list[Node],
        back_edges: set[tuple[str, str]],
        orientation: Orientation,
    ) -> list[Edge]:
        node_map = {node.id: node for node in placed}
        return assign_edge_handles(edges, node_map, back_edges, orientation, self.config.handle_tolerance)

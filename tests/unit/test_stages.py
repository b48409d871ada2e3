"""Tests for layout/sugiyama.py — one class per pipeline stage.

Covers:
  - find_back_edges / remove_cycles (cycle breaking)
  - LayerAssignment (Kahn waves, cyclic remainder)
  - insert_dummy_nodes (long-edge chains)
  - minimise_crossings / count_crossings / _median
  - assign_coordinates / node_dimensions / stack_fallback
"""

from __future__ import annotations

import networkx as nx

from flowlayout.config import LayoutConfig
from flowlayout.ir.model import Node
from flowlayout.layout.sugiyama import (
    NO_NEIGHBOR_POSITION,
    AugmentedGraph,
    LayerAssignment,
    _median,
    assign_coordinates,
    count_crossings,
    find_back_edges,
    insert_dummy_nodes,
    minimise_crossings,
    node_dimensions,
    remove_cycles,
    stack_fallback,
)
from flowlayout.layout.types import DummyNode, is_dummy
from flowlayout.types import Orientation

# ─── Helpers ──────────────────────────────────────────────────────────────────


def make_graph(*edges: tuple[str, str]) -> nx.DiGraph:
    """Build a DiGraph from (src, tgt) pairs; node order follows first appearance."""
    g: nx.DiGraph = nx.DiGraph()
    for src, tgt in edges:
        g.add_edge(src, tgt)
    return g


def make_graph_nodes(*nodes: str) -> nx.DiGraph:
    """Build a DiGraph with only nodes (no edges)."""
    g: nx.DiGraph = nx.DiGraph()
    for node in nodes:
        g.add_node(node)
    return g


def make_augmented_graph(edges: list[tuple[str, str]], layers: list[list[str]]) -> AugmentedGraph:
    """Build an AugmentedGraph from explicit layers and adjacent-layer edges."""
    g: nx.DiGraph = nx.DiGraph()
    for layer in layers:
        for nid in layer:
            g.add_node(nid, data=Node(id=nid))
    for src, tgt in edges:
        g.add_edge(src, tgt)
    ranks = {nid: idx for idx, layer in enumerate(layers) for nid in layer}
    return AugmentedGraph(graph=g, layers=[list(layer) for layer in layers], ranks=ranks)


def layered(*edges: tuple[str, str]) -> tuple[nx.DiGraph, LayerAssignment]:
    dag, _ = remove_cycles(make_graph(*edges))
    return dag, LayerAssignment.assign(dag)


# ─── Cycle Breaking ───────────────────────────────────────────────────────────


class TestFindBackEdges:
    def test_dag_has_no_back_edges(self):
        g = make_graph(("A", "B"), ("B", "C"), ("A", "C"))
        assert find_back_edges(g) == set()

    def test_three_cycle_closing_edge(self):
        """A → B → C → A: the edge returning to the DFS root is the back-edge."""
        g = make_graph(("A", "B"), ("B", "C"), ("C", "A"))
        assert find_back_edges(g) == {("C", "A")}

    def test_two_cycle(self):
        g = make_graph(("A", "B"), ("B", "A"))
        assert find_back_edges(g) == {("B", "A")}

    def test_self_loop_is_back_edge(self):
        g = make_graph(("A", "A"))
        assert find_back_edges(g) == {("A", "A")}

    def test_cross_edge_is_not_back_edge(self):
        """C → B reaches an already finished node, which closes no cycle."""
        g = make_graph(("A", "B"), ("A", "C"), ("C", "B"))
        assert find_back_edges(g) == set()

    def test_traversal_follows_node_order(self):
        """The first node in insertion order is the first DFS root."""
        g = make_graph_nodes("B", "A")
        g.add_edge("A", "B")
        g.add_edge("B", "A")
        assert find_back_edges(g) == {("A", "B")}

    def test_repeated_calls_agree(self):
        g = make_graph(("A", "B"), ("B", "C"), ("C", "A"), ("C", "D"), ("D", "B"))
        assert find_back_edges(g) == find_back_edges(g)

    def test_deep_chain_does_not_recurse(self):
        """A 5000-node chain plus a closing edge stays within the stack."""
        ids = [f"n{i}" for i in range(5000)]
        g = make_graph(*zip(ids, ids[1:]), (ids[-1], ids[0]))
        assert find_back_edges(g) == {(ids[-1], ids[0])}


class TestRemoveCycles:
    def test_result_is_dag(self):
        g = make_graph(("A", "B"), ("B", "C"), ("C", "A"), ("D", "B"))
        dag, back_edges = remove_cycles(g)
        assert nx.is_directed_acyclic_graph(dag)
        assert back_edges

    def test_back_edges_removed_not_reversed(self):
        g = make_graph(("A", "B"), ("B", "A"))
        dag, back_edges = remove_cycles(g)
        assert back_edges == {("B", "A")}
        assert list(dag.edges()) == [("A", "B")]

    def test_self_loop_removed_entirely(self):
        g = make_graph(("A", "A"))
        dag, _ = remove_cycles(g)
        assert dag.number_of_edges() == 0
        assert list(dag.nodes) == ["A"]

    def test_input_graph_untouched(self):
        g = make_graph(("A", "B"), ("B", "A"))
        remove_cycles(g)
        assert g.number_of_edges() == 2

    def test_empty_graph(self):
        dag, back_edges = remove_cycles(nx.DiGraph())
        assert dag.number_of_nodes() == 0
        assert back_edges == set()


# ─── Layer Assignment ─────────────────────────────────────────────────────────


class TestLayerAssignment:
    def test_chain(self):
        _, la = layered(("A", "B"), ("B", "C"))
        assert la.layers == [["A"], ["B"], ["C"]]
        assert la.ranks == {"A": 0, "B": 1, "C": 2}

    def test_longest_path_wins(self):
        """A → C directly and via B: C lands below B, not beside it."""
        _, la = layered(("A", "B"), ("B", "C"), ("A", "C"))
        assert la.ranks["C"] == 2

    def test_sources_share_layer_zero(self):
        _, la = layered(("A", "B"), ("C", "D"))
        assert la.layers == [["A", "C"], ["B", "D"]]

    def test_isolated_node_in_layer_zero(self):
        dag = make_graph_nodes("X")
        dag.add_edge("A", "B")
        la = LayerAssignment.assign(dag)
        assert la.layers[0] == ["X", "A"]

    def test_every_node_exactly_once(self):
        dag, la = layered(("A", "B"), ("A", "C"), ("B", "D"), ("C", "D"), ("D", "E"))
        flat = [nid for layer in la.layers for nid in layer]
        assert sorted(flat) == sorted(dag.nodes)
        assert la.covers(dag)

    def test_fully_cyclic_graph_yields_no_layers(self):
        g = make_graph(("A", "B"), ("B", "A"))
        la = LayerAssignment.assign(g)
        assert la.layers == []
        assert la.layer_count == 0
        assert not la.covers(g)

    def test_cycle_behind_entry_left_unranked(self):
        g = make_graph(("C", "A"), ("A", "B"), ("B", "A"))
        la = LayerAssignment.assign(g)
        assert la.layers == [["C"]]
        assert not la.covers(g)


# ─── Dummy Node Insertion ─────────────────────────────────────────────────────


class TestInsertDummyNodes:
    def test_adjacent_edges_pass_through(self):
        dag, la = layered(("A", "B"), ("B", "C"))
        aug = insert_dummy_nodes(dag, la)
        assert not any(is_dummy(n) for n in aug.graph.nodes)
        assert list(aug.graph.edges()) == [("A", "B"), ("B", "C")]

    def test_skip_edge_gets_one_dummy(self):
        dag, la = layered(("A", "B"), ("B", "C"), ("A", "C"))
        aug = insert_dummy_nodes(dag, la)
        dummy = DummyNode("A", "C", 1)
        assert [n for n in aug.graph.nodes if is_dummy(n)] == [dummy]
        assert aug.layers[1] == ["B", dummy]
        assert aug.graph.has_edge("A", dummy)
        assert aug.graph.has_edge(dummy, "C")
        assert not aug.graph.has_edge("A", "C")

    def test_chain_spans_every_intermediate_layer(self):
        dag, la = layered(("A", "B"), ("B", "C"), ("C", "D"), ("A", "D"))
        aug = insert_dummy_nodes(dag, la)
        first, second = DummyNode("A", "D", 1), DummyNode("A", "D", 2)
        assert aug.ranks[first] == 1
        assert aug.ranks[second] == 2
        assert list(aug.graph.successors("A")) == ["B", first]
        assert list(aug.graph.successors(first)) == [second]
        assert list(aug.graph.successors(second)) == ["D"]

    def test_all_working_edges_join_adjacent_layers(self):
        dag, la = layered(("A", "B"), ("B", "C"), ("C", "D"), ("A", "D"), ("B", "D"))
        aug = insert_dummy_nodes(dag, la)
        for src, tgt in aug.graph.edges():
            assert aug.ranks[tgt] - aug.ranks[src] == 1

    def test_dummy_key_survives_separator_characters(self):
        """Ids containing '-' cannot collide with another edge's dummy."""
        dag, la = layered(("a-b", "x"), ("x", "c"), ("a-b", "c"), ("a", "y"), ("y", "b-c"), ("a", "b-c"))
        aug = insert_dummy_nodes(dag, la)
        dummies = [n for n in aug.graph.nodes if is_dummy(n)]
        assert len(dummies) == len(set(dummies)) == 2

    def test_layer_assignment_not_mutated(self):
        dag, la = layered(("A", "B"), ("B", "C"), ("A", "C"))
        insert_dummy_nodes(dag, la)
        assert la.layers == [["A"], ["B"], ["C"]]


# ─── Crossing Minimization ────────────────────────────────────────────────────


class TestMedian:
    def test_empty_uses_sentinel(self):
        assert _median([]) == NO_NEIGHBOR_POSITION == -1.0

    def test_odd(self):
        assert _median([3, 1, 2]) == 2.0

    def test_even_averages_middle_pair(self):
        assert _median([4, 1]) == 2.5

    def test_robust_to_outlier(self):
        assert _median([0, 1, 100]) == 1.0


class TestCountCrossings:
    def test_parallel_edges_do_not_cross(self):
        aug = make_augmented_graph([("A", "C"), ("B", "D")], [["A", "B"], ["C", "D"]])
        assert count_crossings(aug.layers, aug.graph) == 0

    def test_swapped_targets_cross_once(self):
        aug = make_augmented_graph([("A", "D"), ("B", "C")], [["A", "B"], ["C", "D"]])
        assert count_crossings(aug.layers, aug.graph) == 1


class TestMinimiseCrossings:
    def test_removes_simple_crossing(self):
        aug = make_augmented_graph([("A", "D"), ("B", "C")], [["A", "B"], ["C", "D"]])
        ordering = minimise_crossings(aug)
        assert ordering[1] == ["D", "C"]
        assert count_crossings(ordering, aug.graph) == 0

    def test_membership_preserved(self):
        aug = make_augmented_graph(
            [("A", "F"), ("B", "E"), ("C", "D")],
            [["A", "B", "C"], ["D", "E", "F"]],
        )
        ordering = minimise_crossings(aug)
        assert [sorted(layer) for layer in ordering] == [["A", "B", "C"], ["D", "E", "F"]]

    def test_does_not_increase_crossings(self):
        aug = make_augmented_graph(
            [("A", "E"), ("A", "F"), ("B", "D"), ("C", "D"), ("C", "F")],
            [["A", "B", "C"], ["D", "E", "F"]],
        )
        before = count_crossings(aug.layers, aug.graph)
        after = count_crossings(minimise_crossings(aug), aug.graph)
        assert after <= before

    def test_unconnected_nodes_sort_first_in_current_order(self):
        aug = make_augmented_graph([("A", "C")], [["A"], ["C", "X", "Y"]])
        ordering = minimise_crossings(aug, sweeps=1)
        assert ordering[1] == ["X", "Y", "C"]

    def test_input_layers_untouched(self):
        aug = make_augmented_graph([("A", "D"), ("B", "C")], [["A", "B"], ["C", "D"]])
        minimise_crossings(aug)
        assert aug.layers == [["A", "B"], ["C", "D"]]

    def test_zero_sweeps_keeps_order(self):
        aug = make_augmented_graph([("A", "D"), ("B", "C")], [["A", "B"], ["C", "D"]])
        assert minimise_crossings(aug, sweeps=0) == [["A", "B"], ["C", "D"]]

    def test_deterministic(self):
        aug = make_augmented_graph(
            [("A", "E"), ("A", "F"), ("B", "D"), ("C", "D"), ("C", "F")],
            [["A", "B", "C"], ["D", "E", "F"]],
        )
        assert minimise_crossings(aug) == minimise_crossings(aug)


# ─── Coordinate Assignment ────────────────────────────────────────────────────


class TestNodeDimensions:
    def test_real_and_dummy_sizes(self):
        dag, la = layered(("A", "B"), ("B", "C"), ("A", "C"))
        for nid in dag.nodes:
            dag.nodes[nid]["data"] = Node(id=nid, width=100, height=40)
        aug = insert_dummy_nodes(dag, la)
        dims = node_dimensions(aug, LayoutConfig())
        assert dims["A"] == (100, 40)
        assert dims[DummyNode("A", "C", 1)] == (0, 50)


class TestAssignCoordinates:
    def dims(self) -> dict[str, tuple[float, float]]:
        return {"A": (140, 80), "B": (140, 80), "C": (140, 80), "D": (100, 100)}

    def test_horizontal_layers_advance_right(self):
        positions = assign_coordinates([["A"], ["B"]], self.dims(), Orientation.Horizontal, LayoutConfig())
        assert (positions["A"].x, positions["A"].y) == (50, 50)
        assert (positions["B"].x, positions["B"].y) == (390, 50)

    def test_horizontal_stack_and_centering(self):
        positions = assign_coordinates([["A"], ["B", "C"]], self.dims(), Orientation.Horizontal, LayoutConfig())
        # layer 1 spans 80 + 120 + 80 = 280; layer 0 is centred in it
        assert positions["B"].y == 50
        assert positions["C"].y == 250
        assert positions["A"].y == 150

    def test_vertical_swaps_axes(self):
        positions = assign_coordinates([["A"], ["B", "C"]], self.dims(), Orientation.Vertical, LayoutConfig())
        # layer 1 spans 140 + 200 + 140 = 480
        assert (positions["B"].x, positions["B"].y) == (50, 250)
        assert (positions["C"].x, positions["C"].y) == (390, 250)
        assert (positions["A"].x, positions["A"].y) == (220, 50)

    def test_layer_thickness_uses_widest_node(self):
        positions = assign_coordinates([["A", "D"], ["B"]], self.dims(), Orientation.Vertical, LayoutConfig())
        # layer 0 thickness is D's height (100)
        assert positions["B"].y == 50 + 100 + 120

    def test_custom_gaps(self):
        config = LayoutConfig(x_gap=10, y_gap=5, margin=0)
        positions = assign_coordinates([["A", "B"], ["C"]], self.dims(), Orientation.Horizontal, config)
        assert positions["B"].y - (positions["A"].y + 80) == 5
        assert positions["C"].x == 140 + 10

    def test_empty_ordering(self):
        assert assign_coordinates([], {}, Orientation.Horizontal, LayoutConfig()) == {}


class TestStackFallback:
    def test_stacks_in_input_order(self):
        nodes = [Node(id="A"), Node(id="B"), Node(id="C")]
        placed = stack_fallback(nodes, LayoutConfig())
        assert [(n.position.x, n.position.y) for n in placed] == [(50, 50), (50, 200), (50, 350)]

    def test_inputs_untouched(self):
        nodes = [Node(id="A")]
        stack_fallback(nodes, LayoutConfig())
        assert (nodes[0].position.x, nodes[0].position.y) == (0.0, 0.0)

"""Tests for circular dependency detection."""

from depgraph_cli.cycles import find_cycles
from depgraph_cli.models import Cycle, CycleKind, DependencyEdge, GraphSnapshot


def _edges(*pairs):
    return [DependencyEdge(source, target) for source, target in pairs]


def test_two_node_cycle_is_direct():
    cycles = find_cycles(["a", "b"], _edges(("a", "b"), ("b", "a")))

    assert len(cycles) == 1
    assert cycles[0].path == ("a", "b", "a")
    assert cycles[0].length == 2
    assert cycles[0].kind == CycleKind.DIRECT


def test_three_node_cycle_is_indirect():
    cycles = find_cycles(["a", "b", "c"], _edges(("a", "b"), ("b", "c"), ("c", "a")))

    assert len(cycles) == 1
    assert cycles[0].path == ("a", "b", "c", "a")
    assert cycles[0].length == 3
    assert cycles[0].kind == CycleKind.INDIRECT


def test_self_import_is_direct():
    cycles = find_cycles(["a"], _edges(("a", "a")))

    assert [c.path for c in cycles] == [("a", "a")]
    assert cycles[0].length == 1
    assert cycles[0].kind == CycleKind.DIRECT


def test_acyclic_graph_has_no_cycles():
    assert find_cycles(["a", "b", "c"], _edges(("a", "b"), ("b", "c"), ("a", "c"))) == []


def test_cycle_reached_through_tail():
    """Only the looping part of the path is reported."""
    cycles = find_cycles(["entry", "a", "b"], _edges(("entry", "a"), ("a", "b"), ("b", "a")))

    assert [c.path for c in cycles] == [("a", "b", "a")]


def test_every_component_is_explored():
    edges = _edges(("a", "b"), ("b", "a"), ("x", "y"), ("y", "x"))
    cycles = find_cycles(["a", "b", "x", "y"], edges)

    assert [c.path for c in cycles] == [("a", "b", "a"), ("x", "y", "x")]


def test_duplicate_edges_report_once():
    cycles = find_cycles(["a", "b"], _edges(("a", "b"), ("a", "b"), ("b", "a")))

    assert len(cycles) == 1


def test_deep_chain_does_not_recurse():
    names = [f"n{i}" for i in range(5000)]
    edges = _edges(*zip(names, names[1:]), (names[-1], names[0]))
    cycles = find_cycles(names, edges)

    assert len(cycles) == 1
    assert cycles[0].length == 5000


def test_rotations_collapse_in_unique_cycles():
    snapshot = GraphSnapshot(
        root="/",
        nodes={},
        cycles=(Cycle(("a", "b", "a")), Cycle(("b", "a", "b")), Cycle(("c", "d", "e", "c"))),
    )

    assert [c.path for c in snapshot.unique_cycles()] == [("a", "b", "a"), ("c", "d", "e", "c")]

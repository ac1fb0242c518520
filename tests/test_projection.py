"""Tests for the tree projection."""

import pytest

from conftest import make_tree
from errors import UnknownRootError
from family import FamilyTree
from models import ParentRole, Person, Relationship
from projection import assign_generations, order_generations, project
from settings import LayoutSettings


def generations(layout):
    return {n.person_id: n.generation for n in layout.nodes}


def positions(layout):
    return {n.person_id: n.x for n in layout.nodes}


class TestGenerationAssignment:
    def test_parent_and_child(self, tree):
        tree.add_parent_edge("A", "B", ParentRole.FATHER)

        layout = tree.project("A")

        assert generations(layout) == {"A": 0, "B": 1}
        assert [n.person_id for n in layout.generation(0)] == ["A"]
        assert "C" not in layout.person_ids

    def test_married_in_spouse_shares_generation(self, tree):
        # A married B; C is A's child from an earlier relationship
        tree.add_spouse_edge("A", "B")
        tree.add_parent_edge("A", "C", ParentRole.FATHER)

        layout = tree.project("C")

        assert generations(layout) == {"C": 0, "A": -1, "B": -1}

    def test_ancestors_and_collateral_lines(self, three_generations):
        layout = three_generations.project("K1")

        assert generations(layout) == {
            "K1": 0,
            "K2": 0,
            "P": -1,
            "Q": -1,
            "U": -1,
            "G": -2,
            "H": -2,
        }

    def test_first_discovered_generation_wins(self):
        # X is both R's grandchild (via M) and R's spouse
        t = make_tree("R", "M", "X")
        t.add_parent_edge("R", "M", ParentRole.MOTHER)
        t.add_parent_edge("M", "X", ParentRole.MOTHER)
        t.add_spouse_edge("R", "X")

        gens, _ = assign_generations(t.snapshot(), "R")

        # X is reached as R's spouse before M's children are expanded
        assert gens == {"R": 0, "X": 0, "M": 1}

    def test_rerooting_shifts_generations_consistently(self):
        t = make_tree("R", "X", "W", "Y", "Y2")
        t.add_parent_edge("R", "X", ParentRole.FATHER)
        t.add_parent_edge("R", "W", ParentRole.FATHER)
        t.add_parent_edge("X", "Y", ParentRole.MOTHER)
        t.add_parent_edge("X", "Y2", ParentRole.MOTHER)

        from_root = generations(t.project("R"))
        from_child = generations(t.project("X"))

        assert set(from_child) >= {"X", "Y", "Y2"}
        assert set(from_child) == set(from_root)
        for person_id, g in from_child.items():
            assert from_root[person_id] - g == 1

    def test_ordering_follows_discovery_then_creation(self, three_generations):
        snapshot = three_generations.snapshot()
        gens, via = assign_generations(snapshot, "G")

        rows = order_generations(snapshot, gens, via)

        assert rows == {0: ["G", "H"], 1: ["P", "U", "Q"], 2: ["K1", "K2"]}


class TestPositions:
    def test_three_generation_layout(self, three_generations):
        layout = three_generations.project("G")

        assert positions(layout) == {
            "G": 0.0,
            "H": 250.0,
            "P": -250.0,
            "Q": 0.0,
            "U": 500.0,
            "K1": -375.0,
            "K2": 125.0,
        }
        assert [n.y for n in layout.generation(2)] == [700.0, 700.0]

    def test_parents_centred_over_children(self, three_generations):
        xs = positions(three_generations.project("G"))

        couple_centre = (xs["P"] + xs["Q"]) / 2
        assert couple_centre == (xs["K1"] + xs["K2"]) / 2

    def test_single_parent_is_midpoint_of_children(self):
        t = make_tree("M", "C1", "C2", "C3")
        for child in ("C1", "C2", "C3"):
            t.add_parent_edge("M", child, ParentRole.MOTHER)

        xs = positions(t.project("M"))

        assert xs["M"] == 0.0
        assert (xs["C1"], xs["C2"], xs["C3"]) == (-500.0, 0.0, 500.0)

    def test_spouse_gap_smaller_than_node_gap(self, three_generations):
        xs = positions(three_generations.project("G"))

        assert abs(xs["G"] - xs["H"]) == 250.0
        assert abs(xs["P"] - xs["Q"]) == 250.0
        assert abs(xs["Q"] - xs["U"]) == 500.0

    def test_custom_spacing(self, three_generations):
        three_generations.settings = LayoutSettings(node_separation=100, level_separation=80, spouse_separation=40)

        layout = three_generations.project("G")

        assert layout.node_separation == 100
        assert layout.node("K1").y == 160.0
        assert abs(layout.node("G").x - layout.node("H").x) == 40.0

    def test_no_overlap_with_remarriage(self):
        t = FamilyTree()
        t.add_persons(Person(id=i, name=i) for i in ("H", "W1", "W2", "A1", "A2", "B1", "S", "SP", "SK"))
        t.add_spouse_edge("H", "W1")
        t.add_spouse_edge("H", "W2")
        for child in ("A1", "A2"):
            t.add_parent_edge("H", child, ParentRole.FATHER)
            t.add_parent_edge("W1", child, ParentRole.MOTHER)
        t.add_parent_edge("H", "B1", ParentRole.FATHER)
        t.add_parent_edge("W2", "B1", ParentRole.MOTHER)
        # W2 also has a child from another relationship, with a family of their own
        t.add_parent_edge("W2", "S", ParentRole.MOTHER)
        t.add_spouse_edge("S", "SP")
        t.add_parent_edge("S", "SK", ParentRole.FATHER)

        layout = t.project("H")

        for g in {n.generation for n in layout.nodes}:
            xs = sorted(n.x for n in layout.generation(g))
            assert all(b - a >= 250.0 for a, b in zip(xs, xs[1:]))
        gens = generations(layout)
        assert gens["W1"] == gens["W2"] == gens["H"] == 0
        assert gens["SP"] == gens["S"] == 1

    def test_root_is_at_origin(self, three_generations):
        for root in ("G", "Q", "K2", "U"):
            node = three_generations.project(root).node(root)
            assert (node.generation, node.x, node.y) == (0, 0.0, 0.0)


class TestProjectionOutput:
    def test_deterministic(self, three_generations):
        first = three_generations.project("P")
        second = three_generations.project("P")

        assert first == second
        assert repr(first) == repr(second)
        assert project(three_generations.snapshot(), "P", three_generations.settings) == first

    def test_nodes_ordered_by_generation_then_x(self, three_generations):
        layout = three_generations.project("G")

        keys = [(n.generation, n.x) for n in layout.nodes]
        assert keys == sorted(keys)

    def test_unknown_root(self, tree):
        with pytest.raises(UnknownRootError):
            tree.project("nobody")

    def test_unreachable_components_omitted(self, three_generations):
        three_generations.add_person(Person(id="Z2", name="Stranger's spouse"))
        three_generations.add_spouse_edge("Z", "Z2")

        layout = three_generations.project("G")

        assert "Z" not in layout.person_ids
        assert "Z2" not in layout.person_ids
        assert Relationship.spouse("Z", "Z2") not in layout.edges
        assert Relationship.spouse("G", "H") in layout.edges
        assert len(layout.edges) == 10

    def test_isolated_root(self, three_generations):
        layout = three_generations.project("Z")

        assert layout.person_ids == ["Z"]
        assert layout.edges == ()

    def test_projection_does_not_mutate_graph(self, three_generations):
        before = three_generations.snapshot().edges()

        three_generations.project("K1")
        three_generations.project("G")

        assert three_generations.snapshot().edges() == before

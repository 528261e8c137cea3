"""Tests for the editable graph store."""
import pytest

from roomcut.contracts import POINT_MERGE_EPS
from roomcut.graph import Graph, edge_id_for


class TestPoints:
    """Point insertion, dedup and lookup."""

    def test_auto_ids_are_sequential_strings(self):
        graph = Graph()
        assert graph.add_point((0, 0)) == "0"
        assert graph.add_point((1, 0)) == "1"
        assert graph.get_point("1") == (1.0, 0.0)

    def test_auto_ids_skip_taken_ids(self):
        graph = Graph()
        graph.add_point((5, 5), "0")
        assert graph.add_point((6, 6)) == "1"

    def test_near_duplicate_returns_existing_id(self):
        graph = Graph()
        first = graph.add_point((10.0, 10.0))
        again = graph.add_point((10.0 + POINT_MERGE_EPS / 2, 10.0))
        assert again == first
        assert len(graph.points()) == 1

    def test_points_beyond_epsilon_are_distinct(self):
        graph = Graph()
        first = graph.add_point((0.0, 0.0))
        second = graph.add_point((POINT_MERGE_EPS * 3, 0.0))
        assert first != second

    def test_explicit_existing_id_moves_point(self):
        graph = Graph()
        graph.add_point((0, 0), "p")
        assert graph.add_point((4, 4), "p") == "p"
        assert graph.get_point("p") == (4.0, 4.0)
        assert len(graph.points()) == 1

    def test_every_add_bumps_generation(self):
        graph = Graph()
        graph.add_point((0, 0))
        before = graph.generation()
        graph.add_point((0, 0))
        assert graph.generation() > before

    def test_unknown_point_raises_key_error(self):
        graph = Graph()
        with pytest.raises(KeyError):
            graph.get_point("missing")
        with pytest.raises(KeyError):
            graph.set_point("missing", (1, 1))

    def test_set_point_moves_and_bumps(self, unit_square):
        before = unit_square.generation()
        unit_square.set_point("c", (2, 2))
        assert unit_square.get_point("c") == (2.0, 2.0)
        assert unit_square.generation() == before + 1


class TestEdges:
    """Edge identity and mutation."""

    def test_edge_id_is_order_independent(self):
        assert edge_id_for("b", "a") == edge_id_for("a", "b") == "a~b"

    def test_add_edge_is_canonical(self):
        graph = Graph()
        graph.add_point((0, 0), "x")
        graph.add_point((1, 0), "y")
        first = graph.add_edge("y", "x")
        second = graph.add_edge("x", "y")
        assert first == second == "x~y"
        assert graph.edges() == {"x~y": ("x", "y")}

    def test_self_loop_is_ignored(self):
        graph = Graph()
        graph.add_point((0, 0), "x")
        before = graph.generation()
        assert graph.add_edge("x", "x") is None
        assert graph.edges() == {}
        assert graph.generation() == before

    def test_edge_to_unknown_point_raises(self):
        graph = Graph()
        graph.add_point((0, 0), "x")
        with pytest.raises(KeyError):
            graph.add_edge("x", "nope")

    def test_remove_edge(self, unit_square):
        unit_square.remove_edge("a~b")
        assert not unit_square.has_edge("a~b")
        with pytest.raises(KeyError):
            unit_square.remove_edge("a~b")

    def test_edge_segment(self, unit_square):
        assert unit_square.edge_segment("b~c") == ((1.0, 0.0), (1.0, 1.0))

    def test_adjacency_views(self, unit_square):
        assert unit_square.point_to_points()["a"] == {"b", "d"}
        assert unit_square.point_to_edges()["a"] == {"a~b", "a~d"}


class TestViewsAndCopies:
    """Read-only views, clones, subsets and the structural hash."""

    def test_views_are_copies(self, unit_square):
        unit_square.points()["zzz"] = (9.0, 9.0)
        unit_square.edges().clear()
        assert not unit_square.has_point("zzz")
        assert len(unit_square.edges()) == 4

    def test_clone_is_independent(self, unit_square):
        copy = unit_square.clone()
        copy.add_point((0.5, 0.5), "m")
        copy.remove_edge("a~b")
        assert not unit_square.has_point("m")
        assert unit_square.has_edge("a~b")

    def test_subset_keeps_only_boundary(self, grid_graph):
        sub = grid_graph.subset(["a", "b", "e", "d"])
        assert set(sub.points()) == {"a", "b", "d", "e"}
        assert set(sub.edges()) == {"a~b", "b~e", "d~e", "a~d"}

    def test_subset_rejects_short_cycles(self, grid_graph):
        with pytest.raises(ValueError):
            grid_graph.subset(["a", "b"])

    def test_structural_hash_ignores_coordinates(self, unit_square):
        before = unit_square.structural_hash()
        unit_square.set_point("c", (3, 5))
        assert unit_square.structural_hash() == before

    def test_structural_hash_tracks_connectivity(self, unit_square):
        before = unit_square.structural_hash()
        unit_square.add_edge("a", "c")
        assert unit_square.structural_hash() != before


class TestTextForm:
    """encode/decode of the points/edges text form."""

    def test_round_trip(self, grid_graph):
        decoded = Graph.from_text(grid_graph.encode())
        assert decoded.points() == grid_graph.points()
        assert decoded.edges() == grid_graph.edges()

    def test_round_trip_preserves_float_coordinates(self):
        graph = Graph()
        graph.add_point((0.1 + 0.2, 1.0 / 3.0), "p")
        assert Graph.from_text(graph.encode()).get_point("p") == (0.1 + 0.2, 1.0 / 3.0)

    def test_malformed_rows_are_dropped(self):
        text = "\n".join([
            "points",
            "a,0,0",
            "b,1,0",
            "c,not-a-number,0",
            "d,1",
            "e,nan,0",
            "edges",
            "x,a,b",
            "y,a,c",
            "z,a",
        ])
        graph = Graph.from_text(text)
        assert set(graph.points()) == {"a", "b"}
        assert set(graph.edges()) == {"a~b"}

    def test_merged_rows_remap_edges(self):
        text = "points\na,0,0\nb,0.0001,0\nc,5,0\nedges\n1,b,c\n"
        graph = Graph.from_text(text)
        assert set(graph.points()) == {"a", "c"}
        assert set(graph.edges()) == {"a~c"}

    def test_decode_replaces_contents_and_notifies(self, unit_square):
        calls = []
        unit_square.add_listener(lambda: calls.append(unit_square.generation()))
        before = unit_square.generation()
        unit_square.decode("points\nq,0,0\n")
        assert set(unit_square.points()) == {"q"}
        assert unit_square.edges() == {}
        assert calls and calls[0] > before

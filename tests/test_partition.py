"""Tests for cut realization and the room partitioner."""
import logging

import numpy as np
import pytest

from roomcut.partition import (
    CLOCKWISE,
    COUNTERCLOCKWISE,
    create_room_partitioner,
    cut_direction_for_edge,
    generate_random_cuts,
    generate_rooms,
    make_cut,
    point_along_cycle,
    raycast,
    weight_for_region_lookup,
    winding_of_cycle,
)

SQUARE = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]
# Bottom midpoint, right midpoint, left midpoint: a vertical cut then two
# horizontal half-cuts meeting it in the centre.
QUADRANT_CUTS = [0.125, 0.375, 0.875]


class TestBoundaryGeometry:
    def test_point_along_cycle(self):
        point, edge = point_along_cycle(SQUARE, 0.125)
        assert point == pytest.approx((0.5, 0.0))
        assert edge == (SQUARE[0], SQUARE[1])

        point, edge = point_along_cycle(SQUARE, 0.625)
        assert point == pytest.approx((0.5, 1.0))
        assert edge == (SQUARE[2], SQUARE[3])

    def test_offsets_wrap(self):
        base, _ = point_along_cycle(SQUARE, 0.375)
        for t in (1.375, -0.625, 7.375):
            point, _ = point_along_cycle(SQUARE, t)
            assert point == pytest.approx(base)

    def test_winding(self):
        assert winding_of_cycle(SQUARE) == COUNTERCLOCKWISE
        assert winding_of_cycle(list(reversed(SQUARE))) == CLOCKWISE

    def test_cut_direction_points_inward(self):
        bottom = (SQUARE[0], SQUARE[1])
        assert cut_direction_for_edge(bottom, COUNTERCLOCKWISE) == pytest.approx(np.array([0.0, 1.0]))
        reversed_bottom = (SQUARE[1], SQUARE[0])
        assert cut_direction_for_edge(reversed_bottom, CLOCKWISE) == pytest.approx(np.array([0.0, 1.0]))

    def test_degenerate_edge_has_no_direction(self, caplog):
        with caplog.at_level(logging.WARNING, logger="roomcut.partition"):
            assert cut_direction_for_edge(((1, 1), (1, 1)), COUNTERCLOCKWISE) is None
        assert "too short" in caplog.text


class TestRaycast:
    def test_hits_opposite_side(self, unit_square):
        hit = raycast(unit_square, (0.5, 0.0), np.array([0.0, 1.0]), "a~b")
        assert hit is not None
        point, edge_id = hit
        assert point == pytest.approx((0.5, 1.0))
        assert edge_id == "c~d"

    def test_picks_nearest_edge(self, unit_square):
        unit_square.add_point((0.5, 0.2), "p")
        unit_square.add_point((0.5, 0.8), "q")
        unit_square.add_edge("p", "q")
        hit = raycast(unit_square, (0.0, 0.5), np.array([1.0, 0.0]), "a~d")
        assert hit[1] == "p~q"
        assert hit[0] == pytest.approx((0.5, 0.5))

    def test_misses_return_none(self, unit_square):
        assert raycast(unit_square, (0.5, 0.0), np.array([0.0, -1.0]), "a~b") is None


class TestCuts:
    def test_single_cut_halves_the_square(self, unit_square):
        regions, skipped = generate_rooms(unit_square, ["a", "b", "c", "d"], [1, 1], [0.125])
        assert skipped == []
        assert len(regions) == 2
        assert unit_square.has_point("cut0@a~b")
        assert unit_square.has_point("cut0@c~d")

    def test_quadrant_cuts(self, unit_square):
        regions, skipped = generate_rooms(unit_square, ["a", "b", "c", "d"], [1, 1, 1, 1], QUADRANT_CUTS)
        assert skipped == []
        assert len(regions) == 4
        assert all(len(cycle) == 4 for cycle in regions.values())

    def test_cut_that_hits_nothing_is_skipped(self, make_graph, caplog):
        # Only the base of the triangle exists, so the ray finds no far side.
        graph = make_graph(
            {"a": (0, 0), "b": (1, 0), "c": (0.5, 1)},
            [("a", "b")],
        )
        cycle = [graph.get_point(pid) for pid in ("a", "b", "c")]
        with caplog.at_level(logging.WARNING, logger="roomcut.partition"):
            applied = make_cut(graph, cycle, COUNTERCLOCKWISE, 0.1, "cut0")
        assert applied is False
        assert "hit nothing" in caplog.text
        assert set(graph.edges()) == {"a~b"}

    def test_no_weights_means_no_regions(self, unit_square):
        assert generate_rooms(unit_square, ["a", "b", "c", "d"], [], [0.5]) == ({}, [])


class TestPartitioner:
    def test_quadrants_score_the_maximum(self, unit_square):
        run = create_room_partitioner(unit_square, ["a", "b", "c", "d"], [1, 1, 1, 1])
        score, result = run(QUADRANT_CUTS)
        assert score == 200
        assert result.score == 200
        assert result.applied_cuts == 3
        assert sorted(result.region_areas.values()) == pytest.approx([0.25] * 4)

    def test_source_graph_is_untouched(self, unit_square):
        before = unit_square.encode()
        run = create_room_partitioner(unit_square, ["a", "b", "c", "d"], [1, 1])
        run([0.3])
        run([0.7])
        assert unit_square.encode() == before

    def test_single_room_scores_face_as_is(self, unit_square):
        run = create_room_partitioner(unit_square, ["a", "b", "c", "d"], [1])
        score, result = run([])
        assert score == 200
        assert list(result.regions) == ["a,b,c,d"]

    def test_same_parameters_same_result(self, unit_square):
        run = create_room_partitioner(unit_square, ["a", "b", "c", "d"], [2, 1, 1])
        first = run([0.1, 0.6])
        second = run([0.1, 0.6])
        assert first[0] == second[0]
        assert first[1].regions == second[1].regions


class TestPopulationHelpers:
    def test_random_cuts_are_seeded(self):
        first = generate_random_cuts(5, 4, seed=3)
        assert first == generate_random_cuts(5, 4, seed=3)
        assert first != generate_random_cuts(5, 4, seed=4)
        assert len(first) == 5
        assert all(len(individual) == 3 for individual in first)
        assert all(0.0 <= value < 1.0 for individual in first for value in individual)

    def test_random_cuts_edge_cases(self):
        assert generate_random_cuts(0, 4, seed=0) == []
        assert generate_random_cuts(2, 1, seed=0) == [[], []]
        with pytest.raises(ValueError):
            generate_random_cuts(-1, 4, seed=0)

    def test_weight_lookup_pairs_by_rank(self):
        regions = {"small": ["a"], "large": ["b"], "mid": ["c"]}
        areas = {"small": 1.0, "large": 9.0, "mid": 4.0}
        assert weight_for_region_lookup(regions, areas, [1, 3, 2]) == {
            "large": 3,
            "mid": 2,
            "small": 1,
        }

    def test_weight_lookup_truncates(self):
        regions = {"x": ["a"], "y": ["b"]}
        areas = {"x": 1.0, "y": 2.0}
        assert weight_for_region_lookup(regions, areas, [5]) == {"y": 5}

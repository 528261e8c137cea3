"""
Shared test fixtures for the room-cut pipeline tests.
"""
import sys
from pathlib import Path

import pytest

# Add src/ to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from roomcut.graph import Graph


def build_graph(points, edges):
    graph = Graph()
    for point_id, coord in points.items():
        graph.add_point(coord, point_id)
    for point1, point2 in edges:
        graph.add_edge(point1, point2)
    return graph


GRID_TEXT = """points
a,-50,-50
b,0,-50
c,50,-50
d,-50,0
e,0,0
f,50,0
g,-50,50
h,0,50
i,50,50
edges
ab,a,b
bc,b,c
de,d,e
ef,e,f
gh,g,h
hi,h,i
ad,a,d
dg,d,g
be,b,e
eh,e,h
cf,c,f
fi,f,i
"""


@pytest.fixture
def make_graph():
    """Factory: ``make_graph({id: (x, y)}, [(id1, id2), ...])``."""
    return build_graph


@pytest.fixture
def grid_graph():
    """3x3 lattice at +-50 forming four 50x50 cells."""
    return Graph.from_text(GRID_TEXT)


@pytest.fixture
def grid_text():
    return GRID_TEXT


@pytest.fixture
def medians_graph():
    """Outer square through 8 grid points (centre omitted) plus two crossing medians."""
    return build_graph(
        {
            "a": (-50, -50), "b": (0, -50), "c": (50, -50),
            "d": (-50, 0), "f": (50, 0),
            "g": (-50, 50), "h": (0, 50), "i": (50, 50),
        },
        [
            ("a", "b"), ("b", "c"), ("c", "f"), ("f", "i"),
            ("i", "h"), ("h", "g"), ("g", "d"), ("d", "a"),
            ("b", "h"), ("d", "f"),
        ],
    )


@pytest.fixture
def unit_square():
    """Unit square a-b-c-d, counter-clockwise from the origin."""
    return build_graph(
        {"a": (0, 0), "b": (1, 0), "c": (1, 1), "d": (0, 1)},
        [("a", "b"), ("b", "c"), ("c", "d"), ("d", "a")],
    )


@pytest.fixture
def crossed_square():
    """100x100 square with both diagonals drawn (one unresolved crossing)."""
    return build_graph(
        {"a": (0, 0), "b": (100, 0), "c": (100, 100), "d": (0, 100)},
        [("a", "b"), ("b", "c"), ("c", "d"), ("d", "a"), ("a", "c"), ("b", "d")],
    )


@pytest.fixture
def planar_battery(grid_graph):
    """Planar graphs on which both region strategies must agree."""
    house = build_graph(
        {"a": (0, 0), "b": (10, 0), "c": (10, 10), "d": (0, 10), "e": (5, 15)},
        [("a", "b"), ("b", "c"), ("c", "d"), ("d", "a"), ("c", "e"), ("e", "d")],
    )
    dangling = build_graph(
        {"a": (0, 0), "b": (10, 0), "c": (10, 10), "d": (0, 10), "e": (20, 5)},
        [("a", "b"), ("b", "c"), ("c", "d"), ("d", "a"), ("c", "e")],
    )
    two_triangles = build_graph(
        {
            "a": (0, 0), "b": (4, 0), "c": (2, 3),
            "d": (10, 0), "e": (14, 0), "f": (12, 3),
        },
        [("a", "b"), ("b", "c"), ("c", "a"), ("d", "e"), ("e", "f"), ("f", "d")],
    )
    diamond = build_graph(
        {"n": (0, 10), "e": (10, 0), "s": (0, -10), "w": (-10, 0), "o": (0, 0)},
        [
            ("n", "e"), ("e", "s"), ("s", "w"), ("w", "n"),
            ("o", "n"), ("o", "e"), ("o", "s"), ("o", "w"),
        ],
    )
    nested = build_graph(
        {
            "a": (0, 0), "b": (10, 0), "c": (10, 10), "d": (0, 10),
            "p": (3, 3), "q": (6, 3), "r": (6, 6), "s": (3, 6),
        },
        [
            ("a", "b"), ("b", "c"), ("c", "d"), ("d", "a"),
            ("p", "q"), ("q", "r"), ("r", "s"), ("s", "p"),
        ],
    )
    return {
        "grid": grid_graph,
        "nested": nested,
        "house": house,
        "dangling": dangling,
        "two_triangles": two_triangles,
        "diamond": diamond,
    }

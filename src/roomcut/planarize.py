"""
Crossing resolution for editable graphs.

Repeatedly finds the first pair of edges (ascending edge id) whose segments
cross somewhere other than a shared endpoint, materializes the crossing as
a point and splits both host edges through it. The scan restarts after
every split and stops once a full pass finds nothing, or after
``max_iterations`` splits.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Set, Tuple

from shapely.geometry import LineString, Point

from roomcut.contracts import POINT_MERGE_EPS, EdgeId, PointId, Vec2
from roomcut.graph import Graph

logger = logging.getLogger(__name__)


@dataclass
class PlanarizeConfig:
    """Configuration for crossing resolution."""
    max_iterations: int = 1000
    min_edge_length: float = POINT_MERGE_EPS


def _close(a: Vec2, b: Vec2, eps: float) -> bool:
    return math.hypot(a[0] - b[0], a[1] - b[1]) <= eps


def segment_crossing(
    a1: Vec2, a2: Vec2, b1: Vec2, b2: Vec2, eps: float = POINT_MERGE_EPS,
) -> Optional[Vec2]:
    """Crossing point of two segments, or ``None``.

    Touches where the crossing coincides with an endpoint of *both*
    segments are not crossings. Collinear overlaps are ignored.
    """
    line_a = LineString([a1, a2])
    line_b = LineString([b1, b2])
    if not line_a.intersects(line_b):
        return None

    hit = line_a.intersection(line_b)
    if hit.geom_type != "Point":
        logger.debug("Ignoring non-point overlap %s between %s and %s", hit.geom_type, line_a, line_b)
        return None

    point = (float(hit.x), float(hit.y))
    at_a_end = _close(point, a1, eps) or _close(point, a2, eps)
    at_b_end = _close(point, b1, eps) or _close(point, b2, eps)
    if at_a_end and at_b_end:
        return None
    return point


def split_edge(graph: Graph, edge_id: EdgeId, point_id: PointId) -> List[EdgeId]:
    """Replace ``edge_id`` with two edges meeting at ``point_id``.

    Splitting at one of the edge's own endpoints leaves the graph unchanged,
    so callers can split every candidate edge of a snap target blindly.
    Returns the ids of the edges now covering the original span.
    """
    point1, point2 = graph.get_edge(edge_id)
    graph.get_point(point_id)
    if point_id in (point1, point2):
        return [edge_id]

    graph.remove_edge(edge_id)
    return [
        graph.add_edge(point1, point_id),
        graph.add_edge(point_id, point2),
    ]


def _point_segment_projection(point: Vec2, a: Vec2, b: Vec2) -> Tuple[Vec2, float, float]:
    """Closest point on segment ab, its distance from ``point`` and its fraction along ab."""
    segment = LineString([a, b])
    if segment.length == 0.0:
        return a, math.hypot(point[0] - a[0], point[1] - a[1]), 0.0
    along = segment.project(Point(point))
    closest = segment.interpolate(along)
    projected = (float(closest.x), float(closest.y))
    distance = math.hypot(point[0] - projected[0], point[1] - projected[1])
    return projected, distance, along / segment.length


def find_edges_split_by_point(
    graph: Graph, point: Vec2, tolerance: float = POINT_MERGE_EPS,
) -> List[EdgeId]:
    """Edges whose interior (not an endpoint) passes within ``tolerance`` of a point."""
    result = []
    for edge_id in sorted(graph.edges()):
        a, b = graph.edge_segment(edge_id)
        if _close(point, a, tolerance) or _close(point, b, tolerance):
            continue
        _, distance, _ = _point_segment_projection(point, a, b)
        if distance <= tolerance:
            result.append(edge_id)
    return result


def find_split_target(
    graph: Graph, point: Vec2, tolerance: float,
) -> Optional[Tuple[Vec2, EdgeId]]:
    """Closest projection of ``point`` onto any edge within ``tolerance``."""
    best: Optional[Tuple[Vec2, EdgeId]] = None
    best_distance = tolerance
    for edge_id in sorted(graph.edges()):
        a, b = graph.edge_segment(edge_id)
        projected, distance, _ = _point_segment_projection(point, a, b)
        if distance <= best_distance:
            best = (projected, edge_id)
            best_distance = distance
    return best


def _edge_segments(graph: Graph, min_length: float) -> List[Tuple[EdgeId, PointId, PointId, Vec2, Vec2]]:
    segments = []
    for edge_id, (point1, point2) in sorted(graph.edges().items()):
        a = graph.get_point(point1)
        b = graph.get_point(point2)
        if _close(a, b, min_length):
            logger.debug("Skipping near-zero-length edge %s", edge_id)
            continue
        segments.append((edge_id, point1, point2, a, b))
    return segments


def find_intersections(graph: Graph) -> Dict[Vec2, Set[EdgeId]]:
    """Every improper crossing, mapped to the ids of the edges passing through it."""
    eps = graph.merge_eps
    segments = _edge_segments(graph, eps)
    found: Dict[Vec2, Set[EdgeId]] = {}

    for i, (edge_a, a_p1, a_p2, a1, a2) in enumerate(segments):
        for edge_b, b_p1, b_p2, b1, b2 in segments[i + 1:]:
            if {a_p1, a_p2} & {b_p1, b_p2}:
                continue
            crossing = segment_crossing(a1, a2, b1, b2, eps)
            if crossing is None:
                continue

            key = next((k for k in found if _close(k, crossing, eps)), crossing)
            hosts = found.setdefault(key, set())
            # A T-junction only splits the edge it lands inside.
            if not (_close(crossing, a1, eps) or _close(crossing, a2, eps)):
                hosts.add(edge_a)
            if not (_close(crossing, b1, eps) or _close(crossing, b2, eps)):
                hosts.add(edge_b)

    return found


def _planarize_once(graph: Graph, config: PlanarizeConfig) -> bool:
    eps = graph.merge_eps
    segments = _edge_segments(graph, config.min_edge_length)

    for i, (edge_a, a_p1, a_p2, a1, a2) in enumerate(segments):
        for edge_b, b_p1, b_p2, b1, b2 in segments[i + 1:]:
            if {a_p1, a_p2} & {b_p1, b_p2}:
                continue
            crossing = segment_crossing(a1, a2, b1, b2, eps)
            if crossing is None:
                continue

            point_id = graph.add_point(crossing)
            split_edge(graph, edge_a, point_id)
            split_edge(graph, edge_b, point_id)
            logger.debug("Split %s and %s at %s (%s)", edge_a, edge_b, point_id, crossing)
            return True

    return False


def planarize_in_place(graph: Graph, config: Optional[PlanarizeConfig] = None) -> int:
    """Resolve crossings inside ``graph``; returns the number of splits made."""
    if config is None:
        config = PlanarizeConfig()

    for iteration in range(config.max_iterations):
        if not _planarize_once(graph, config):
            return iteration

    logger.warning(
        "Planarization stopped at the %d-iteration ceiling; crossings may remain",
        config.max_iterations,
    )
    return config.max_iterations


def planarize(source: Graph, config: Optional[PlanarizeConfig] = None) -> Graph:
    """Planar copy of ``source`` with every crossing turned into a vertex."""
    flattened = source.clone()
    splits = planarize_in_place(flattened, config)
    logger.info(
        "Planarized graph: %d splits, %d points, %d edges",
        splits, len(flattened.points()), len(flattened.edges()),
    )
    return flattened

"""
Chord cuts that subdivide one face into rooms.

A parameter vector holds ``n - 1`` normalized offsets along the face
perimeter. Each offset becomes a point on the boundary, from which a ray
is cast perpendicular to the boundary edge, into the face, until it hits
the nearest edge. The two ends are materialized as points (splitting their
host edges) and joined. Cuts are applied in order; regions are extracted
once at the end.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np
from shapely.geometry import LineString, Point

from roomcut.contracts import (
    POINT_MERGE_EPS,
    EdgeId,
    PartitionResult,
    PointId,
    RegionId,
    Vec2,
)
from roomcut.graph import Graph
from roomcut.planarize import find_split_target, split_edge
from roomcut.regions import RegionConfig, find_regions, signed_area
from roomcut.scoring import ScoringConfig, regions_with_metadata, score_rooms

logger = logging.getLogger(__name__)

CLOCKWISE = "clockwise"
COUNTERCLOCKWISE = "counterclockwise"


@dataclass
class PartitionConfig:
    """Configuration for cut realization."""
    split_tolerance: float = POINT_MERGE_EPS
    min_cut_length: float = POINT_MERGE_EPS
    degenerate_edge_length: float = POINT_MERGE_EPS
    regions: RegionConfig = field(default_factory=RegionConfig)
    scoring: ScoringConfig = field(default_factory=ScoringConfig)


# --------------------------
# Boundary geometry
# --------------------------
def perimeter_of_cycle(cycle: Sequence[Vec2]) -> float:
    return LineString(list(cycle) + [cycle[0]]).length


def point_along_cycle(cycle: Sequence[Vec2], t: float) -> Tuple[Vec2, Tuple[Vec2, Vec2]]:
    """Point at arc-length fraction ``t`` (wrapped into [0, 1)) and its boundary edge."""
    t = t % 1.0
    target = t * perimeter_of_cycle(cycle)

    start = 0.0
    n = len(cycle)
    for i in range(n):
        point1 = cycle[i]
        point2 = cycle[(i + 1) % n]
        end = start + math.hypot(point2[0] - point1[0], point2[1] - point1[1])
        if start <= target <= end and end > start:
            progress = (target - start) / (end - start)
            point = (
                point1[0] + (point2[0] - point1[0]) * progress,
                point1[1] + (point2[1] - point1[1]) * progress,
            )
            return point, (point1, point2)
        start = end

    # Float drift past the final vertex lands back on the first edge.
    return cycle[0], (cycle[0], cycle[1 % n])


def winding_of_cycle(cycle: Sequence[Vec2]) -> str:
    return COUNTERCLOCKWISE if signed_area(cycle) > 0 else CLOCKWISE


def cut_direction_for_edge(
    edge: Tuple[Vec2, Vec2], winding: str, min_length: float = POINT_MERGE_EPS,
) -> Optional[np.ndarray]:
    """Unit normal of ``edge`` pointing into a face of the given winding."""
    start = np.asarray(edge[0], dtype=float)
    end = np.asarray(edge[1], dtype=float)
    delta = end - start
    length = float(np.linalg.norm(delta))
    if length < min_length:
        logger.warning("Edge %s -> %s is too short to cut from", edge[0], edge[1])
        return None

    dx, dy = delta / length
    # Interior lies left of a counter-clockwise boundary.
    if winding == COUNTERCLOCKWISE:
        return np.array([-dy, dx])
    return np.array([dy, -dx])


def raycast(
    graph: Graph,
    origin: Vec2,
    direction: np.ndarray,
    ignore_edge: Optional[EdgeId],
    min_distance: float = POINT_MERGE_EPS,
) -> Optional[Tuple[Vec2, EdgeId]]:
    """Nearest edge hit by a ray, skipping ``ignore_edge`` and hits at the origin."""
    points = graph.points()
    if not points:
        return None
    coords = np.array(list(points.values()), dtype=float)
    extent = coords.max(axis=0) - coords.min(axis=0)
    reach = float(extent.sum()) * 2.0 + 1.0
    far = (origin[0] + direction[0] * reach, origin[1] + direction[1] * reach)
    ray = LineString([origin, far])
    start = Point(origin)

    closest: Optional[Tuple[Vec2, EdgeId]] = None
    closest_distance = math.inf
    for edge_id in sorted(graph.edges()):
        if edge_id == ignore_edge:
            continue
        segment = LineString(graph.edge_segment(edge_id))
        if not ray.intersects(segment):
            continue
        hit = ray.intersection(segment)
        if hit.geom_type != "Point":
            continue
        distance = start.distance(hit)
        if min_distance < distance < closest_distance:
            closest = ((float(hit.x), float(hit.y)), edge_id)
            closest_distance = distance

    return closest


# --------------------------
# Cuts
# --------------------------
def make_cut(
    graph: Graph,
    cycle: Sequence[Vec2],
    winding: str,
    t: float,
    cut_prefix: str,
    config: Optional[PartitionConfig] = None,
) -> bool:
    """Apply one cut in place; returns False (and logs) when it is skipped."""
    if config is None:
        config = PartitionConfig()

    start, boundary_edge = point_along_cycle(cycle, t)
    start_split = find_split_target(graph, start, config.split_tolerance)
    if start_split is None:
        logger.warning("No edge to split at %s for cut %s", start, cut_prefix)
        return False
    _, start_edge_id = start_split

    direction = cut_direction_for_edge(boundary_edge, winding, config.degenerate_edge_length)
    if direction is None:
        logger.warning("No cut direction on edge %s for cut %s", start_edge_id, cut_prefix)
        return False

    end = raycast(graph, start, direction, start_edge_id, config.min_cut_length)
    if end is None:
        logger.warning(
            "Cut %s from %s on %s in direction %s hit nothing (winding %s)",
            cut_prefix, start, start_edge_id, direction.tolist(), winding,
        )
        return False
    end_point, end_edge_id = end

    start_id = graph.add_point(start, f"{cut_prefix}@{start_edge_id}")
    split_edge(graph, start_edge_id, start_id)

    end_id = graph.add_point(end_point, f"{cut_prefix}@{end_edge_id}")
    split_edge(graph, end_edge_id, end_id)

    graph.add_edge(start_id, end_id)
    logger.debug("Cut %s: %s -> %s", cut_prefix, start_id, end_id)
    return True


def generate_rooms(
    graph: Graph,
    cycle_ids: Sequence[PointId],
    room_weights: Sequence[float],
    cut_offsets: Sequence[float],
    config: Optional[PartitionConfig] = None,
) -> Tuple[Dict[RegionId, List[PointId]], List[int]]:
    """Apply every cut to ``graph`` and return its regions plus skipped cut indices."""
    if config is None:
        config = PartitionConfig()
    if not room_weights:
        return {}, []

    cycle = [graph.get_point(pid) for pid in cycle_ids]
    winding = winding_of_cycle(cycle)

    skipped = []
    for i, t in enumerate(cut_offsets):
        if not make_cut(graph, cycle, winding, float(t), f"cut{i}", config):
            skipped.append(i)

    return find_regions(graph, config.regions), skipped


def create_room_partitioner(
    source: Graph,
    cycle_ids: Sequence[PointId],
    room_weights: Sequence[float],
    config: Optional[PartitionConfig] = None,
) -> Callable[[Sequence[float]], Tuple[int, PartitionResult]]:
    """Fitness function mapping a cut vector to ``(score, PartitionResult)``.

    Every call works on a private clone of ``source``.
    """
    if config is None:
        config = PartitionConfig()
    cycle_ids = list(cycle_ids)
    room_weights = list(room_weights)

    def run(parameters: Sequence[float]) -> Tuple[int, PartitionResult]:
        graph = source.clone()
        regions, skipped = generate_rooms(graph, cycle_ids, room_weights, parameters, config)
        metrics = regions_with_metadata(graph, regions)
        score, parts = score_rooms(metrics, room_weights, config.scoring)
        result = PartitionResult(
            graph=graph,
            regions=regions,
            region_areas={m.region_id: m.area for m in metrics},
            score=score,
            score_parts=parts,
            applied_cuts=len(parameters) - len(skipped),
            skipped_cuts=skipped,
        )
        return score, result

    return run


def generate_random_cuts(population_size: int, num_rooms: int, seed: int) -> List[List[float]]:
    """Seeded initial population of ``num_rooms - 1`` offsets per individual."""
    if population_size < 0:
        raise ValueError(f"population_size must be >= 0, got {population_size}")
    rng = np.random.default_rng(seed)
    return [
        [float(rng.random()) for _ in range(max(num_rooms - 1, 0))]
        for _ in range(population_size)
    ]


def weight_for_region_lookup(
    regions: Dict[RegionId, List[PointId]],
    areas: Dict[RegionId, float],
    weights: Sequence[float],
) -> Dict[RegionId, float]:
    """Pair regions with weights by rank: largest region gets the largest weight."""
    by_area = sorted(regions, key=lambda rid: (-areas[rid], rid))
    by_weight = sorted(weights, reverse=True)
    return dict(zip(by_area, by_weight))

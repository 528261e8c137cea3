"""
Minimal enclosed faces ("regions") of a planar graph.

Two strategies are provided behind ``find_regions``:

- ``brute_force``: DFS-enumerate simple cycles up to a bounded length, then
  drop every cycle whose polygon encloses another discovered cycle.
- ``face_trace``: walk each directed edge around its face using the
  rotational order of edges at each vertex (O(E)); requires a planarized
  graph. Faces enclosing a separate nested component are dropped.

Both return ``{region_id: [point ids]}`` where the region id is the sorted
point-id signature and the boundary is counter-clockwise (positive signed
area) starting at the smallest point id, so results compare directly.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Set, Tuple

from shapely.geometry import Point, Polygon

from roomcut.contracts import PointId, RegionId, Vec2
from roomcut.graph import Graph

logger = logging.getLogger(__name__)

BRUTE_FORCE = "brute_force"
FACE_TRACE = "face_trace"
STRATEGIES = (BRUTE_FORCE, FACE_TRACE)


@dataclass
class RegionConfig:
    """Configuration for region extraction."""
    strategy: str = FACE_TRACE
    max_cycle_length: int = 14
    cross_check: bool = False


# --------------------------
# Shared helpers
# --------------------------
def region_id_for(point_ids: Sequence[PointId]) -> RegionId:
    return ",".join(sorted(point_ids))


def signed_area(points: Sequence[Vec2]) -> float:
    """Shoelace area; positive for counter-clockwise boundaries."""
    total = 0.0
    n = len(points)
    for i in range(n):
        x1, y1 = points[i]
        x2, y2 = points[(i + 1) % n]
        total += x1 * y2 - x2 * y1
    return total / 2.0


def canonical_cycle(graph: Graph, cycle: Sequence[PointId]) -> List[PointId]:
    """Counter-clockwise rotation of ``cycle`` starting at its smallest id."""
    cycle = list(cycle)
    if signed_area([graph.get_point(pid) for pid in cycle]) < 0:
        cycle.reverse()
    start = cycle.index(min(cycle))
    return cycle[start:] + cycle[:start]


def _adjacency(graph: Graph) -> Dict[PointId, List[PointId]]:
    return {
        point_id: sorted(neighbors)
        for point_id, neighbors in sorted(graph.point_to_points().items())
        if neighbors
    }


# --------------------------
# Strategy (a): bounded brute force
# --------------------------
def find_all_cycles(
    adjacency: Dict[PointId, List[PointId]], max_length: int = 14,
) -> List[List[PointId]]:
    """Simple cycles of 3..max_length vertices, one per vertex-set signature."""
    seen: Set[RegionId] = set()
    cycles: List[List[PointId]] = []

    def dfs(node: PointId, on_path: Set[PointId], path: List[PointId]) -> None:
        on_path.add(node)
        path.append(node)

        for neighbor in adjacency.get(node, ()):
            if neighbor not in on_path:
                if len(path) < max_length:
                    dfs(neighbor, on_path, path)
            else:
                cycle = path[path.index(neighbor):]
                if len(cycle) > 2:
                    key = region_id_for(cycle)
                    if key not in seen:
                        seen.add(key)
                        cycles.append(list(cycle))

        path.pop()
        on_path.discard(node)

    for node in adjacency:
        dfs(node, set(), [])

    return cycles


def _cycle_edges(cycle: Sequence[PointId]) -> Set[Tuple[PointId, PointId]]:
    return {
        tuple(sorted((cycle[i], cycle[(i + 1) % len(cycle)])))
        for i in range(len(cycle))
    }


def _encloses(
    graph: Graph,
    outer_polygon: Polygon,
    outer_edges: Set[Tuple[PointId, PointId]],
    inner: Sequence[PointId],
) -> bool:
    """True when every edge of ``inner`` not shared with the outer cycle lies inside it."""
    midpoints = []
    for edge in _cycle_edges(inner):
        if edge in outer_edges:
            continue
        (x1, y1), (x2, y2) = graph.get_point(edge[0]), graph.get_point(edge[1])
        midpoints.append(Point((x1 + x2) / 2.0, (y1 + y2) / 2.0))
    if not midpoints:
        return False
    return all(outer_polygon.contains(midpoint) for midpoint in midpoints)


def minimal_cycles(graph: Graph, cycles: Sequence[Sequence[PointId]]) -> List[List[PointId]]:
    """Drop every cycle whose polygon encloses another cycle of the list."""
    polygons = [Polygon([graph.get_point(pid) for pid in cycle]) for cycle in cycles]
    edge_sets = [_cycle_edges(cycle) for cycle in cycles]

    kept = []
    for i, cycle in enumerate(cycles):
        if not polygons[i].is_valid or polygons[i].area == 0.0:
            continue
        encloses_other = any(
            _encloses(graph, polygons[i], edge_sets[i], other)
            for j, other in enumerate(cycles)
            if j != i
        )
        if not encloses_other:
            kept.append(list(cycle))
    return kept


def find_regions_brute_force(graph: Graph, max_cycle_length: int = 14) -> Dict[RegionId, List[PointId]]:
    cycles = find_all_cycles(_adjacency(graph), max_cycle_length)
    regions = {}
    for cycle in minimal_cycles(graph, cycles):
        regions[region_id_for(cycle)] = canonical_cycle(graph, cycle)
    logger.debug("Brute force: %d cycles, %d minimal", len(cycles), len(regions))
    return regions


# --------------------------
# Strategy (b): rotational face trace
# --------------------------
def _bearing(origin: Vec2, target: Vec2) -> float:
    return math.degrees(math.atan2(target[1] - origin[1], target[0] - origin[0])) % 360.0


def _prune_leaves(adjacency: Dict[PointId, Set[PointId]]) -> Dict[PointId, Set[PointId]]:
    """Iteratively remove degree-1 vertices; dangling edges bound no face."""
    adjacency = {pid: set(neighbors) for pid, neighbors in adjacency.items()}
    leaves = [pid for pid, neighbors in adjacency.items() if len(neighbors) <= 1]
    while leaves:
        leaf = leaves.pop()
        if leaf not in adjacency:
            continue
        for neighbor in adjacency.pop(leaf):
            adjacency[neighbor].discard(leaf)
            if len(adjacency[neighbor]) <= 1:
                leaves.append(neighbor)
    return adjacency


def find_regions_face_trace(graph: Graph) -> Dict[RegionId, List[PointId]]:
    adjacency = _prune_leaves(graph.point_to_points())

    bearings: Dict[PointId, Dict[PointId, float]] = {}
    for point_id, neighbors in adjacency.items():
        origin = graph.get_point(point_id)
        bearings[point_id] = {
            neighbor: _bearing(origin, graph.get_point(neighbor))
            for neighbor in neighbors
        }

    def next_vertex(previous: PointId, current: PointId) -> PointId:
        # First neighbor clockwise from the way back keeps the face on the left.
        back = bearings[current][previous]
        best = previous
        best_turn = 360.0
        for neighbor, bearing in sorted(bearings[current].items()):
            if neighbor == previous:
                continue
            turn = (back - bearing) % 360.0
            if turn == 0.0:
                turn = 360.0
            if turn < best_turn:
                best = neighbor
                best_turn = turn
        return best

    consumed: Set[Tuple[PointId, PointId]] = set()
    regions: Dict[RegionId, List[PointId]] = {}

    for start in sorted(adjacency):
        for second in sorted(adjacency[start]):
            if (start, second) in consumed:
                continue

            trace = [start]
            on_trace = {start}
            simple = True
            previous, current = start, second
            consumed.add((start, second))
            while current != start:
                if current in on_trace:
                    simple = False
                trace.append(current)
                on_trace.add(current)
                following = next_vertex(previous, current)
                consumed.add((current, following))
                previous, current = current, following

            if not simple or len(trace) < 3:
                continue
            area = signed_area([graph.get_point(pid) for pid in trace])
            if area <= 0.0:
                continue
            regions[region_id_for(trace)] = canonical_cycle(graph, trace)

    # A component nested inside another face without touching it leaves that
    # face's outer trace enclosing it; only the innermost faces are regions.
    traced = list(regions.values())
    kept = minimal_cycles(graph, traced)
    if len(kept) != len(traced):
        logger.debug("Face trace: dropped %d enclosing faces", len(traced) - len(kept))
    regions = {region_id_for(cycle): cycle for cycle in kept}

    logger.debug("Face trace: %d regions", len(regions))
    return regions


# --------------------------
# Public interface
# --------------------------
def cross_check_regions(graph: Graph, max_cycle_length: int = 14) -> Dict[str, List[RegionId]]:
    """Region ids found by only one of the two strategies."""
    brute = set(find_regions_brute_force(graph, max_cycle_length))
    traced = set(find_regions_face_trace(graph))
    return {
        "brute_force_only": sorted(brute - traced),
        "face_trace_only": sorted(traced - brute),
    }


def find_regions(graph: Graph, config: Optional[RegionConfig] = None) -> Dict[RegionId, List[PointId]]:
    """Minimal faces of a planarized graph using the configured strategy."""
    if config is None:
        config = RegionConfig()

    if config.strategy == BRUTE_FORCE:
        regions = find_regions_brute_force(graph, config.max_cycle_length)
    elif config.strategy == FACE_TRACE:
        regions = find_regions_face_trace(graph)
    else:
        raise ValueError(f"Unknown region strategy: {config.strategy!r} (expected one of {STRATEGIES})")

    if config.cross_check:
        diff = cross_check_regions(graph, config.max_cycle_length)
        if diff["brute_force_only"] or diff["face_trace_only"]:
            logger.warning(
                "Region strategies disagree: brute_force_only=%s face_trace_only=%s",
                diff["brute_force_only"], diff["face_trace_only"],
            )

    return regions


def sorted_regions(regions: Dict[RegionId, List[PointId]]) -> List[Tuple[RegionId, List[PointId]]]:
    return sorted(regions.items())


class RegionCache:
    """Memoizes region extraction per (structural hash, strategy).

    The key is recomputed on every call, so no invalidation hooks are
    needed; dragging points without changing connectivity reuses the entry.
    """

    def __init__(self, max_entries: int = 8):
        self.max_entries = max_entries
        self._entries: Dict[Tuple[str, str], Dict[RegionId, List[PointId]]] = {}
        self.hits = 0
        self.misses = 0

    def regions(self, graph: Graph, config: Optional[RegionConfig] = None) -> Dict[RegionId, List[PointId]]:
        if config is None:
            config = RegionConfig()
        key = (graph.structural_hash(), config.strategy)
        if key in self._entries:
            self.hits += 1
            return {rid: list(ids) for rid, ids in self._entries[key].items()}

        self.misses += 1
        regions = find_regions(graph, config)
        if len(self._entries) >= self.max_entries:
            self._entries.pop(next(iter(self._entries)))
        self._entries[key] = regions
        return {rid: list(ids) for rid, ids in regions.items()}

"""
Editable planar graph store.

Points carry stable string ids and float coordinates; edges are undirected
and keyed by the sorted pair of their endpoint ids. Every mutating call
bumps a per-instance generation counter so hosts can detect staleness
without diffing, and ``structural_hash`` fingerprints connectivity alone so
derived caches survive pure coordinate moves.
"""
from __future__ import annotations

import hashlib
import logging
import math
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from roomcut.contracts import POINT_MERGE_EPS, EdgeId, PointId, Vec2, to_vec2

logger = logging.getLogger(__name__)


def edge_id_for(point1: PointId, point2: PointId) -> EdgeId:
    """Canonical id of the undirected edge between two points."""
    lo, hi = sorted((point1, point2))
    return f"{lo}~{hi}"


class Graph:
    """Points + undirected edges with identity and mutation invariants."""

    def __init__(self, merge_eps: float = POINT_MERGE_EPS):
        self.merge_eps = merge_eps
        self._points: Dict[PointId, Vec2] = {}
        self._edges: Dict[EdgeId, Tuple[PointId, PointId]] = {}
        self._next_point_id = 0
        self._generation = 0
        self._listeners: List[Callable[[], None]] = []

    # --------------------------
    # Generation / listeners
    # --------------------------
    def generation(self) -> int:
        return self._generation

    def _bump(self) -> None:
        self._generation += 1

    def add_listener(self, listener: Callable[[], None]) -> None:
        """Register a callback fired after ``decode`` replaces the contents."""
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in self._listeners:
            listener()

    # --------------------------
    # Points
    # --------------------------
    def find_point_near(self, coord: Vec2, eps: Optional[float] = None) -> Optional[PointId]:
        """Id of the closest point within ``eps`` of ``coord``, if any."""
        if eps is None:
            eps = self.merge_eps
        x, y = coord
        best_id = None
        best_dist = eps
        for point_id, (px, py) in self._points.items():
            dist = math.hypot(px - x, py - y)
            if dist <= best_dist:
                best_id = point_id
                best_dist = dist
        return best_id

    def _allocate_point_id(self) -> PointId:
        while str(self._next_point_id) in self._points:
            self._next_point_id += 1
        point_id = str(self._next_point_id)
        self._next_point_id += 1
        return point_id

    def add_point(self, coord: Vec2, point_id: Optional[PointId] = None) -> PointId:
        """Insert a point, or return the id of an existing one within epsilon.

        An explicit ``point_id`` that already exists is moved to ``coord``
        instead of duplicated, so replaying tagged insertions is stable.
        """
        coord = to_vec2(coord)
        self._bump()

        existing = self.find_point_near(coord)
        if existing is not None:
            return existing

        if point_id is None:
            point_id = self._allocate_point_id()
        self._points[point_id] = coord
        return point_id

    def get_point(self, point_id: PointId) -> Vec2:
        if point_id not in self._points:
            raise KeyError(f"Unknown point id: {point_id!r}")
        return self._points[point_id]

    def set_point(self, point_id: PointId, coord: Vec2) -> None:
        if point_id not in self._points:
            raise KeyError(f"Unknown point id: {point_id!r}")
        self._points[point_id] = to_vec2(coord)
        self._bump()

    def has_point(self, point_id: PointId) -> bool:
        return point_id in self._points

    # --------------------------
    # Edges
    # --------------------------
    def add_edge(self, point1: PointId, point2: PointId) -> Optional[EdgeId]:
        """Connect two points; self-loops are ignored and return ``None``."""
        if point1 == point2:
            return None
        for point_id in (point1, point2):
            if point_id not in self._points:
                raise KeyError(f"Unknown point id: {point_id!r}")

        edge_id = edge_id_for(point1, point2)
        self._edges[edge_id] = tuple(sorted((point1, point2)))
        self._bump()
        return edge_id

    def remove_edge(self, edge_id: EdgeId) -> None:
        if edge_id not in self._edges:
            raise KeyError(f"Unknown edge id: {edge_id!r}")
        del self._edges[edge_id]
        self._bump()

    def get_edge(self, edge_id: EdgeId) -> Tuple[PointId, PointId]:
        if edge_id not in self._edges:
            raise KeyError(f"Unknown edge id: {edge_id!r}")
        return self._edges[edge_id]

    def has_edge(self, edge_id: EdgeId) -> bool:
        return edge_id in self._edges

    def edge_segment(self, edge_id: EdgeId) -> Tuple[Vec2, Vec2]:
        point1, point2 = self.get_edge(edge_id)
        return self._points[point1], self._points[point2]

    # --------------------------
    # Read-only views
    # --------------------------
    def points(self) -> Mapping[PointId, Vec2]:
        return dict(self._points)

    def edges(self) -> Mapping[EdgeId, Tuple[PointId, PointId]]:
        return dict(self._edges)

    def point_to_points(self) -> Dict[PointId, Set[PointId]]:
        neighbors: Dict[PointId, Set[PointId]] = {pid: set() for pid in self._points}
        for point1, point2 in self._edges.values():
            neighbors[point1].add(point2)
            neighbors[point2].add(point1)
        return neighbors

    def point_to_edges(self) -> Dict[PointId, Set[EdgeId]]:
        incident: Dict[PointId, Set[EdgeId]] = {pid: set() for pid in self._points}
        for edge_id, (point1, point2) in self._edges.items():
            incident[point1].add(edge_id)
            incident[point2].add(edge_id)
        return incident

    def structural_hash(self) -> str:
        """Order-independent fingerprint of the edge set (ignores coordinates)."""
        digest = hashlib.sha256()
        for edge_id in sorted(self._edges):
            digest.update(edge_id.encode("utf-8"))
            digest.update(b"\n")
        return digest.hexdigest()

    # --------------------------
    # Copies
    # --------------------------
    def clone(self) -> "Graph":
        other = Graph(merge_eps=self.merge_eps)
        other._points = dict(self._points)
        other._edges = dict(self._edges)
        other._next_point_id = self._next_point_id
        other._generation = self._generation
        return other

    def subset(self, cycle: Iterable[PointId]) -> "Graph":
        """Graph holding only the given point cycle and its boundary edges."""
        cycle = list(cycle)
        if len(cycle) < 3:
            raise ValueError(f"subset needs a cycle of at least 3 points, got {len(cycle)}")

        sub = Graph(merge_eps=self.merge_eps)
        for point_id in cycle:
            sub._points[point_id] = self.get_point(point_id)
        for i, point_id in enumerate(cycle):
            sub.add_edge(point_id, cycle[(i + 1) % len(cycle)])
        sub._next_point_id = self._next_point_id
        return sub

    # --------------------------
    # Text form
    # --------------------------
    def encode(self) -> str:
        lines = ["points"]
        for point_id, (x, y) in self._points.items():
            lines.append(f"{point_id},{x!r},{y!r}")
        lines.append("edges")
        for edge_id, (point1, point2) in self._edges.items():
            lines.append(f"{edge_id},{point1},{point2}")
        return "\n".join(lines) + "\n"

    def decode(self, text: str) -> None:
        """Replace the contents with a parsed text form; bad rows are dropped."""
        self._points = {}
        self._edges = {}
        self._next_point_id = 0

        # File ids can be remapped when two rows merge within epsilon.
        remap: Dict[str, PointId] = {}
        section = None
        for raw in text.splitlines():
            line = raw.strip()
            if not line:
                continue
            if line in ("points", "edges"):
                section = line
                continue

            fields = [f.strip() for f in line.split(",")]
            if len(fields) != 3 or not fields[0]:
                logger.debug("Skipping malformed row: %r", line)
                continue

            if section == "points":
                try:
                    coord = (float(fields[1]), float(fields[2]))
                except ValueError:
                    logger.debug("Skipping malformed point row: %r", line)
                    continue
                if not (math.isfinite(coord[0]) and math.isfinite(coord[1])):
                    continue
                remap[fields[0]] = self.add_point(coord, fields[0])
            elif section == "edges":
                point1 = remap.get(fields[1])
                point2 = remap.get(fields[2])
                if point1 is None or point2 is None:
                    logger.debug("Skipping edge with unknown endpoint: %r", line)
                    continue
                self.add_edge(point1, point2)

        self._bump()
        self._notify()

    @classmethod
    def from_text(cls, text: str, merge_eps: float = POINT_MERGE_EPS) -> "Graph":
        graph = cls(merge_eps=merge_eps)
        graph.decode(text)
        return graph

    def __repr__(self) -> str:
        return (
            f"Graph(points={len(self._points)}, edges={len(self._edges)}, "
            f"generation={self._generation})"
        )

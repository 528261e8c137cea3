"""Shared types and tolerances for the room-cut pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

PointId = str
EdgeId = str
RegionId = str
Vec2 = Tuple[float, float]

# Two coordinates closer than this are the same point. Every merge and
# endpoint comparison in the package goes through this value.
POINT_MERGE_EPS = 1e-3


@dataclass(frozen=True)
class ScoreParts:
    """Per-term diagnostics of a partition score, each scaled to 0-100."""

    area: int
    roundness: int
    angles: int
    rooms: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "area": self.area,
            "roundness": self.roundness,
            "angles": self.angles,
            "rooms": self.rooms,
        }


@dataclass
class RegionMetrics:
    """A realized region with the measurements the scorer needs."""

    region_id: RegionId
    point_ids: List[PointId]
    points: List[Vec2]
    area: float
    perimeter: float


@dataclass
class PartitionResult:
    """Outcome of applying one cut-parameter vector to a face."""

    graph: object  # roomcut.graph.Graph; kept loose to avoid an import cycle
    regions: Dict[RegionId, List[PointId]]
    region_areas: Dict[RegionId, float]
    score: int
    score_parts: ScoreParts
    applied_cuts: int = 0
    skipped_cuts: List[int] = field(default_factory=list)


def to_vec2(values: Sequence[float]) -> Vec2:
    return (float(values[0]), float(values[1]))

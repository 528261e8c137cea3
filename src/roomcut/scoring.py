"""
Partition quality scoring.

Rates how well a set of realized rooms matches target area weights, plus
shape quality: roundness (area / perimeter^2 against a square), absence of
acute corners, and the number of rooms produced. The exponents and
thresholds are hand-tuned defaults, kept configurable.
"""
import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from shapely.geometry import Polygon

from roomcut.contracts import PointId, RegionId, RegionMetrics, ScoreParts, Vec2

logger = logging.getLogger(__name__)


@dataclass
class ScoringConfig:
    """Configuration for partition scoring."""
    area_exponent: float = 0.75          # <1 prioritizes perfect areas a little less
    ideal_roundness: float = 1.0 / 16.0  # area / perimeter^2 of a square
    acute_threshold_deg: float = 80.0
    room_count_exponent: float = 4.0


def regions_with_metadata(
    graph, regions: Dict[RegionId, List[PointId]],
) -> List[RegionMetrics]:
    """Polygon measurements for every region of ``graph``."""
    results = []
    for region_id, point_ids in regions.items():
        points = [graph.get_point(pid) for pid in point_ids]
        polygon = Polygon(points)
        results.append(RegionMetrics(
            region_id=region_id,
            point_ids=list(point_ids),
            points=points,
            area=abs(float(polygon.area)),
            perimeter=float(polygon.exterior.length),
        ))
    return results


def relative_match(value: float, target: float) -> float:
    """1 when equal, falling towards 0 as the two diverge."""
    largest = max(value, target)
    if largest <= 0.0:
        return 1.0
    return 1.0 - abs(value - target) / largest


def angle_difference(angle1: float, angle2: float) -> float:
    """Smallest unsigned difference between two bearings, in degrees."""
    difference = abs(angle1 % 360.0 - angle2 % 360.0)
    return min(difference, 360.0 - difference)


def _bearing(origin: Vec2, target: Vec2) -> float:
    return math.degrees(math.atan2(target[1] - origin[1], target[0] - origin[0]))


def area_score(
    regions: Sequence[RegionMetrics], weights: Sequence[float], config: ScoringConfig,
) -> float:
    areas = sorted(region.area for region in regions)
    targets = sorted(weights)
    if not areas or not targets:
        return 0.0

    mean_area = sum(areas) / len(areas)
    mean_weight = sum(targets) / len(targets)
    if mean_area <= 0.0 or mean_weight <= 0.0:
        return 0.0

    scores = []
    for area, weight in zip(areas, targets):
        match = relative_match(area / mean_area, weight / mean_weight)
        scores.append(max(match, 0.0) ** config.area_exponent)
    return sum(scores) / len(scores)


def roundness_score(regions: Sequence[RegionMetrics], config: ScoringConfig) -> float:
    # Product, so a single sliver room sinks the whole layout.
    score = 1.0
    for region in regions:
        if region.perimeter <= 0.0:
            return 0.0
        roundness = region.area / (region.perimeter * region.perimeter)
        score *= relative_match(roundness, config.ideal_roundness)
    return score


def angles_score(regions: Sequence[RegionMetrics], config: ScoringConfig) -> float:
    if not regions:
        return 0.0

    threshold = config.acute_threshold_deg
    scores = []
    for region in regions:
        points = region.points
        n = len(points)
        score = 1.0
        for i in range(n):
            point1 = points[i]
            point2 = points[(i + 1) % n]
            point3 = points[(i + 2) % n]
            difference = angle_difference(_bearing(point2, point1), _bearing(point2, point3))
            score *= min(threshold, difference) / threshold
        scores.append(score)
    return sum(scores) / len(scores)


def room_count_score(expected: int, actual: int, config: ScoringConfig) -> float:
    largest = max(expected, actual)
    if largest == 0:
        return 1.0
    return (1.0 - abs(expected - actual) / largest) ** config.room_count_exponent


def score_rooms(
    regions: Sequence[RegionMetrics],
    weights: Sequence[float],
    config: Optional[ScoringConfig] = None,
) -> Tuple[int, ScoreParts]:
    """Composite score ``ceil(area * (roundness + angles) * rooms * 100)``.

    Returns the score with per-term diagnostics scaled to 0-100.
    """
    if config is None:
        config = ScoringConfig()

    area = area_score(regions, weights, config)
    roundness = roundness_score(regions, config) if regions else 0.0
    angles = angles_score(regions, config)
    rooms = room_count_score(len(weights), len(regions), config)

    overall = int(math.ceil(area * (roundness + angles) * rooms * 100))
    parts = ScoreParts(
        area=int(math.ceil(area * 100)),
        roundness=int(math.ceil(roundness * 100)),
        angles=int(math.ceil(angles * 100)),
        rooms=int(math.ceil(rooms * 100)),
    )
    logger.debug(
        "Score %d: area=%.3f roundness=%.3f angles=%.3f rooms=%.3f",
        overall, area, roundness, angles, rooms,
    )
    return overall, parts

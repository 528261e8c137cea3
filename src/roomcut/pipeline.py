"""Single-path pipeline: editable graph -> planar graph -> faces -> best room cuts."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from roomcut.contracts import PartitionResult, PointId, RegionId
from roomcut.genetic import EvolveResult, GeneticOptimizer, GeneticParameters
from roomcut.graph import Graph
from roomcut.partition import (
    PartitionConfig,
    create_room_partitioner,
    generate_random_cuts,
    weight_for_region_lookup,
)
from roomcut.planarize import PlanarizeConfig, planarize
from roomcut.regions import RegionConfig, find_regions, sorted_regions
from roomcut.rooms_config import RoomsDefinition

logger = logging.getLogger(__name__)


@dataclass
class PipelineConfig:
    population_size: int = 40
    seed: int = 0
    genetic: GeneticParameters = field(default_factory=GeneticParameters)
    planarize: PlanarizeConfig = field(default_factory=PlanarizeConfig)
    regions: RegionConfig = field(default_factory=RegionConfig)
    partition: PartitionConfig = field(default_factory=PartitionConfig)


@dataclass
class FacePlan:
    region_id: RegionId
    boundary: List[PointId]
    weights: List[float]
    best: Optional[EvolveResult[PartitionResult]]
    ranked: List[EvolveResult[PartitionResult]] = field(default_factory=list)
    evaluations: int = 0


@dataclass
class FloorPlanResult:
    planarized: Graph
    regions: Dict[RegionId, List[PointId]]
    faces: List[FacePlan]
    elapsed_s: float = 0.0


def face_optimizer(
    planar: Graph,
    boundary: List[PointId],
    weights: List[float],
    config: Optional[PipelineConfig] = None,
    seed: Optional[int] = None,
) -> GeneticOptimizer:
    """Optimizer for one face, isolated from the rest of the graph.

    Returned un-run so a host can pace it with ``step``/``run_for``.
    """
    if config is None:
        config = PipelineConfig()
    if seed is None:
        seed = config.seed

    face_graph = planar.subset(boundary)
    fitness = create_room_partitioner(face_graph, boundary, weights, config.partition)

    if len(weights) <= 1:
        # Nothing to cut: a single evaluation scores the face as-is.
        population = [[]]
        genetic = GeneticParameters(
            num_generations=1,
            mutation_rate=config.genetic.mutation_rate,
            survival_rate=1.0,
        )
    else:
        population = generate_random_cuts(config.population_size, len(weights), seed)
        genetic = config.genetic

    return GeneticOptimizer(fitness, population, genetic, seed=seed)


def plan_rooms(
    graph: Graph,
    rooms: RoomsDefinition,
    config: Optional[PipelineConfig] = None,
) -> FloorPlanResult:
    """Planarize ``graph``, then search room cuts for every enclosed face.

    Faces are taken in region-id order; face ``i`` uses ``rooms.room_weights(i)``.
    """
    if config is None:
        config = PipelineConfig()

    started = time.perf_counter()
    planar = planarize(graph, config.planarize)
    regions = find_regions(planar, config.regions)
    logger.info("Found %d regions", len(regions))

    faces = []
    for i, (region_id, boundary) in enumerate(sorted_regions(regions)):
        weights = rooms.room_weights(i)
        optimizer = face_optimizer(planar, boundary, weights, config, seed=config.seed + i)
        optimizer.run_for()
        best = optimizer.best()
        logger.info(
            "Region %d (%s): %d rooms, best score %s after %d evaluations",
            i, region_id, len(weights), best.score if best else None, optimizer.evaluations,
        )
        faces.append(FacePlan(
            region_id=region_id,
            boundary=list(boundary),
            weights=list(weights),
            best=best,
            ranked=list(optimizer.results),
            evaluations=optimizer.evaluations,
        ))

    return FloorPlanResult(
        planarized=planar,
        regions=regions,
        faces=faces,
        elapsed_s=time.perf_counter() - started,
    )


def floorplan_to_payload(result: FloorPlanResult) -> Dict[str, object]:
    """JSON-ready summary of a floor plan run."""
    faces = []
    for face in result.faces:
        entry: Dict[str, object] = {
            "region_id": face.region_id,
            "boundary": face.boundary,
            "weights": face.weights,
            "evaluations": face.evaluations,
            "best": None,
        }
        if face.best is not None:
            partition = face.best.result
            lookup = weight_for_region_lookup(
                partition.regions, partition.region_areas, face.weights,
            )
            entry["best"] = {
                "parameters": face.best.parameters,
                "score": face.best.score,
                "score_parts": partition.score_parts.to_dict(),
                "skipped_cuts": partition.skipped_cuts,
                "rooms": [
                    {
                        "region_id": rid,
                        "boundary": partition.regions[rid],
                        "area": partition.region_areas[rid],
                        "weight": lookup.get(rid),
                    }
                    for rid in sorted(partition.regions)
                ],
            }
        faces.append(entry)

    return {
        "schema_version": "roomcut.floorplan.v1",
        "elapsed_s": round(result.elapsed_s, 3),
        "region_count": len(result.regions),
        "faces": faces,
    }

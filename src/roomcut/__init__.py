"""Public API for planar floor plan room partitioning."""

from roomcut.genetic import GeneticOptimizer, GeneticParameters, evolve
from roomcut.graph import Graph
from roomcut.pipeline import PipelineConfig, plan_rooms
from roomcut.planarize import planarize
from roomcut.regions import RegionConfig, find_regions
from roomcut.rooms_config import RoomsDefinition

__all__ = [
    "GeneticOptimizer",
    "GeneticParameters",
    "Graph",
    "PipelineConfig",
    "RegionConfig",
    "RoomsDefinition",
    "evolve",
    "find_regions",
    "plan_rooms",
    "planarize",
]

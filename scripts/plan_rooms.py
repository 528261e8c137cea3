#!/usr/bin/env python3
"""Partition every enclosed face of a drawn graph into weighted rooms."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from roomcut.genetic import GeneticParameters
from roomcut.graph import Graph
from roomcut.pipeline import PipelineConfig, floorplan_to_payload, plan_rooms
from roomcut.regions import BRUTE_FORCE, FACE_TRACE, RegionConfig
from roomcut.rooms_config import RoomsDefinition, default_rooms_definition
from roomcut.run_protocol import (
    copy_input_file,
    prepare_run_dir,
    update_latest_pointer,
    write_json,
    write_text,
)
from roomcut.svg_exporter import floorplan_to_svg, graph_to_svg


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Planarize a graph, find its faces and search room cuts for each"
    )
    parser.add_argument(
        "--graph", required=True, help="Path to graph text file (points/edges sections)"
    )
    parser.add_argument(
        "--rooms",
        default=None,
        help="Path to room weights file, one line of weights per face (default: 1 1 1 1)",
    )
    parser.add_argument("--name", default="floorplan", help="Run name")
    parser.add_argument("--runs-dir", default="runs", help="Runs output root")
    parser.add_argument("--seed", type=int, default=0, help="Random seed")
    parser.add_argument(
        "--population", type=int, default=40, help="Individuals per generation"
    )
    parser.add_argument(
        "--generations", type=int, default=30, help="Number of generations"
    )
    parser.add_argument(
        "--mutation-rate", type=float, default=0.2, help="Starting mutation rate"
    )
    parser.add_argument(
        "--mutation-annealing",
        type=float,
        default=0.95,
        help="Mutation rate multiplier per generation",
    )
    parser.add_argument(
        "--survival-rate", type=float, default=0.25, help="Elite fraction (0-1]"
    )
    parser.add_argument(
        "--population-cull",
        type=float,
        default=1.0,
        help="Population size multiplier per generation",
    )
    parser.add_argument(
        "--strategy",
        choices=[FACE_TRACE, BRUTE_FORCE],
        default=FACE_TRACE,
        help="Region extraction strategy",
    )
    parser.add_argument(
        "--cross-check",
        action="store_true",
        help="Run both region strategies and warn when they disagree",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logs"
    )
    return parser


def _build_summary(*, run_id: str, elapsed_s: float, payload: dict) -> str:
    lines = [
        f"# Run {run_id}",
        "",
        f"- Duration: {elapsed_s:.2f}s",
        f"- Regions: {payload['region_count']}",
        "",
        "## Faces",
    ]
    for face in payload["faces"]:
        best = face["best"]
        if best is None:
            lines.append(f"- `{face['region_id']}`: no result")
            continue
        parts = best["score_parts"]
        lines.append(
            f"- `{face['region_id']}`: score **{best['score']}** "
            f"({len(best['rooms'])}/{len(face['weights'])} rooms; "
            f"area {parts['area']}, roundness {parts['roundness']}, "
            f"angles {parts['angles']}, rooms {parts['rooms']})"
        )
    lines.append("")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    for input_path in (args.graph, args.rooms):
        if input_path and not Path(input_path).is_file():
            raise FileNotFoundError(f"Input file not found: {input_path}")

    started = time.perf_counter()
    run_paths = prepare_run_dir(args.runs_dir, args.name)
    graph_path = copy_input_file(args.graph, run_paths.input_dir)
    graph = Graph.from_text(graph_path.read_text(encoding="utf-8"))

    if args.rooms:
        rooms_path = copy_input_file(args.rooms, run_paths.input_dir)
        rooms = RoomsDefinition.from_text(rooms_path.read_text(encoding="utf-8"))
    else:
        rooms = default_rooms_definition()

    config = PipelineConfig(
        population_size=max(1, int(args.population)),
        seed=int(args.seed),
        genetic=GeneticParameters(
            num_generations=max(1, int(args.generations)),
            mutation_rate=float(args.mutation_rate),
            mutation_annealing=float(args.mutation_annealing),
            survival_rate=max(1e-6, min(1.0, float(args.survival_rate))),
            population_cull=max(0.0, float(args.population_cull)),
        ),
        regions=RegionConfig(strategy=args.strategy, cross_check=args.cross_check),
    )

    result = plan_rooms(graph, rooms, config)
    elapsed = time.perf_counter() - started

    payload = floorplan_to_payload(result)
    write_text(run_paths.planar_graph_path, result.planarized.encode())
    write_json(run_paths.regions_path, {"regions": result.regions})
    write_json(run_paths.partitions_path, payload)
    graph_to_svg(result.planarized, str(run_paths.graph_svg_path), regions=result.regions)
    floorplan_to_svg(result, str(run_paths.floorplan_svg_path))

    scores = [face.best.score for face in result.faces if face.best is not None]
    write_json(run_paths.metrics_path, {
        "run_id": run_paths.run_id,
        "elapsed_s": round(elapsed, 3),
        "seed": config.seed,
        "counts": {
            "input_points": len(graph.points()),
            "input_edges": len(graph.edges()),
            "planar_points": len(result.planarized.points()),
            "planar_edges": len(result.planarized.edges()),
            "regions": len(result.regions),
            "evaluations": sum(face.evaluations for face in result.faces),
        },
        "scores": scores,
    })
    write_text(
        run_paths.summary_path,
        _build_summary(run_id=run_paths.run_id, elapsed_s=elapsed, payload=payload),
    )
    write_json(run_paths.manifest_path, {
        "run_id": run_paths.run_id,
        "name": args.name,
        "created_utc": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "input_graph": str(graph_path),
        "artifacts": {
            "planar_graph": str(run_paths.planar_graph_path),
            "regions": str(run_paths.regions_path),
            "partitions": str(run_paths.partitions_path),
            "graph_svg": str(run_paths.graph_svg_path),
            "floorplan_svg": str(run_paths.floorplan_svg_path),
        },
    })
    update_latest_pointer(args.runs_dir, run_paths.run_dir)

    print(f"Run ID: {run_paths.run_id}")
    print(f"Run dir: {run_paths.run_dir}")
    print(f"Regions: {len(result.regions)}")
    for face in result.faces:
        if face.best is not None:
            print(f"  {face.region_id}: score {face.best.score}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

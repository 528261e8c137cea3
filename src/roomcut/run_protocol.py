"""Run-folder layout for floor plan runs: inputs, artifacts, metrics, summary."""

from __future__ import annotations

import json
import os
import re
import shutil
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class RunPaths:
    """Every path of one run, derived from its folder."""

    run_id: str
    run_dir: Path

    @property
    def input_dir(self) -> Path:
        return self.run_dir / "input"

    @property
    def artifacts_dir(self) -> Path:
        return self.run_dir / "artifacts"

    @property
    def manifest_path(self) -> Path:
        return self.run_dir / "manifest.json"

    @property
    def metrics_path(self) -> Path:
        return self.run_dir / "metrics.json"

    @property
    def summary_path(self) -> Path:
        return self.run_dir / "summary.md"

    @property
    def planar_graph_path(self) -> Path:
        return self.artifacts_dir / "planar_graph.txt"

    @property
    def regions_path(self) -> Path:
        return self.artifacts_dir / "regions.json"

    @property
    def partitions_path(self) -> Path:
        return self.artifacts_dir / "partitions.json"

    @property
    def graph_svg_path(self) -> Path:
        return self.artifacts_dir / "planar_graph.svg"

    @property
    def floorplan_svg_path(self) -> Path:
        return self.artifacts_dir / "floorplan.svg"


def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.strip().lower()).strip("-")
    return slug or "run"


def create_run_id(name: str, now: Optional[datetime] = None) -> str:
    """``YYYYmmdd_HHMMSS_<slug>`` in UTC."""
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%d_%H%M%S")
    return f"{stamp}_{slugify(name)}"


def prepare_run_dir(runs_root: str, name: str) -> RunPaths:
    run_id = create_run_id(name)
    paths = RunPaths(run_id=run_id, run_dir=Path(runs_root) / run_id)
    for folder in (paths.input_dir, paths.artifacts_dir):
        folder.mkdir(parents=True, exist_ok=True)
    return paths


def copy_input_file(path: str, input_dir: Path) -> Path:
    """Snapshot an input file into the run so the run can be replayed."""
    source = Path(path)
    if not source.is_file():
        raise FileNotFoundError(f"Input file not found: {path}")
    target = input_dir / source.name
    if source.resolve() != target.resolve():
        shutil.copy2(source, target)
    return target


def write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def write_json(path: Path, payload: Dict[str, Any]) -> None:
    write_text(path, json.dumps(payload, indent=2))


def update_latest_pointer(runs_root: str, run_dir: Path) -> None:
    """Point ``<runs_root>/latest`` at ``run_dir``."""
    latest = Path(runs_root) / "latest"
    if latest.is_symlink() or latest.is_file():
        latest.unlink()
    elif latest.is_dir():
        shutil.rmtree(latest)

    try:
        latest.symlink_to(os.path.relpath(run_dir, latest.parent))
    except OSError:
        # No symlink support: leave the run name in a marker file instead.
        write_text(latest / "latest_run.txt", run_dir.name)

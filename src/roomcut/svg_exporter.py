"""
SVG Exporter for graphs and floor plans.

Read-only renderer: draws edges, points and room fills from a graph and
its regions. Nothing here feeds back into the core.
"""

import os
from typing import Dict, List, Optional, Sequence, Tuple

import svgwrite

from roomcut.contracts import PointId, RegionId
from roomcut.graph import Graph
from roomcut.partition import weight_for_region_lookup

COLORS = [
    "#005f73",
    "#bb3e03",
    "#0a9396",
    "#ee9b00",
    "#ca6702",
    "#9b2226",
    "#ae2012",
    "#287271",
    "#2a9d8f",
    "#8ab17d",
    "#babb74",
    "#e9c46a",
    "#efb366",
    "#f4a261",
    "#ee8959",
    "#e76f51",
]

STYLE = """
    .edge { stroke: #222222; stroke-width: 1; stroke-linecap: round; fill: none; }
    .point { fill: #222222; }
    .room { stroke: none; fill-opacity: 0.55; }
    .label { font-size: 6px; font-family: Arial, sans-serif; fill: #333; }
"""


def color_for_index(i: int) -> str:
    return COLORS[i % len(COLORS)]


def _bounds(graph: Graph) -> Tuple[float, float, float, float]:
    points = list(graph.points().values())
    if not points:
        return (0.0, 0.0, 1.0, 1.0)
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    return (min(xs), min(ys), max(xs), max(ys))


def _drawing(filepath: str, graphs: Sequence[Graph], margin: float) -> svgwrite.Drawing:
    boxes = [_bounds(g) for g in graphs]
    min_x = min(b[0] for b in boxes) - margin
    min_y = min(b[1] for b in boxes) - margin
    width = max(b[2] for b in boxes) + margin - min_x
    height = max(b[3] for b in boxes) + margin - min_y

    dwg = svgwrite.Drawing(
        filepath,
        size=(f"{width}px", f"{height}px"),
        viewBox=f"{min_x} {min_y} {width} {height}",
    )
    dwg.defs.add(dwg.style(STYLE))
    return dwg


def _add_edges(dwg: svgwrite.Drawing, graph: Graph, add_labels: bool) -> None:
    for edge_id in sorted(graph.edges()):
        start, end = graph.edge_segment(edge_id)
        dwg.add(dwg.line(start=start, end=end, class_="edge"))
    for point_id, (x, y) in sorted(graph.points().items()):
        dwg.add(dwg.circle(center=(x, y), r=1.2, class_="point"))
        if add_labels:
            dwg.add(dwg.text(point_id, insert=(x + 2, y - 2), class_="label"))


def _add_rooms(
    dwg: svgwrite.Drawing,
    graph: Graph,
    regions: Dict[RegionId, List[PointId]],
    labels: Optional[Dict[RegionId, str]],
    color_offset: int = 0,
) -> None:
    for i, region_id in enumerate(sorted(regions)):
        points = [graph.get_point(pid) for pid in regions[region_id]]
        dwg.add(dwg.polygon(
            points, class_="room", fill=color_for_index(i + color_offset),
        ))
        if labels and region_id in labels:
            cx = sum(p[0] for p in points) / len(points)
            cy = sum(p[1] for p in points) / len(points)
            dwg.add(dwg.text(
                labels[region_id], insert=(cx, cy), class_="label", text_anchor="middle",
            ))


def graph_to_svg(
    graph: Graph,
    filepath: str,
    regions: Optional[Dict[RegionId, List[PointId]]] = None,
    add_labels: bool = True,
    margin: float = 10.0,
) -> str:
    """
    Export a graph (and optionally its regions) to SVG.

    Args:
        graph: Graph to draw
        filepath: Output SVG file path
        regions: Regions to fill, keyed by region id
        add_labels: Add point id labels
        margin: Margin around the drawing (graph units)

    Returns:
        Path to created SVG file
    """
    os.makedirs(os.path.dirname(os.path.abspath(filepath)), exist_ok=True)
    dwg = _drawing(filepath, [graph], margin)
    if regions:
        _add_rooms(dwg, graph, regions, None)
    _add_edges(dwg, graph, add_labels)
    dwg.save()
    return filepath


def floorplan_to_svg(result, filepath: str, margin: float = 10.0) -> str:
    """
    Export every face's best partition into a single SVG.

    Rooms are filled per face and labelled with their target weight and
    the face's score.

    Args:
        result: roomcut.pipeline.FloorPlanResult
        filepath: Output SVG file path
        margin: Margin around the drawing (graph units)

    Returns:
        Path to created SVG file
    """
    os.makedirs(os.path.dirname(os.path.abspath(filepath)), exist_ok=True)
    partitions = [face for face in result.faces if face.best is not None]
    graphs = [face.best.result.graph for face in partitions] or [result.planarized]
    dwg = _drawing(filepath, graphs + [result.planarized], margin)

    offset = 0
    for face in partitions:
        partition = face.best.result
        lookup = weight_for_region_lookup(partition.regions, partition.region_areas, face.weights)
        labels = {
            rid: f"{weight:g} ({face.best.score})" for rid, weight in lookup.items()
        }
        _add_rooms(dwg, partition.graph, partition.regions, labels, color_offset=offset)
        offset += len(partition.regions)

    _add_edges(dwg, result.planarized, add_labels=False)
    for face in partitions:
        graph = face.best.result.graph
        for edge_id in sorted(graph.edges()):
            start, end = graph.edge_segment(edge_id)
            dwg.add(dwg.line(start=start, end=end, class_="edge"))

    dwg.save()
    return filepath

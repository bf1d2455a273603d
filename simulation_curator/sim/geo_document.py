"""GeoJSON-shaped visualization of a curated run (presentation only)."""
from __future__ import annotations

import colorsys
from typing import Any, Dict, List, Sequence

from simulation_curator.core.models import RadioCell, RouteBlock, ShapePoint, Stop
from simulation_curator.core.resolver import TowerResolution
from simulation_curator.core.timeparse import format_duration

TOWER_COLOR = "#673AB7"


def color_palette(n: int) -> List[str]:
    colors = []
    for i in range(n):
        r, g, b = colorsys.hls_to_rgb(i / n, 0.5, 0.5)
        colors.append("#{:02X}{:02X}{:02X}".format(round(r * 255), round(g * 255), round(b * 255)))
    return colors


def _feature(geometry: Dict[str, Any], properties: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": "Feature", "geometry": geometry, "properties": properties}


def _point(lon: float, lat: float) -> Dict[str, Any]:
    return {"type": "Point", "coordinates": [lon, lat]}


def stop_feature(stop: Stop, color: str | None = None) -> Dict[str, Any]:
    props = {
        "stop_id": stop.stop_id,
        "stop_name": stop.name,
        "arrival_time": format_duration(stop.arrival),
        "departure_time": format_duration(stop.departure),
        "trip_id": stop.trip_id,
    }
    if color:
        props["marker-color"] = color
    return _feature(_point(stop.lon, stop.lat), props)


def shape_point_feature(point: ShapePoint) -> Dict[str, Any]:
    props: Dict[str, Any] = {"shape_id": point.shape_id, "shape_pt_sequence": point.sequence}
    if point.time is not None:
        props["time"] = format_duration(point.time)
    return _feature(_point(point.lon, point.lat), props)


def block_line_feature(block: RouteBlock) -> Dict[str, Any]:
    if not block.shape_points:
        raise ValueError(f"No shape points found for block {block.block_id}")
    coords = [[p.lon, p.lat] for p in block.shape_points]
    return _feature(
        {"type": "LineString", "coordinates": coords},
        {"block_id": block.block_id, "route_id": block.route_id, "shape_id": block.shape_points[0].shape_id},
    )


def tower_feature(cell: RadioCell) -> Dict[str, Any]:
    return _feature(
        _point(cell.lon, cell.lat),
        {"id": cell.tower_id, "network_id": cell.network_id, "marker-color": TOWER_COLOR, "range": str(cell.range)},
    )


def attachment_line_feature(point: ShapePoint, cell: RadioCell) -> Dict[str, Any]:
    return _feature(
        {"type": "LineString", "coordinates": [[cell.lon, cell.lat], [point.lon, point.lat]]},
        {"stroke": TOWER_COLOR, "stroke-width": 2},
    )


def build_geo_document(blocks: Sequence[RouteBlock], resolution: TowerResolution) -> Dict[str, Any]:
    features: List[Dict[str, Any]] = []

    stops = [s for b in blocks for s in b.stops]
    for stop, color in zip(stops, color_palette(len(stops))):
        features.append(stop_feature(stop, color))

    for block in blocks:
        features.append(block_line_feature(block))

    for block in blocks:
        for point in block.shape_points:
            if point.time is not None:
                features.append(shape_point_feature(point))

    for block in blocks:
        for point in block.shape_points:
            key = resolution.cell_for(point)
            if key is not None:
                features.append(attachment_line_feature(point, resolution.towers[key]))

    for cell in resolution.towers.values():
        features.append(tower_feature(cell))

    return {"type": "FeatureCollection", "features": features}

import random
from typing import Any, Dict, List, Optional, Sequence, Tuple

from simulation_curator.config import CuratorConfig
from simulation_curator.core.models import Millis, RadioCell, RouteBlock, ShapePoint, Stop
from simulation_curator.core.pipeline import CurationResult, run_pipeline
from simulation_curator.sim.geo_document import build_geo_document
from simulation_curator.sim.output import reconnects_document, source_groups_document, topology_document
from simulation_curator.sim.simulator import summarize_reconnects


def run_scenario(
    blocks: Sequence[RouteBlock],
    cells: Sequence[RadioCell],
    start: Millis,
    end: Millis,
    config: Optional[CuratorConfig] = None,
    include_geo: bool = False,
) -> Dict[str, Any]:
    result = run_pipeline(blocks, cells, start, end, config)
    return scenario_documents(result, include_geo=include_geo)


def scenario_documents(result: CurationResult, include_geo: bool = False) -> Dict[str, Any]:
    return {
        "summary": {**summarize_reconnects(result.reconnects), "excluded_blocks": list(result.excluded_blocks)},
        "topology": topology_document(result.topology),
        "topology_updates": reconnects_document(result.reconnects),
        "source_groups": source_groups_document(result.source_groups) if result.source_groups else None,
        "geo": build_geo_document(result.blocks, result.resolution) if include_geo else None,
    }


def _straight_block(block_id: str, route_id: str, lat: float, lons: List[float], depart: Millis, arrive: Millis) -> RouteBlock:
    points = tuple(ShapePoint(shape_id=f"{block_id}-shape", lat=lat, lon=lon, sequence=i) for i, lon in enumerate(lons))
    stops = (
        Stop(stop_id=f"{block_id}-a", name="Start", arrival=depart, departure=depart, lat=lat, lon=lons[0], trip_id=f"{block_id}-trip"),
        Stop(stop_id=f"{block_id}-b", name="End", arrival=arrive, departure=arrive, lat=lat, lon=lons[-1], trip_id=f"{block_id}-trip"),
    )
    return RouteBlock(block_id=block_id, route_id=route_id, stops=stops, shape_points=points)


def demo_scenario() -> Tuple[List[RouteBlock], List[RadioCell], Millis, Millis]:
    # Two vehicles crossing between two towers in opposite directions, 08:00-08:10
    lat = 52.52
    lons = [round(13.400 + 0.003 * i, 6) for i in range(11)]
    start, end = 8 * 3600 * 1000, (8 * 3600 + 600) * 1000
    blocks = [
        _straight_block("B1", "S41", lat, lons, start, end),
        _straight_block("B2", "S42", lat, list(reversed(lons)), start + 120_000, end),
    ]
    cells = [
        RadioCell(tower_id=100, network_id=2, lat=lat, lon=13.401, range=2000.0),
        RadioCell(tower_id=200, network_id=2, lat=lat, lon=13.428, range=2000.0),
    ]
    return blocks, cells, start, end


def synthetic_scenario(
    n_blocks: int,
    n_cells: int,
    points_per_block: int = 40,
    seed: int = 42,
) -> Tuple[List[RouteBlock], List[RadioCell], Millis, Millis]:
    """Random straight-line vehicles over a grid of towers around Berlin, 08:00-09:00."""
    rng = random.Random(seed)
    base_lat, base_lon = 52.45, 13.30
    start, end = 8 * 3600 * 1000, 9 * 3600 * 1000
    cells = [
        RadioCell(
            tower_id=1000 + i,
            network_id=rng.choice((2, 4, 9)),
            lat=round(base_lat + rng.uniform(0, 0.15), 6),
            lon=round(base_lon + rng.uniform(0, 0.25), 6),
            range=float(rng.randint(500, 3000)),
        )
        for i in range(n_cells)
    ]
    blocks = []
    for i in range(n_blocks):
        lat = round(base_lat + rng.uniform(0, 0.15), 6)
        west = base_lon + rng.uniform(0, 0.05)
        lons = [round(west + 0.2 * j / (points_per_block - 1), 6) for j in range(points_per_block)]
        if rng.random() < 0.5:
            lons.reverse()
        depart = start + rng.randint(0, 20) * 60_000
        arrive = depart + rng.randint(15, 40) * 60_000
        blocks.append(_straight_block(f"B{i + 1}", f"R{i % 3 + 1}", lat, lons, depart, arrive))
    return blocks, cells, start, end

import logging
from fastapi import FastAPI, HTTPException
from fastapi.responses import RedirectResponse, Response
from pydantic import BaseModel
from typing import Any, Dict, List

from simulation_curator.config import CuratorConfig
from simulation_curator.core.errors import CuratorError, MalformedTimeString
from simulation_curator.core.models import RadioCell, RouteBlock, ShapePoint, Stop
from simulation_curator.core.timeparse import parse_duration
from simulation_curator.sim.output import reconnects_document, topology_document
from simulation_curator.sim.quadrants import MobileDeviceQuadrants
from simulation_curator.sim.scenario import demo_scenario, run_scenario

logger = logging.getLogger(__name__)

app = FastAPI(title="Simulation Curator API")


@app.get("/")
async def root() -> RedirectResponse:
    # Redirect base URL to interactive docs to avoid 404 confusion
    return RedirectResponse(url="/docs")


@app.get("/favicon.ico")
async def favicon() -> Response:
    return Response(status_code=204)


class StopIn(BaseModel):
    stop_id: str
    name: str = ""
    arrival_time: str
    departure_time: str
    lat: float
    lon: float
    trip_id: str = ""


class ShapePointIn(BaseModel):
    shape_id: str
    lat: float
    lon: float
    sequence: int


class BlockIn(BaseModel):
    block_id: str
    route_id: str = ""
    stops: List[StopIn]
    shape_points: List[ShapePointIn]


class CellIn(BaseModel):
    tower_id: int
    network_id: int
    lat: float
    lon: float
    range: float


class SimulationParams(BaseModel):
    start_time: str = "08:00:00"
    end_time: str = "09:00:00"
    batch_interval_ms: int | None = None
    batch_gap_ms: int = 500
    source_group_size: int | None = None
    group_by_route: bool = True
    topology_start_id: int = 2
    default_capacity: int = 65535
    include_geo: bool = False


class SimulateRequest(BaseModel):
    blocks: List[BlockIn]
    cells: List[CellIn]
    params: SimulationParams = SimulationParams()


class QuadrantRequest(BaseModel):
    fog_nodes: int = 10
    mobile_devices_per_fog_node: int = 10
    moving_devices: int = 1
    runtime_ms: int = 120_000
    interval_ms: int = 1000
    quadrant_start_id: int = 2


def _to_block(b: BlockIn) -> RouteBlock:
    stops = []
    for s in b.stops:
        try:
            arrival, departure = parse_duration(s.arrival_time), parse_duration(s.departure_time)
        except MalformedTimeString as e:
            logger.warning("Block %s, stop %s skipped: %s", b.block_id, s.stop_id, e)
            continue
        stops.append(Stop(stop_id=s.stop_id, name=s.name, arrival=arrival, departure=departure, lat=s.lat, lon=s.lon, trip_id=s.trip_id))
    points = [ShapePoint(shape_id=p.shape_id, lat=p.lat, lon=p.lon, sequence=p.sequence) for p in b.shape_points]
    return RouteBlock(block_id=b.block_id, route_id=b.route_id, stops=tuple(stops), shape_points=tuple(points))


def _config(params: SimulationParams) -> CuratorConfig:
    return CuratorConfig().replace(
        batch_interval_ms=params.batch_interval_ms or 0,
        batch_gap_ms=params.batch_gap_ms,
        source_group_size=params.source_group_size,
        group_by_route=params.group_by_route,
        topology_start_id=params.topology_start_id,
        default_capacity=params.default_capacity,
    )


@app.post("/simulate")
async def simulate(body: SimulateRequest) -> Dict[str, Any]:
    """Curate topology documents from blocks and pre-filtered candidate cells.

    Without ``params.batch_interval_ms`` every reconnect is emitted at its exact time.
    """
    params = body.params
    try:
        start = parse_duration(params.start_time)
        end = parse_duration(params.end_time)
        blocks = [_to_block(b) for b in body.blocks]
        cells = [RadioCell(**c.model_dump()) for c in body.cells]
        return run_scenario(blocks, cells, start, end, _config(params), include_geo=params.include_geo)
    except CuratorError as e:
        raise HTTPException(status_code=422, detail={"error": type(e).__name__, "message": str(e)})
    except ValueError as e:
        raise HTTPException(status_code=422, detail={"error": "ValueError", "message": str(e)})


@app.get("/demo")
async def demo(batch_interval_ms: int | None = None, batch_gap_ms: int = 500, include_geo: bool = False) -> Dict[str, Any]:
    blocks, cells, start, end = demo_scenario()
    config = CuratorConfig().replace(batch_interval_ms=batch_interval_ms or 0, batch_gap_ms=batch_gap_ms, source_group_size=1)
    return run_scenario(blocks, cells, start, end, config, include_geo=include_geo)


@app.post("/quadrants")
async def quadrants(body: QuadrantRequest) -> Dict[str, Any]:
    # The exported topology and groups shift quadrant ids down by one;
    # the consuming runner expects fog ids to start at 1.
    try:
        mdq = MobileDeviceQuadrants.populate(
            body.fog_nodes,
            body.mobile_devices_per_fog_node,
            body.quadrant_start_id,
            body.fog_nodes + body.quadrant_start_id,
        )
        topology = mdq.fixed_topology(subtract=1)
        groups = mdq.source_groups(subtract=1)
        reconnects = mdq.simulated_reconnects(body.runtime_ms, body.interval_ms, body.moving_devices)
    except ValueError as e:
        raise HTTPException(status_code=422, detail={"error": "ValueError", "message": str(e)})
    return {
        "topology": topology_document(topology),
        "topology_updates": reconnects_document(reconnects),
        "source_groups": {str(k): v for k, v in groups.items()},
    }

"""Reads route blocks from a GTFS feed imported into SQLite.

``calendar_dates.date`` is expected in ISO form (YYYY-MM-DD) so that SQLite's
strftime can derive the weekday.
"""
import logging
import sqlite3
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from simulation_curator.core.errors import MalformedTimeString
from simulation_curator.core.models import RouteBlock, ShapePoint, Stop
from simulation_curator.core.timeparse import parse_duration

logger = logging.getLogger(__name__)

DB_PATH: Path = Path("gtfs_vbb.db")


def set_db_path(path: Path) -> None:
    global DB_PATH
    DB_PATH = Path(path)


def _conn() -> sqlite3.Connection:
    conn = sqlite3.connect(DB_PATH)
    conn.row_factory = sqlite3.Row
    return conn


def service_date_for_weekday(conn: sqlite3.Connection, day_of_week: int) -> Optional[str]:
    # 0 = Sunday ... 6 = Saturday, as strftime('%w')
    row = conn.execute(
        "SELECT min(date) AS date FROM calendar_dates WHERE strftime('%w', date) = ?",
        (str(day_of_week),),
    ).fetchone()
    return row["date"] if row else None


def list_blocks(conn: sqlite3.Connection, line_names: Sequence[str], service_date: str) -> List[Tuple[str, str]]:
    # An interlined block serving several lines is listed once, under the lowest line name
    if not line_names:
        return []
    placeholders = ",".join("?" for _ in line_names)
    rows = conn.execute(
        f"""
        SELECT trips.block_id, min(routes.route_short_name) AS route_short_name
        FROM routes, trips, calendar_dates
        WHERE routes.route_id = trips.route_id
          AND trips.service_id = calendar_dates.service_id
          AND routes.route_short_name IN ({placeholders})
          AND trips.block_id NOTNULL
          AND calendar_dates.date = ?
        GROUP BY trips.block_id
        ORDER BY trips.block_id
        """,
        (*line_names, service_date),
    ).fetchall()
    return [(r["block_id"], r["route_short_name"]) for r in rows]


def read_trip_stops(conn: sqlite3.Connection, trip_id: str) -> List[Stop]:
    rows = conn.execute(
        """
        SELECT stop_times.stop_id, arrival_time, departure_time, stop_name, stop_lat, stop_lon
        FROM stop_times LEFT JOIN stops ON stops.stop_id = stop_times.stop_id
        WHERE trip_id = ?
        ORDER BY stop_sequence
        """,
        (trip_id,),
    ).fetchall()
    stops: List[Stop] = []
    for r in rows:
        try:
            arrival = parse_duration(r["arrival_time"])
            departure = parse_duration(r["departure_time"])
        except MalformedTimeString as e:
            logger.warning("Trip %s, stop %s skipped: %s", trip_id, r["stop_id"], e)
            continue
        if r["stop_lat"] is None or r["stop_lon"] is None:
            logger.warning("Trip %s, stop %s skipped: no coordinates", trip_id, r["stop_id"])
            continue
        stops.append(Stop(
            stop_id=r["stop_id"],
            name=r["stop_name"] or "",
            arrival=arrival,
            departure=departure,
            lat=float(r["stop_lat"]),
            lon=float(r["stop_lon"]),
            trip_id=trip_id,
        ))
    return stops


def read_shape(conn: sqlite3.Connection, shape_id: str) -> List[Tuple[float, float]]:
    rows = conn.execute(
        "SELECT shape_pt_lat, shape_pt_lon FROM shapes WHERE shape_id = ? ORDER BY shape_pt_sequence",
        (shape_id,),
    ).fetchall()
    return [(float(r["shape_pt_lat"]), float(r["shape_pt_lon"])) for r in rows]


def read_block(conn: sqlite3.Connection, block_id: str, route_id: str, service_date: str) -> Optional[RouteBlock]:
    trips = conn.execute(
        """
        SELECT trip_id, shape_id FROM trips
        WHERE block_id = ?
          AND service_id IN (SELECT service_id FROM calendar_dates WHERE date = ?)
        """,
        (block_id, service_date),
    ).fetchall()

    chained: List[Tuple[int, str, Optional[str], List[Stop]]] = []
    for t in trips:
        stops = read_trip_stops(conn, t["trip_id"])
        if stops:
            chained.append((stops[0].departure, t["trip_id"], t["shape_id"], stops))
    if not chained:
        return None
    chained.sort(key=lambda c: (c[0], c[1]))

    # Trips run back-to-back; shape sequences are renumbered so they stay unique in the block
    all_stops: List[Stop] = []
    points: List[ShapePoint] = []
    shapes: Dict[str, List[Tuple[float, float]]] = {}
    for _, trip_id, shape_id, stops in chained:
        all_stops.extend(stops)
        if not shape_id:
            logger.warning("Block %s: trip %s has no shape", block_id, trip_id)
            continue
        if shape_id not in shapes:
            shapes[shape_id] = read_shape(conn, shape_id)
        for lat, lon in shapes[shape_id]:
            points.append(ShapePoint(shape_id=shape_id, lat=lat, lon=lon, sequence=len(points), block_id=block_id))
    return RouteBlock(block_id=block_id, route_id=route_id, stops=tuple(all_stops), shape_points=tuple(points))


def read_blocks(line_names: Sequence[str], day_of_week: int) -> List[RouteBlock]:
    with _conn() as conn:
        service_date = service_date_for_weekday(conn, day_of_week)
        if service_date is None:
            logger.warning("No service date found for weekday %s", day_of_week)
            return []
        blocks = []
        for block_id, route_id in list_blocks(conn, line_names, service_date):
            block = read_block(conn, block_id, route_id, service_date)
            if block is not None:
                blocks.append(block)
        logger.info("Read %d blocks for lines %s on %s", len(blocks), ",".join(line_names), service_date)
        return blocks

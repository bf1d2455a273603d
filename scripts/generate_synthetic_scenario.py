"""Synthetic scenario generator: writes a /simulate request body."""
import argparse, json, os, sys
from typing import Dict, List

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from simulation_curator.core.models import RouteBlock  # type: ignore
from simulation_curator.core.timeparse import format_duration  # type: ignore
from simulation_curator.sim.scenario import synthetic_scenario  # type: ignore


def block_payload(block: RouteBlock) -> Dict:
    return {
        "block_id": block.block_id,
        "route_id": block.route_id,
        "stops": [
            {
                "stop_id": s.stop_id,
                "name": s.name,
                "arrival_time": format_duration(s.arrival),
                "departure_time": format_duration(s.departure),
                "lat": s.lat,
                "lon": s.lon,
                "trip_id": s.trip_id,
            }
            for s in block.stops
        ],
        "shape_points": [
            {"shape_id": p.shape_id, "lat": p.lat, "lon": p.lon, "sequence": p.sequence}
            for p in block.shape_points
        ],
    }


def main():
    p = argparse.ArgumentParser()
    p.add_argument('-Blocks', type=int, default=20)
    p.add_argument('-Cells', type=int, default=50)
    p.add_argument('-Points', type=int, default=40)
    p.add_argument('-Seed', type=int, default=42)
    p.add_argument('-Out', type=str, default='synthetic_scenario.json')
    a = p.parse_args()

    blocks, cells, start, end = synthetic_scenario(a.Blocks, a.Cells, a.Points, a.Seed)
    scenario: Dict[str, List] = {
        "blocks": [block_payload(b) for b in blocks],
        "cells": [
            {"tower_id": c.tower_id, "network_id": c.network_id, "lat": c.lat, "lon": c.lon, "range": c.range}
            for c in cells
        ],
        "params": {"start_time": format_duration(start), "end_time": format_duration(end)},
    }
    with open(a.Out, 'w') as f:
        json.dump(scenario, f, indent=2)
    print(f"Wrote {len(blocks)} blocks & {len(cells)} cells -> {a.Out}")


if __name__ == '__main__':
    main()

"""Artificial topology changes: mobile devices rotating over a ring of fog nodes.

Writes fixed_topology.json, source_groups.json and topology_updates.json into the
output directory.
"""
import argparse, logging, os, sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from simulation_curator.sim.output import reconnects_document, topology_document, write_documents  # type: ignore
from simulation_curator.sim.quadrants import MobileDeviceQuadrants, QuadrantConfig  # type: ignore

QUADRANT_START_ID = 2
RUNTIME_MS = 120_000
INTERVAL_MS = 1000


def main():
    p = argparse.ArgumentParser()
    p.add_argument('-Out', type=str, default='.', help='Output directory')
    p.add_argument('-FogNodes', type=int, default=10)
    p.add_argument('-DevicesPerFogNode', type=int, default=10)
    p.add_argument('-MovingDevices', type=int, default=1)
    a = p.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    config = QuadrantConfig(
        num_quadrants=a.FogNodes,
        devices_per_quadrant=a.DevicesPerFogNode,
        quadrant_start_id=QUADRANT_START_ID,
        mobile_start_id=a.FogNodes + QUADRANT_START_ID,
    )
    mdq = MobileDeviceQuadrants.from_config(config)
    # the runner expects fog ids to start at 1
    topology = mdq.fixed_topology(subtract=1)
    groups = mdq.source_groups(subtract=1)
    reconnects = mdq.simulated_reconnects(RUNTIME_MS, INTERVAL_MS, a.MovingDevices)

    write_documents({
        os.path.join(a.Out, 'fixed_topology.json'): topology_document(topology),
        os.path.join(a.Out, 'source_groups.json'): {str(k): v for k, v in groups.items()},
        os.path.join(a.Out, 'topology_updates.json'): reconnects_document(reconnects),
    })
    print(f"Wrote {a.FogNodes} fog nodes, {a.FogNodes * a.DevicesPerFogNode} devices, "
          f"{len(reconnects.topology_updates)} updates -> {a.Out}")


if __name__ == '__main__':
    main()

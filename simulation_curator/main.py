import argparse
import logging
import sys
from typing import List, Optional

from simulation_curator.config import CuratorConfig
from simulation_curator.core.attachments import child_ids_by_block
from simulation_curator.core.errors import CuratorError
from simulation_curator.core.pipeline import run_pipeline
from simulation_curator.core.timeparse import parse_duration
from simulation_curator.sim.geo_document import build_geo_document
from simulation_curator.sim.output import reconnects_document, source_groups_document, topology_document, write_documents
from simulation_curator.sim.simulator import summarize_reconnects
from simulation_curator.store import gtfs_db
from simulation_curator.store.cell_csv import load_candidate_cells

logger = logging.getLogger("simulation_curator")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Generate topology change events from transit schedules and cell data")
    p.add_argument("-d", "--db-path", default="gtfs_vbb.db", help="Path to the GTFS SQLite database")
    p.add_argument("-s", "--start-time", default="08:00:00", help="Start of the schedule window (HH:MM:SS)")
    p.add_argument("-e", "--end-time", default="09:00:00", help="End of the schedule window (HH:MM:SS)")
    p.add_argument("--day-of-the-week", type=int, default=1, help="0 = Sunday ... 6 = Saturday")
    p.add_argument("--line-names", default="S41,S42", help="Comma separated short names of the lines")
    p.add_argument("--batch-interval-size-in-seconds", type=int, default=20,
                   help="Simulated time represented by one batch")
    p.add_argument("--batch-frequency-in-milliseconds", type=int, default=500,
                   help="Output time between consecutive batches")
    p.add_argument("--no-batching", action="store_true", help="Emit every reconnect at its exact time")
    p.add_argument("--topology-path", default="fixed_topology.json")
    p.add_argument("--topology-updates-path", default="topology_updates.json")
    p.add_argument("-g", "--geo-json-path", default="geo.json")
    p.add_argument("-o", "--open-cell-id-data-loc", default="OpenCelliDGermanyData.csv",
                   help="OpenCelliD CSV export")
    p.add_argument("-m", "--min-samples", type=int, default=10,
                   help="Minimum number of measurements for a base station to be used")
    p.add_argument("-r", "--radio", default="LTE")
    p.add_argument("--source-group-size", type=int, default=None,
                   help="Physical sources per logical source; omit to skip source groups")
    p.add_argument("--source-group-path", default="source_groups.json")
    p.add_argument("--log-level", default="INFO")
    return p


def config_from_args(args: argparse.Namespace) -> CuratorConfig:
    return CuratorConfig().replace(
        radio=args.radio,
        min_samples=args.min_samples,
        batch_interval_ms=0 if args.no_batching else args.batch_interval_size_in_seconds * 1000,
        batch_gap_ms=args.batch_frequency_in_milliseconds,
        source_group_size=args.source_group_size,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    config = config_from_args(args)

    try:
        start = parse_duration(args.start_time)
        end = parse_duration(args.end_time)
        line_names = [n.strip() for n in args.line_names.split(",") if n.strip()]

        gtfs_db.set_db_path(args.db_path)
        blocks = gtfs_db.read_blocks(line_names, args.day_of_the_week)
        cells = load_candidate_cells(args.open_cell_id_data_loc, config)
        result = run_pipeline(blocks, cells, start, end, config)
    except CuratorError as e:
        logger.error("Aborting, no output written: %s", e)
        return 1

    summary = summarize_reconnects(result.reconnects)
    logger.info(
        "Created %d batches containing %d events. Last batch will be emitted after %.1fs",
        summary["batches"], summary["events"], summary["last_batch_ms"] / 1000,
    )

    documents = {
        args.topology_path: topology_document(result.topology),
        args.topology_updates_path: reconnects_document(result.reconnects),
        args.geo_json_path: build_geo_document(result.blocks, result.resolution),
    }
    if result.source_groups is not None:
        documents[args.source_group_path] = source_groups_document(result.source_groups)
        nodes = child_ids_by_block(result.sequences)
        for block in result.blocks:
            group = result.source_groups.block_to_group[block.block_id]
            first_stop = block.stops[0].name if block.stops else "<none>"
            logger.info("Block %s, route %s (node %d) starts at stop %s and is assigned source group %d",
                        block.block_id, block.route_id, nodes[block.block_id], first_stop, group)
    write_documents(documents)
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Benchmark curation performance for varying numbers of vehicles.

Usage:
    python scripts/benchmark_pipeline.py -Min 10 -Max 50 -Step 10 -Cells 100
    python -m scripts.benchmark_pipeline -Min 10 -Max 50 -Step 10 -Cells 100 -Json

Notes:
    - Tower resolution is O(P * C) distance evaluations (shape points x cells) and dominates.
"""

from __future__ import annotations
import argparse, statistics, json, time, os, sys

# Ensure project root on path
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from simulation_curator.config import CuratorConfig  # type: ignore
from simulation_curator.core.pipeline import run_pipeline  # type: ignore
from simulation_curator.sim.scenario import synthetic_scenario  # type: ignore


def run_once(n_blocks: int, n_cells: int, points: int, seed: int, config: CuratorConfig) -> dict:
    blocks, cells, start, end = synthetic_scenario(n_blocks, n_cells, points, seed)
    t0 = time.perf_counter()
    result = run_pipeline(blocks, cells, start, end, config)
    dt = time.perf_counter() - t0
    return {
        "n_blocks": n_blocks,
        "n_cells": n_cells,
        "shape_points": sum(len(b.shape_points) for b in result.blocks),
        "elapsed_s": dt,
        "towers": len(result.resolution.towers),
        "events": result.reconnects.event_count(),
        "batches": len(result.reconnects.topology_updates),
    }


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument('-Min', type=int, default=10)
    ap.add_argument('-Max', type=int, default=50)
    ap.add_argument('-Step', type=int, default=10)
    ap.add_argument('-Cells', type=int, default=100)
    ap.add_argument('-Points', type=int, default=40)
    ap.add_argument('-Repeats', type=int, default=3)
    ap.add_argument('-NoBatching', action='store_true')
    ap.add_argument('-Json', action='store_true')
    args = ap.parse_args()

    config = CuratorConfig().replace(batch_interval_ms=0) if args.NoBatching else CuratorConfig()
    rows = []
    for n in range(args.Min, args.Max + 1, args.Step):
        for r in range(args.Repeats):
            row = run_once(n, args.Cells, args.Points, 42 + r, config)
            rows.append(row)
            if args.Json:
                print(json.dumps(row))
            else:
                print(f"Blocks={row['n_blocks']:<3} elapsed={row['elapsed_s']*1000:8.2f} ms points={row['shape_points']:<5} towers={row['towers']:<4} events={row['events']}")
    if not args.Json:
        from collections import defaultdict
        by_n = defaultdict(list)
        for r in rows:
            by_n[r['n_blocks']].append(r['elapsed_s'])
        print('\nSummary (mean ms per block count)')
        for n in sorted(by_n):
            ms = statistics.fmean(by_n[n]) * 1000
            print(f"  {n:>3}: {ms:8.2f} ms")


if __name__ == '__main__':
    main()

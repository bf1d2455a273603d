"""Assigns wall-clock times to the shape points of a route block.

Stops are pinned to their nearest shape point; the points in between get times
interpolated by index distance. A block that chains several trips over a
circular path can hit a point whose time lies before the previous timed point;
such a gap is treated as crossing the wrap boundary of the block's observed
time span.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from .errors import EmptyWindow, InconsistentSchedule
from .geo import vincenty_distance
from .models import Millis, RouteBlock, ShapePoint, Stop

logger = logging.getLogger(__name__)


def nearest_shape_point_index(stop: Stop, points: Sequence[ShapePoint]) -> Optional[int]:
    best: Optional[int] = None
    best_distance = float("inf")
    for i, p in enumerate(points):
        d = vincenty_distance((p.lat, p.lon), (stop.lat, stop.lon))
        # strict comparison keeps the first point on ties
        if d < best_distance:
            best_distance = d
            best = i
    return best


def pin_stop_times(stops: Sequence[Stop], points: Sequence[ShapePoint]) -> List[Optional[Millis]]:
    times: List[Optional[Millis]] = [None] * len(points)
    for stop in stops:
        idx = nearest_shape_point_index(stop, points)
        if idx is not None:
            times[idx] = stop.center_time
    return times


def observed_span(stops: Sequence[Stop]) -> Optional[Tuple[Millis, Millis]]:
    if not stops:
        return None
    centers = [s.center_time for s in stops]
    return min(centers), max(centers)


def _gap_duration(block_id: str, last_time: Millis, next_time: Millis, span: Tuple[Millis, Millis]) -> Tuple[Millis, bool]:
    if next_time >= last_time:
        duration, wrapped = next_time - last_time, False
    else:
        first_observed, last_observed = span
        duration, wrapped = (last_observed - last_time) + (next_time - first_observed), True
    if duration <= 0:
        raise InconsistentSchedule(
            f"Block {block_id}: non-positive interpolation window from {last_time}ms to {next_time}ms"
            + (" across wrap" if wrapped else "")
        )
    return duration, wrapped


def interpolate_times(block_id: str, times: List[Optional[Millis]], span: Optional[Tuple[Millis, Millis]]) -> List[Optional[Millis]]:
    out = list(times)
    last_index: Optional[int] = None
    for i, t in enumerate(times):
        if t is None:
            continue
        if last_index is not None:
            last_time = times[last_index]
            duration, wrapped = _gap_duration(block_id, last_time, t, span)
            steps = i - last_index
            for j in range(last_index + 1, i):
                value = last_time + duration * (j - last_index) // steps
                if wrapped and value > span[1]:
                    value -= span[1] - span[0]
                out[j] = value
            if wrapped:
                logger.debug("Block %s: interpolation between points %d and %d wraps around", block_id, last_index, i)
        last_index = i
    return out


def stops_in_window(stops: Sequence[Stop], start: Millis, end: Millis) -> List[Stop]:
    ordered = sorted(stops, key=lambda s: s.arrival)
    kept: List[Stop] = []
    for i, stop in enumerate(ordered):
        if stop.departure >= start and stop.arrival <= end:
            kept.append(stop)
        elif 0 < i < len(ordered) - 1:
            prev_departure = ordered[i - 1].departure
            next_arrival = ordered[i + 1].arrival
            # neighbours that bracket a window edge
            if (prev_departure < end < stop.arrival) or (stop.departure < start < next_arrival):
                kept.append(stop)
    return kept


def interpolate_block(block: RouteBlock, start: Millis, end: Millis) -> RouteBlock:
    """Return a copy of ``block`` holding only timed points inside [start, end].

    Raises EmptyWindow when nothing survives and InconsistentSchedule on a
    non-positive interpolation window.
    """
    points = sorted(block.shape_points, key=lambda p: p.sequence)
    for a, b in zip(points, points[1:]):
        if a.sequence == b.sequence:
            raise InconsistentSchedule(f"Block {block.block_id}: duplicate shape sequence {a.sequence}")

    times = pin_stop_times(block.stops, points)
    times = interpolate_times(block.block_id, times, observed_span(block.stops))

    kept = [
        replace(p, time=t, block_id=block.block_id)
        for p, t in zip(points, times)
        if t is not None and start <= t <= end
    ]
    if not kept:
        raise EmptyWindow(block.block_id)
    logger.debug("Block %s: %d of %d shape points inside window", block.block_id, len(kept), len(points))
    return replace(block, stops=tuple(stops_in_window(block.stops, start, end)), shape_points=tuple(kept))

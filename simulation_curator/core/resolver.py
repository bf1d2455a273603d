from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from .geo import vincenty_distance
from .models import CellKey, RadioCell, ShapePoint, ShapePointKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TowerResolution:
    # Read-only views; built once by resolve_towers
    assignments: Mapping[ShapePointKey, CellKey]
    towers: Mapping[CellKey, RadioCell]

    def cell_for(self, point: ShapePoint) -> Optional[CellKey]:
        return self.assignments.get(point.key)


def order_cells(cells: Iterable[RadioCell]) -> List[RadioCell]:
    # One cell per (tower id, network id); the last duplicate wins, as with a keyed insert
    by_key = {c.key: c for c in cells}
    return [by_key[k] for k in sorted(by_key)]


def find_closest_cell(point: ShapePoint, cells: Sequence[RadioCell]) -> Optional[Tuple[RadioCell, float]]:
    """Nearest cell to ``point``; ``cells`` must already be in ascending key order.

    Ties resolve to the lowest (tower id, network id).
    """
    closest: Optional[RadioCell] = None
    min_distance = float("inf")
    for cell in cells:
        d = vincenty_distance((cell.lat, cell.lon), (point.lat, point.lon))
        if d < min_distance:
            min_distance = d
            closest = cell
    if closest is None:
        return None
    if min_distance > closest.range:
        logger.warning(
            "Closest tower %s for shape point %s at distance %.1fm but range is %.1fm",
            tuple(closest.key), tuple(point.key), min_distance, closest.range,
        )
    return closest, min_distance


def resolve_towers(candidates: Iterable[RadioCell], points: Iterable[ShapePoint]) -> TowerResolution:
    cells = order_cells(candidates)
    assignments = {}
    towers = {}
    unresolved = 0
    for point in points:
        found = find_closest_cell(point, cells)
        if found is None:
            unresolved += 1
            continue
        cell, _ = found
        assignments[point.key] = cell.key
        towers[cell.key] = cell
    if unresolved:
        logger.warning("%d shape points have no candidate radio cell", unresolved)
    logger.info("Resolved %d shape points onto %d radio cells", len(assignments), len(towers))
    ordered_towers = {k: towers[k] for k in sorted(towers)}
    return TowerResolution(
        assignments=MappingProxyType(assignments),
        towers=MappingProxyType(ordered_towers),
    )

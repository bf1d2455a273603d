from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from simulation_curator.config import CuratorConfig
from .attachments import AttachmentSequence, build_attachment_sequences
from .batcher import BatchSettings, build_reconnects
from .errors import EmptyWindow
from .interpolator import interpolate_block
from .models import CellKey, FixedTopology, Millis, NodeId, RadioCell, RouteBlock, ShapePoint, SimulatedReconnects
from .resolver import TowerResolution, resolve_towers
from .source_groups import SourceGroups, compute_source_groups
from .topology import create_single_fog_layer, first_child_id

logger = logging.getLogger(__name__)


@dataclass
class CurationResult:
    blocks: List[RouteBlock]
    resolution: TowerResolution
    topology: FixedTopology
    cell_to_node: Dict[CellKey, NodeId]
    sequences: List[AttachmentSequence]
    reconnects: SimulatedReconnects
    source_groups: Optional[SourceGroups] = None
    excluded_blocks: List[str] = field(default_factory=list)


def batch_settings(config: CuratorConfig) -> BatchSettings:
    if not config.batching_enabled:
        return BatchSettings()
    return BatchSettings(interval_ms=config.batch_interval_ms, gap_ms=config.batch_gap_ms)


def prepare_blocks(blocks: Iterable[RouteBlock], start: Millis, end: Millis) -> Tuple[List[RouteBlock], List[str]]:
    kept: List[RouteBlock] = []
    excluded: List[str] = []
    for block in blocks:
        try:
            kept.append(interpolate_block(block, start, end))
        except EmptyWindow as e:
            logger.info("%s; excluding it", e)
            excluded.append(block.block_id)
    return kept, excluded


def all_shape_points(blocks: Sequence[RouteBlock]) -> List[ShapePoint]:
    return [p for b in blocks for p in b.shape_points]


def run_pipeline(
    blocks: Iterable[RouteBlock],
    cells: Iterable[RadioCell],
    start: Millis,
    end: Millis,
    config: Optional[CuratorConfig] = None,
) -> CurationResult:
    """Run interpolation, tower resolution, topology construction and reconnect batching.

    ``cells`` must already be filtered (radio type, operator, recency, samples).
    Fatal input errors propagate; nothing is written here.
    """
    config = config or CuratorConfig()
    config.validate()

    kept, excluded = prepare_blocks(blocks, start, end)
    logger.info("Simulation contains %d mobile nodes (%d blocks excluded)", len(kept), len(excluded))

    resolution = resolve_towers(cells, all_shape_points(kept))
    logger.info("Simulation contains %d radio cells", len(resolution.towers))

    topology, cell_to_node = create_single_fog_layer(
        config.topology_start_id, config.default_capacity, resolution.towers.values()
    )
    sequences = build_attachment_sequences(
        kept,
        first_child_id(topology, config.topology_start_id),
        resolution.assignments,
        cell_to_node,
        epoch=start,
    )
    reconnects = build_reconnects(sequences, batch_settings(config))

    groups = None
    if config.source_group_size:
        groups = compute_source_groups(sequences, config.source_group_size, by_route=config.group_by_route)

    return CurationResult(
        blocks=kept,
        resolution=resolution,
        topology=topology,
        cell_to_node=cell_to_node,
        sequences=sequences,
        reconnects=reconnects,
        source_groups=groups,
        excluded_blocks=excluded,
    )

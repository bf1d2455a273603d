from dataclasses import dataclass
from typing import Dict, List, Mapping, Sequence, Tuple

from .errors import InconsistentSchedule, MissingAttachment
from .models import CellKey, Millis, NodeId, RouteBlock, ShapePointKey


@dataclass(frozen=True)
class AttachmentSequence:
    block_id: str
    route_id: str
    child_id: NodeId
    first_sequence: int
    entries: Tuple[Tuple[Millis, NodeId], ...]  # (timestamp relative to window start, parent node)

    @property
    def initial_parent(self) -> NodeId:
        return self.entries[0][1]

    @property
    def final_parent(self) -> NodeId:
        return self.entries[-1][1]


def build_attachment_sequence(
    block: RouteBlock,
    child_id: NodeId,
    assignments: Mapping[ShapePointKey, CellKey],
    cell_to_node: Mapping[CellKey, NodeId],
    epoch: Millis,
) -> AttachmentSequence:
    entries: List[Tuple[Millis, NodeId]] = []
    for point in block.shape_points:
        cell = assignments.get(ShapePointKey(block.block_id, point.shape_id, point.sequence))
        if cell is None or cell not in cell_to_node:
            raise MissingAttachment(block.block_id, point.shape_id, point.sequence)
        if point.time is None:
            raise InconsistentSchedule(f"Block {block.block_id}: no time set for shape point {point.sequence}")
        entries.append((point.time - epoch, cell_to_node[cell]))
    if not entries:
        raise InconsistentSchedule(f"Block {block.block_id} has no shape points")
    return AttachmentSequence(
        block_id=block.block_id,
        route_id=block.route_id,
        child_id=child_id,
        first_sequence=block.shape_points[0].sequence,
        entries=tuple(entries),
    )


def build_attachment_sequences(
    blocks: Sequence[RouteBlock],
    first_child: NodeId,
    assignments: Mapping[ShapePointKey, CellKey],
    cell_to_node: Mapping[CellKey, NodeId],
    epoch: Millis,
) -> List[AttachmentSequence]:
    # child ids follow block order and stay fixed for the whole trace
    return [
        build_attachment_sequence(block, first_child + i, assignments, cell_to_node, epoch)
        for i, block in enumerate(blocks)
    ]


def child_ids_by_block(sequences: Sequence[AttachmentSequence]) -> Dict[str, NodeId]:
    return {s.block_id: s.child_id for s in sequences}

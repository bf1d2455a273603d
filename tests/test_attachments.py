import pytest

from simulation_curator.core.attachments import build_attachment_sequence, build_attachment_sequences, child_ids_by_block
from simulation_curator.core.errors import InconsistentSchedule, MissingAttachment
from simulation_curator.core.models import CellKey, RouteBlock, ShapePoint, ShapePointKey

EPOCH = 8 * 3600 * 1000


def _block(block_id, times, shape_id="s"):
    points = tuple(
        ShapePoint(shape_id=shape_id, lat=0.0, lon=0.001 * i, sequence=i + 3, time=t, block_id=block_id)
        for i, t in enumerate(times)
    )
    return RouteBlock(block_id=block_id, route_id="R", stops=(), shape_points=points)


def test_entries_are_relative_to_epoch():
    block = _block("B1", [EPOCH, EPOCH + 5000, EPOCH + 12_000])
    assignments = {
        ShapePointKey("B1", "s", 3): CellKey(1, 2),
        ShapePointKey("B1", "s", 4): CellKey(1, 2),
        ShapePointKey("B1", "s", 5): CellKey(2, 2),
    }
    seq = build_attachment_sequence(block, 10, assignments, {CellKey(1, 2): 2, CellKey(2, 2): 3}, EPOCH)
    assert seq.entries == ((0, 2), (5000, 2), (12_000, 3))
    assert seq.initial_parent == 2
    assert seq.final_parent == 3
    assert seq.first_sequence == 3
    assert seq.child_id == 10


def test_unresolved_point_is_missing_attachment():
    block = _block("B1", [EPOCH, EPOCH + 1000])
    assignments = {ShapePointKey("B1", "s", 3): CellKey(1, 2)}
    with pytest.raises(MissingAttachment) as exc:
        build_attachment_sequence(block, 10, assignments, {CellKey(1, 2): 2}, EPOCH)
    assert (exc.value.block_id, exc.value.shape_id, exc.value.sequence) == ("B1", "s", 4)


def test_untimed_point_is_inconsistent():
    block = _block("B1", [EPOCH, None])
    assignments = {ShapePointKey("B1", "s", 3): CellKey(1, 2), ShapePointKey("B1", "s", 4): CellKey(1, 2)}
    with pytest.raises(InconsistentSchedule):
        build_attachment_sequence(block, 10, assignments, {CellKey(1, 2): 2}, EPOCH)


def test_child_ids_are_sequential_in_block_order():
    blocks = [_block("B1", [EPOCH], "s1"), _block("B2", [EPOCH], "s2")]
    assignments = {ShapePointKey("B1", "s1", 3): CellKey(1, 2), ShapePointKey("B2", "s2", 3): CellKey(1, 2)}
    seqs = build_attachment_sequences(blocks, 7, assignments, {CellKey(1, 2): 2}, EPOCH)
    assert child_ids_by_block(seqs) == {"B1": 7, "B2": 8}


def test_shared_shape_is_looked_up_per_block():
    blocks = [_block("B1", [EPOCH]), _block("B2", [EPOCH])]
    assignments = {ShapePointKey("B1", "s", 3): CellKey(1, 2), ShapePointKey("B2", "s", 3): CellKey(2, 2)}
    seqs = build_attachment_sequences(blocks, 7, assignments, {CellKey(1, 2): 2, CellKey(2, 2): 3}, EPOCH)
    assert [s.initial_parent for s in seqs] == [2, 3]

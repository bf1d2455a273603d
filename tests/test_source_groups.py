import pytest

from simulation_curator.core.attachments import AttachmentSequence
from simulation_curator.core.source_groups import compute_source_groups


def _seq(block_id, child_id, first_sequence, route_id="R1"):
    return AttachmentSequence(
        block_id=block_id, route_id=route_id, child_id=child_id,
        first_sequence=first_sequence, entries=((0, 2),),
    )


def test_seven_vehicles_groups_of_three():
    seqs = [_seq(f"B{i}", 10 + i, i) for i in range(7)]
    groups = compute_source_groups(seqs, 3)
    assert [groups.block_to_group[f"B{i}"] for i in range(7)] == [0, 0, 0, 1, 1, 1, 2]
    assert groups.group_members == {0: [10, 11, 12], 1: [13, 14, 15], 2: [16]}
    assert groups.node_to_groups[16] == [2]


def test_vehicles_are_ordered_by_first_shape_point():
    seqs = [_seq("late", 10, 50), _seq("early", 11, 1), _seq("middle", 12, 20)]
    groups = compute_source_groups(seqs, 2)
    assert groups.block_to_group == {"early": 0, "middle": 0, "late": 1}


def test_groups_never_span_routes():
    seqs = [
        _seq("a1", 10, 0, "R1"), _seq("a2", 11, 1, "R1"),
        _seq("b1", 12, 0, "R2"), _seq("b2", 13, 1, "R2"),
    ]
    groups = compute_source_groups(seqs, 3)
    assert groups.block_to_group == {"a1": 0, "a2": 0, "b1": 1, "b2": 1}


def test_global_grouping_ignores_routes():
    seqs = [
        _seq("a1", 10, 0, "R1"), _seq("a2", 11, 2, "R1"),
        _seq("b1", 12, 1, "R2"), _seq("b2", 13, 3, "R2"),
    ]
    groups = compute_source_groups(seqs, 3, by_route=False)
    assert groups.block_to_group == {"a1": 0, "b1": 0, "a2": 0, "b2": 1}


def test_group_size_must_be_positive():
    with pytest.raises(ValueError):
        compute_source_groups([_seq("a", 10, 0)], 0)

import logging

from simulation_curator.core.models import CellKey, RadioCell, ShapePoint
from simulation_curator.core.resolver import find_closest_cell, order_cells, resolve_towers


def _cell(tower, network, lon, lat=0.0, rng=5000.0):
    return RadioCell(tower_id=tower, network_id=network, lat=lat, lon=lon, range=rng)


def _point(seq, lon, lat=0.0, block_id="B"):
    return ShapePoint(shape_id="s", lat=lat, lon=lon, sequence=seq, time=seq * 1000, block_id=block_id)


def test_nearest_cell_wins():
    cells = [_cell(1, 2, 0.0), _cell(2, 2, 0.01)]
    res = resolve_towers(cells, [_point(0, 0.002), _point(1, 0.009)])
    assert res.assignments[("B", "s", 0)] == CellKey(1, 2)
    assert res.assignments[("B", "s", 1)] == CellKey(2, 2)


def test_tie_resolves_to_lowest_cell_key():
    # identical coordinates, offered in descending key order
    cells = [_cell(5, 1, 0.005), _cell(3, 9, 0.005)]
    res = resolve_towers(cells, [_point(0, 0.004)])
    assert res.assignments[("B", "s", 0)] == CellKey(3, 9)
    assert list(res.towers) == [CellKey(3, 9)]


def test_out_of_range_cell_is_still_assigned():
    cells = [_cell(7, 1, 0.0, rng=10.0)]
    found = find_closest_cell(_point(0, 0.01), order_cells(cells))
    assert found is not None
    cell, distance = found
    assert cell.key == CellKey(7, 1)
    assert distance > cell.range


def test_only_winning_cells_become_towers():
    cells = [_cell(1, 2, 0.0), _cell(2, 2, 0.01), _cell(3, 2, 1.0)]
    res = resolve_towers(cells, [_point(0, 0.0), _point(1, 0.01)])
    assert list(res.towers) == [CellKey(1, 2), CellKey(2, 2)]


def test_no_candidates_leaves_points_unresolved():
    res = resolve_towers([], [_point(0, 0.0)])
    assert dict(res.assignments) == {}
    assert dict(res.towers) == {}
    assert res.cell_for(_point(0, 0.0)) is None


def test_duplicate_cell_keys_keep_last():
    cells = order_cells([_cell(1, 2, 0.0), _cell(1, 2, 0.5), _cell(0, 9, 0.1)])
    assert [c.key for c in cells] == [CellKey(0, 9), CellKey(1, 2)]
    assert cells[1].lon == 0.5


def test_resolution_is_read_only():
    res = resolve_towers([_cell(1, 2, 0.0)], [_point(0, 0.0)])
    try:
        res.towers[CellKey(9, 9)] = None
    except TypeError:
        pass
    else:
        raise AssertionError("towers mapping should be immutable")


def test_out_of_range_match_is_logged(caplog):
    with caplog.at_level(logging.WARNING, logger="simulation_curator.core.resolver"):
        resolve_towers([_cell(7, 1, 0.0, rng=10.0)], [_point(0, 0.01)])
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING and "but range is" in r.getMessage()]
    assert len(warnings) == 1


def test_in_range_match_is_not_logged(caplog):
    with caplog.at_level(logging.WARNING, logger="simulation_curator.core.resolver"):
        resolve_towers([_cell(7, 1, 0.0, rng=5000.0)], [_point(0, 0.01)])
    assert not [r for r in caplog.records if "but range is" in r.getMessage()]


def test_same_shape_key_in_two_blocks_resolves_separately():
    # same shape id and sequence, different coordinates
    cells = [_cell(1, 2, 0.0), _cell(2, 2, 0.01)]
    res = resolve_towers(cells, [_point(0, 0.0, block_id="B1"), _point(0, 0.01, block_id="B2")])
    assert res.assignments[("B1", "s", 0)] == CellKey(1, 2)
    assert res.assignments[("B2", "s", 0)] == CellKey(2, 2)

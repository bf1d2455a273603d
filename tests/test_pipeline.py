import pytest

from simulation_curator.config import CuratorConfig
from simulation_curator.core.errors import MissingAttachment
from simulation_curator.core.models import EventAction, RadioCell, RouteBlock, ShapePoint, Stop
from simulation_curator.core.pipeline import run_pipeline
from simulation_curator.sim.output import reconnects_document
from simulation_curator.sim.scenario import demo_scenario, synthetic_scenario
from simulation_curator.sim.simulator import attachment_counts, final_parent_counts, summarize_reconnects

NO_BATCHING = CuratorConfig().replace(batch_interval_ms=0, source_group_size=None)
BATCHING = CuratorConfig().replace(batch_interval_ms=20_000, batch_gap_ms=500, source_group_size=None)


def test_demo_without_batching():
    blocks, cells, start, end = demo_scenario()
    result = run_pipeline(blocks, cells, start, end, NO_BATCHING)

    # tower (100, 2) -> node 2, tower (200, 2) -> node 3; vehicles follow as 4 and 5
    assert sorted(result.topology.nodes) == [2, 3]
    assert result.reconnects.initial_parents == [(2, 4), (3, 5)]
    updates = result.reconnects.topology_updates
    assert [u.timestamp_ms for u in updates] == [300_000, 408_000]
    assert [(e.parent_id, e.child_id, e.action) for e in updates[0].events] == [
        (2, 4, EventAction.REMOVE), (3, 4, EventAction.ADD),
    ]
    assert [(e.parent_id, e.child_id, e.action) for e in updates[1].events] == [
        (3, 5, EventAction.REMOVE), (2, 5, EventAction.ADD),
    ]
    assert summarize_reconnects(result.reconnects) == {
        "mobile_nodes": 2, "batches": 2, "events": 4, "reconnects": 2, "last_batch_ms": 408_000,
    }


def test_demo_with_batching():
    blocks, cells, start, end = demo_scenario()
    result = run_pipeline(blocks, cells, start, end, BATCHING)
    # 300s falls in window 15, 408s in window 20
    assert [u.timestamp_ms for u in result.reconnects.topology_updates] == [7500, 10_000]


def test_identical_inputs_give_identical_output():
    blocks, cells, start, end = synthetic_scenario(8, 20, seed=7)
    first = run_pipeline(blocks, cells, start, end, BATCHING)
    second = run_pipeline(list(blocks), list(reversed(cells)), start, end, BATCHING)
    assert reconnects_document(first.reconnects) == reconnects_document(second.reconnects)


@pytest.mark.parametrize("config", [NO_BATCHING, BATCHING])
def test_attachments_are_conserved(config):
    blocks, cells, start, end = synthetic_scenario(10, 25, seed=3)
    result = run_pipeline(blocks, cells, start, end, config)
    assert attachment_counts(result.reconnects) == final_parent_counts(result.sequences)


def test_single_cell_gives_no_updates():
    blocks, _, start, end = demo_scenario()
    cells = [RadioCell(tower_id=1, network_id=2, lat=52.52, lon=13.415, range=5000.0)]
    result = run_pipeline(blocks, cells, start, end, NO_BATCHING)
    assert result.reconnects.topology_updates == []
    assert result.reconnects.initial_parents == [(2, 3), (2, 4)]


def test_vehicle_outside_window_is_excluded():
    blocks, cells, start, _ = demo_scenario()
    result = run_pipeline(blocks, cells, start, start + 60_000, NO_BATCHING)
    assert result.excluded_blocks == ["B2"]
    assert [b.block_id for b in result.blocks] == ["B1"]
    assert [p.sequence for p in result.blocks[0].shape_points] == [0, 1]


def test_no_candidate_cells_is_fatal():
    blocks, _, start, end = demo_scenario()
    with pytest.raises(MissingAttachment):
        run_pipeline(blocks, [], start, end, NO_BATCHING)


def test_source_groups_are_optional():
    blocks, cells, start, end = demo_scenario()
    assert run_pipeline(blocks, cells, start, end, NO_BATCHING).source_groups is None
    grouped = run_pipeline(blocks, cells, start, end, NO_BATCHING.replace(source_group_size=1))
    assert grouped.source_groups.block_to_group == {"B1": 0, "B2": 1}
    assert grouped.source_groups.node_to_groups == {4: [0], 5: [1]}


def test_invalid_config_is_rejected():
    blocks, cells, start, end = demo_scenario()
    with pytest.raises(ValueError):
        run_pipeline(blocks, cells, start, end, NO_BATCHING.replace(source_group_size=0))


def test_circular_block_reconnects_once():
    eight = 8 * 3600 * 1000
    lons = [0.0, 0.001, 0.002, 0.001, 0.0]
    points = tuple(ShapePoint(shape_id="loop", lat=0.0, lon=lon, sequence=i) for i, lon in enumerate(lons))
    stops = tuple(
        Stop(stop_id=stop_id, name=stop_id, arrival=t, departure=t, lat=0.0, lon=lon)
        for stop_id, lon, t in [("a", 0.0, eight), ("b", 0.002, eight + 120_000), ("a", 0.0, eight + 240_000)]
    )
    block = RouteBlock(block_id="L1", route_id="R", stops=stops, shape_points=points)
    cells = [
        RadioCell(tower_id=1, network_id=2, lat=0.0, lon=0.0, range=1000.0),
        RadioCell(tower_id=2, network_id=2, lat=0.0, lon=0.0025, range=1000.0),
    ]
    result = run_pipeline([block], cells, eight, eight + 600_000, NO_BATCHING)

    assert result.reconnects.initial_parents == [(2, 4)]
    updates = result.reconnects.topology_updates
    assert [u.timestamp_ms for u in updates] == [120_000]
    assert [(e.parent_id, e.child_id, e.action) for e in updates[0].events] == [
        (2, 4, EventAction.REMOVE), (3, 4, EventAction.ADD),
    ]

from simulation_curator.core.models import CellKey, FixedTopology, RadioCell
from simulation_curator.core.topology import create_single_fog_layer, first_child_id


def test_nodes_follow_cell_key_order():
    cells = [
        RadioCell(tower_id=5, network_id=1, lat=52.0, lon=13.0, range=100.0),
        RadioCell(tower_id=3, network_id=2, lat=52.1, lon=13.1, range=100.0),
        RadioCell(tower_id=3, network_id=1, lat=52.2, lon=13.2, range=100.0),
    ]
    topology, cell_to_node = create_single_fog_layer(2, 65535, cells)
    assert cell_to_node == {CellKey(3, 1): 2, CellKey(3, 2): 3, CellKey(5, 1): 4}
    assert topology.nodes[2] == [13.2, 52.2]
    assert topology.slots == {2: 65535, 3: 65535, 4: 65535}
    assert topology.children == {2: [], 3: [], 4: []}
    assert first_child_id(topology, 2) == 5


def test_first_child_of_empty_topology_is_start_id():
    assert first_child_id(FixedTopology(), 2) == 2

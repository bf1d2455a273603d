from typing import Dict, Iterable, Tuple

from .models import CellKey, FixedTopology, NodeId, RadioCell


def create_single_fog_layer(start_id: int, default_capacity: int, cells: Iterable[RadioCell]) -> Tuple[FixedTopology, Dict[CellKey, NodeId]]:
    """One topology node per radio cell, ids assigned in cell-key order from ``start_id``."""
    topology = FixedTopology()
    cell_to_node: Dict[CellKey, NodeId] = {}
    for i, cell in enumerate(sorted(cells, key=lambda c: c.key)):
        node_id = start_id + i
        topology.nodes[node_id] = [cell.lon, cell.lat]
        topology.slots[node_id] = default_capacity
        topology.children[node_id] = []
        cell_to_node[cell.key] = node_id
    return topology, cell_to_node


def first_child_id(topology: FixedTopology, start_id: int) -> NodeId:
    highest = topology.max_node_id()
    return (highest if highest is not None else start_id - 1) + 1

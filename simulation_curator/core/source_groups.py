from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from .attachments import AttachmentSequence
from .models import NodeId


@dataclass
class SourceGroups:
    block_to_group: Dict[str, int] = field(default_factory=dict)
    node_to_groups: Dict[NodeId, List[int]] = field(default_factory=dict)
    group_members: Dict[int, List[NodeId]] = field(default_factory=dict)


def _next_boundary(counter: int, size: int) -> int:
    return -(-counter // size) * size


def compute_source_groups(sequences: Sequence[AttachmentSequence], group_size: int, by_route: bool = True) -> SourceGroups:
    """Assign vehicles to logical sources of ``group_size`` physical vehicles.

    Vehicles are ordered by the sequence number of their first shape point, so
    consecutive group members start close to each other along the route. With
    ``by_route`` a group never spans two routes.
    """
    if group_size <= 0:
        raise ValueError("group_size must be positive")

    routes: Dict[str, List[AttachmentSequence]] = {}
    for s in sequences:
        routes.setdefault(s.route_id if by_route else "", []).append(s)

    groups = SourceGroups()
    counter = 0
    for route_id in sorted(routes):
        counter = _next_boundary(counter, group_size)
        for s in sorted(routes[route_id], key=lambda v: (v.first_sequence, v.block_id)):
            group_id = counter // group_size
            groups.block_to_group[s.block_id] = group_id
            groups.node_to_groups.setdefault(s.child_id, []).append(group_id)
            groups.group_members.setdefault(group_id, []).append(s.child_id)
            counter += 1
    return groups

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Tuple

Millis = int  # milliseconds since service-day midnight (may exceed 24h)
NodeId = int


class CellKey(NamedTuple):
    """Composite cell identity. Tuple ordering gives the tie-break order."""
    tower_id: int
    network_id: int


class ShapePointKey(NamedTuple):
    # GTFS shapes are shared between blocks; the block keeps keys apart
    block_id: str
    shape_id: str
    sequence: int


@dataclass(frozen=True)
class Stop:
    stop_id: str
    name: str
    arrival: Millis
    departure: Millis
    lat: float
    lon: float
    trip_id: str = ""

    @property
    def center_time(self) -> Millis:
        return (self.arrival + self.departure) // 2


@dataclass(frozen=True)
class ShapePoint:
    shape_id: str
    lat: float
    lon: float
    sequence: int
    time: Optional[Millis] = None
    block_id: str = ""

    @property
    def key(self) -> ShapePointKey:
        return ShapePointKey(self.block_id, self.shape_id, self.sequence)


@dataclass(frozen=True)
class RouteBlock:
    # One physical vehicle: its trips concatenated back-to-back
    block_id: str
    route_id: str
    stops: Tuple[Stop, ...]
    shape_points: Tuple[ShapePoint, ...]


@dataclass(frozen=True)
class RadioCell:
    tower_id: int
    network_id: int
    lat: float
    lon: float
    range: float

    @property
    def key(self) -> CellKey:
        return CellKey(self.tower_id, self.network_id)


@dataclass
class FixedTopology:
    nodes: Dict[NodeId, List[float]] = field(default_factory=dict)  # id -> [lon, lat]
    slots: Dict[NodeId, int] = field(default_factory=dict)
    children: Dict[NodeId, List[NodeId]] = field(default_factory=dict)

    def max_node_id(self) -> Optional[NodeId]:
        return max(self.nodes) if self.nodes else None


class EventAction(str, Enum):
    ADD = "add"
    REMOVE = "remove"


@dataclass(frozen=True)
class ReconnectEvent:
    parent_id: NodeId
    child_id: NodeId
    action: EventAction


@dataclass
class TopologyUpdate:
    timestamp_ms: Millis
    events: List[ReconnectEvent] = field(default_factory=list)


@dataclass
class SimulatedReconnects:
    initial_parents: List[Tuple[NodeId, NodeId]]  # (parent, child)
    topology_updates: List[TopologyUpdate]

    def event_count(self) -> int:
        return sum(len(u.events) for u in self.topology_updates)

"""Artificial topology-change generator.

Mobile devices are spread evenly over a ring of fog "quadrants". Each rotation
moves the first ``n`` devices of every quadrant to its neighbour with the next
lower id; the lowest quadrant hands its movers to the highest one.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, List, Optional, Tuple

from simulation_curator.core.batcher import reconnect_pair
from simulation_curator.core.models import FixedTopology, Millis, NodeId, ReconnectEvent, SimulatedReconnects, TopologyUpdate


@dataclass
class MobileEntry:
    device_id: NodeId


@dataclass(frozen=True)
class QuadrantConfig:
    num_quadrants: int
    devices_per_quadrant: int
    quadrant_start_id: int
    mobile_start_id: int


class MobileDeviceQuadrants:
    def __init__(self, quadrant_map: Optional[Dict[NodeId, Deque[MobileEntry]]] = None):
        self.quadrant_map: Dict[NodeId, Deque[MobileEntry]] = dict(sorted((quadrant_map or {}).items()))

    @classmethod
    def populate(cls, num_quadrants: int, devices_per_quadrant: int, quadrant_start_id: int, mobile_start_id: int) -> "MobileDeviceQuadrants":
        if num_quadrants <= 0:
            raise ValueError("num_quadrants must be positive")
        if quadrant_start_id + num_quadrants - 1 >= mobile_start_id:
            raise ValueError("quadrant ids must stay below mobile_start_id")
        quadrant_map: Dict[NodeId, Deque[MobileEntry]] = {}
        for i in range(num_quadrants):
            quadrant_map[quadrant_start_id + i] = deque(
                MobileEntry(device_id=mobile_start_id + i * devices_per_quadrant + j)
                for j in range(devices_per_quadrant)
            )
        return cls(quadrant_map)

    @classmethod
    def from_config(cls, config: QuadrantConfig) -> "MobileDeviceQuadrants":
        return cls.populate(config.num_quadrants, config.devices_per_quadrant, config.quadrant_start_id, config.mobile_start_id)

    def rotate_devices(self, num_devices: int) -> List[ReconnectEvent]:
        events: List[ReconnectEvent] = []
        moving: List[Tuple[NodeId, MobileEntry]] = []
        for quadrant_id in sorted(self.quadrant_map, reverse=True):
            devices = self.quadrant_map[quadrant_id]
            for old_quadrant, device in moving:
                events.extend(reconnect_pair(device.device_id, old_quadrant, quadrant_id))
                devices.append(device)
            moving = []
            for _ in range(num_devices):
                if devices:
                    moving.append((quadrant_id, devices.popleft()))
        # the lowest quadrant's movers wrap around to the highest
        highest = max(self.quadrant_map)
        for old_quadrant, device in moving:
            events.extend(reconnect_pair(device.device_id, old_quadrant, highest))
            self.quadrant_map[highest].append(device)
        return events

    def update_vector(self, runtime_ms: Millis, interval_ms: Millis, num_devices: int) -> List[TopologyUpdate]:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        updates = []
        timestamp = 0
        while timestamp < runtime_ms:
            updates.append(TopologyUpdate(timestamp_ms=timestamp, events=self.rotate_devices(num_devices)))
            timestamp += interval_ms
        return updates

    def initial_update(self) -> List[Tuple[NodeId, NodeId]]:
        return [(qid, d.device_id) for qid, devices in self.quadrant_map.items() for d in devices]

    def source_groups(self, subtract: int) -> Dict[NodeId, List[int]]:
        return {d.device_id: [qid - subtract] for qid, devices in self.quadrant_map.items() for d in devices}

    def fixed_topology(self, subtract: int, default_capacity: int = 65535) -> FixedTopology:
        topology = FixedTopology()
        for qid in self.quadrant_map:
            topology.nodes[qid - subtract] = [0.0, 0.0]
            topology.slots[qid - subtract] = default_capacity
            topology.children[qid - subtract] = []
        return topology

    def simulated_reconnects(self, runtime_ms: Millis, interval_ms: Millis, num_devices: int) -> SimulatedReconnects:
        # initial parents must be captured before rotating
        initial = self.initial_update()
        return SimulatedReconnects(initial_parents=initial, topology_updates=self.update_vector(runtime_ms, interval_ms, num_devices))

"""Turns per-vehicle attachment sequences into topology add/remove events.

Each vehicle is scanned with a small state machine:

  Stable(parent)
      no change outstanding. Without batching every change is emitted
      immediately and the vehicle stays Stable.
  PendingBatch(parent_before_window, pending_add, window_start, output_timestamp)
      at least one change was seen inside the current batch window. The pending
      remove is always the parent held before the window; later changes in the
      same window only replace the pending add.
  flush / finish
      a change in a later window (or the end of the sequence) flushes the pending
      pair at the window's output timestamp, unless it is a net-zero move.

Window k covers simulated time [k * interval, (k + 1) * interval) and is emitted at
k * gap, so all vehicles agree on the output timestamp of a window.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .attachments import AttachmentSequence
from .models import EventAction, Millis, NodeId, ReconnectEvent, SimulatedReconnects, TopologyUpdate

logger = logging.getLogger(__name__)

EventPair = Tuple[ReconnectEvent, ReconnectEvent]
Emission = Tuple[Millis, EventPair]


@dataclass(frozen=True)
class BatchSettings:
    interval_ms: Optional[int] = None
    gap_ms: int = 0

    @property
    def enabled(self) -> bool:
        return self.interval_ms is not None and self.interval_ms > 0

    def window_index(self, timestamp: Millis) -> int:
        return timestamp // self.interval_ms


@dataclass(frozen=True)
class Stable:
    parent: NodeId

    @property
    def current_parent(self) -> NodeId:
        return self.parent


@dataclass(frozen=True)
class PendingBatch:
    parent_before_window: NodeId
    pending_add: NodeId
    window_start: Millis
    output_timestamp: Millis

    @property
    def pending_remove(self) -> NodeId:
        return self.parent_before_window

    @property
    def current_parent(self) -> NodeId:
        return self.pending_add

    @property
    def is_net_zero(self) -> bool:
        return self.pending_remove == self.pending_add


VehicleState = Union[Stable, PendingBatch]


def reconnect_pair(child_id: NodeId, old_parent: NodeId, new_parent: NodeId) -> EventPair:
    return (
        ReconnectEvent(parent_id=old_parent, child_id=child_id, action=EventAction.REMOVE),
        ReconnectEvent(parent_id=new_parent, child_id=child_id, action=EventAction.ADD),
    )


def _open_window(settings: BatchSettings, timestamp: Millis, before: NodeId, parent: NodeId) -> PendingBatch:
    k = settings.window_index(timestamp)
    return PendingBatch(
        parent_before_window=before,
        pending_add=parent,
        window_start=k * settings.interval_ms,
        output_timestamp=k * settings.gap_ms,
    )


def flush(state: VehicleState, child_id: NodeId) -> List[Emission]:
    if isinstance(state, Stable) or state.is_net_zero:
        return []
    return [(state.output_timestamp, reconnect_pair(child_id, state.pending_remove, state.pending_add))]


def on_attachment(
    state: VehicleState,
    child_id: NodeId,
    timestamp: Millis,
    parent: NodeId,
    settings: BatchSettings,
) -> Tuple[VehicleState, List[Emission]]:
    current = state.current_parent
    if parent == current:
        return state, []

    if not settings.enabled:
        return Stable(parent), [(timestamp, reconnect_pair(child_id, current, parent))]

    if isinstance(state, Stable):
        return _open_window(settings, timestamp, current, parent), []

    if timestamp < state.window_start + settings.interval_ms:
        return replace(state, pending_add=parent), []

    # change falls into a later window
    return _open_window(settings, timestamp, current, parent), flush(state, child_id)


def finish(state: VehicleState, child_id: NodeId) -> Tuple[Stable, List[Emission]]:
    return Stable(state.current_parent), flush(state, child_id)


def vehicle_emissions(sequence: AttachmentSequence, settings: BatchSettings) -> List[Emission]:
    state: VehicleState = Stable(sequence.initial_parent)
    emissions: List[Emission] = []
    for timestamp, parent in sequence.entries[1:]:
        state, emitted = on_attachment(state, sequence.child_id, timestamp, parent, settings)
        emissions.extend(emitted)
    _, emitted = finish(state, sequence.child_id)
    emissions.extend(emitted)
    return emissions


def build_reconnects(sequences: Iterable[AttachmentSequence], settings: BatchSettings) -> SimulatedReconnects:
    ordered = sorted(sequences, key=lambda s: s.child_id)
    updates: Dict[Millis, TopologyUpdate] = {}
    reconnect_count = 0
    for sequence in ordered:
        for timestamp, pair in vehicle_emissions(sequence, settings):
            updates.setdefault(timestamp, TopologyUpdate(timestamp_ms=timestamp)).events.extend(pair)
            reconnect_count += 1
    logger.info("Total reconnects: %d", reconnect_count)
    return SimulatedReconnects(
        initial_parents=[(s.initial_parent, s.child_id) for s in ordered],
        topology_updates=[updates[ts] for ts in sorted(updates)],
    )

from typing import Dict, List

from simulation_curator.core.attachments import AttachmentSequence
from simulation_curator.core.models import EventAction, NodeId, SimulatedReconnects

# Summary figures for a curated run, printed by the CLI and returned by the API


def summarize_reconnects(reconnects: SimulatedReconnects) -> Dict[str, int]:
    updates = reconnects.topology_updates
    if not updates:
        return {"mobile_nodes": len(reconnects.initial_parents), "batches": 0, "events": 0, "reconnects": 0, "last_batch_ms": 0}
    events = reconnects.event_count()
    return {
        "mobile_nodes": len(reconnects.initial_parents),
        "batches": len(updates),
        "events": events,
        "reconnects": events // 2,
        "last_batch_ms": updates[-1].timestamp_ms,
    }


def attachment_counts(reconnects: SimulatedReconnects) -> Dict[NodeId, int]:
    # initial attachments + adds - removes, per parent node, after the last update
    counts: Dict[NodeId, int] = {}
    for parent, _ in reconnects.initial_parents:
        counts[parent] = counts.get(parent, 0) + 1
    for update in reconnects.topology_updates:
        for ev in update.events:
            delta = 1 if ev.action == EventAction.ADD else -1
            counts[ev.parent_id] = counts.get(ev.parent_id, 0) + delta
    return {k: v for k, v in counts.items() if v != 0}


def final_parent_counts(sequences: List[AttachmentSequence]) -> Dict[NodeId, int]:
    counts: Dict[NodeId, int] = {}
    for s in sequences:
        counts[s.final_parent] = counts.get(s.final_parent, 0) + 1
    return counts

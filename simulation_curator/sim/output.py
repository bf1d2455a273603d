import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from simulation_curator.core.models import FixedTopology, SimulatedReconnects, TopologyUpdate
from simulation_curator.core.source_groups import SourceGroups

logger = logging.getLogger(__name__)


def topology_document(topology: FixedTopology) -> Dict[str, Any]:
    return {
        "nodes": {str(k): list(v) for k, v in sorted(topology.nodes.items())},
        "slots": {str(k): v for k, v in sorted(topology.slots.items())},
        "children": {str(k): list(v) for k, v in sorted(topology.children.items())},
    }


def update_document(update: TopologyUpdate) -> Dict[str, Any]:
    return {
        "timestamp_ms": int(update.timestamp_ms),
        "events": [
            {"parentId": ev.parent_id, "childId": ev.child_id, "action": ev.action.value}
            for ev in update.events
        ],
    }


def reconnects_document(reconnects: SimulatedReconnects) -> Dict[str, Any]:
    return {
        "initial_parents": [[parent, child] for parent, child in reconnects.initial_parents],
        "topology_updates": [update_document(u) for u in reconnects.topology_updates],
    }


def source_groups_document(groups: SourceGroups) -> Dict[str, Any]:
    return {str(node): list(ids) for node, ids in sorted(groups.node_to_groups.items())}


def write_documents(documents: Mapping[str, Optional[Dict[str, Any]]]) -> None:
    """Write each document to its path.

    Everything is serialized before the first file is opened so a serialization
    failure leaves no partial output behind. ``None`` documents are skipped.
    """
    rendered = {
        path: json.dumps(doc, indent=2, ensure_ascii=False)
        for path, doc in documents.items()
        if doc is not None
    }
    for path, text in rendered.items():
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
        logger.info("Wrote %s", target)

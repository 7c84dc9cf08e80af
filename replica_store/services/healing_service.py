"""Restores the replication factor after node failures and recoveries."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from ..messaging import InMemoryBus, MessageEnvelope
from ..models import ActiveReplica, HealingEvent, StoredFile
from .base import BaseService
from .file_catalog import FileCatalog
from .node_registry import NodeRegistry

logger = logging.getLogger(__name__)


@dataclass
class HealingService(BaseService):
    """Fills empty replica slots on healthy nodes.

    Healing never removes or relocates an active replica, and running it again
    against an unchanged node registry is a no-op.
    """

    node_registry: NodeRegistry
    file_catalog: FileCatalog
    bus: InMemoryBus

    def heal(self) -> List[HealingEvent]:
        events: List[HealingEvent] = []
        degraded: List[str] = []
        for entry in self.file_catalog.list_all():
            events.extend(self.heal_file(entry))
            if self.file_catalog.count_active_replicas(entry) < len(entry.replicas):
                degraded.append(entry.name)

        if events:
            self.emit_metric("healing.replicas_created", float(len(events)))
            self.bus.publish(
                MessageEnvelope(
                    topic="healing.events",
                    payload={"replicas": [{"file": e.file_name, "node_id": e.node_id} for e in events]},
                )
            )
        if degraded:
            logger.warning("Files remain below replication factor: %s", ", ".join(degraded))
        return events

    def heal_file(self, entry: StoredFile) -> List[HealingEvent]:
        events: List[HealingEvent] = []
        # Each pass either fills one slot or stops, so the loop is bounded by R.
        while self.file_catalog.count_active_replicas(entry) < len(entry.replicas):
            node_id = self._find_candidate(entry)
            if node_id is None:
                break
            slot_index = next(i for i, slot in enumerate(entry.replicas) if not slot.is_active)
            entry.replicas[slot_index] = ActiveReplica(node_id)
            logger.info("[HEAL] File '%s' replicated to node %d to maintain fault tolerance", entry.name, node_id)
            events.append(HealingEvent(file_name=entry.name, node_id=node_id))
        return events

    def _find_candidate(self, entry: StoredFile) -> Optional[int]:
        hosting = set(entry.active_node_ids())
        for node_id in self.node_registry.healthy_node_ids():
            if node_id not in hosting:
                return node_id
        return None

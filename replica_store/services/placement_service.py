"""Initial replica placement for newly created files."""

from __future__ import annotations

from dataclasses import dataclass

from ..models import EMPTY_SLOT, ActiveReplica, StoredFile
from .base import BaseService
from .node_registry import NodeRegistry


@dataclass
class PlacementEngine(BaseService):
    """Assigns replicas to the lowest-numbered healthy nodes.

    Placement is deterministic: the same node health snapshot always yields the
    same assignment. There is no load awareness; the only anti-affinity rule is
    one replica per node per file.
    """

    node_registry: NodeRegistry

    def place(self, entry: StoredFile) -> int:
        slots = len(entry.replicas)
        entry.replicas[:] = [EMPTY_SLOT] * slots
        created = 0
        for node_id in self.node_registry.healthy_node_ids():
            if created >= slots:
                break
            entry.replicas[created] = ActiveReplica(node_id)
            created += 1
        self.emit_metric("placement.replicas_created", float(created), file=entry.name)
        return created

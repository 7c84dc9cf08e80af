"""Store façade consumed by the shell, the HTTP API and tests."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import List, Union

from ..config import StoreConfig
from ..errors import InvalidFileName, InvalidRequest, PayloadTooLarge
from ..messaging import InMemoryBus, MessageEnvelope
from ..models import (
    ActiveReplica,
    CreateResult,
    FileListing,
    NodeStatus,
    NodeTransition,
    ReadResult,
    ReplicaLocation,
)
from .activity_service import ActivityService
from .file_catalog import FileCatalog
from .healing_service import HealingService
from .node_registry import NodeRegistry
from .query_service import QueryService

logger = logging.getLogger(__name__)


@dataclass
class StoreGateway:
    """Validated entry points into the store.

    Every call runs under one re-entrant lock so a failure or recovery event,
    its invalidation and the healing pass that follows observe a single node
    registry snapshot.
    """

    config: StoreConfig
    node_registry: NodeRegistry
    file_catalog: FileCatalog
    healing_service: HealingService
    query_service: QueryService
    activity_service: ActivityService
    bus: InMemoryBus
    _lock: threading.RLock = field(default_factory=threading.RLock, init=False, repr=False)

    # Files -----------------------------------------------------------------

    def create_file(self, name: str, payload: Union[bytes, str]) -> CreateResult:
        data = self._validate_payload(payload)
        self._validate_name(name)
        with self._lock:
            entry = self.file_catalog.create(name, data)
            node_ids = entry.active_node_ids()
            result = CreateResult(
                name=entry.name,
                replica_count=len(node_ids),
                node_ids=node_ids,
                replication_factor=self.file_catalog.replication_factor,
            )
            self.bus.publish(
                MessageEnvelope(
                    topic="file.created",
                    payload={"file": name, "node_ids": node_ids, "degraded": result.degraded},
                )
            )
        return result

    def read_file(self, name: str) -> ReadResult:
        with self._lock:
            return self.query_service.read(name)

    def list_files(self) -> List[FileListing]:
        with self._lock:
            listings: List[FileListing] = []
            for entry in self.file_catalog.list_all():
                locations = [
                    ReplicaLocation(node_id=slot.node_id, node_healthy=self.node_registry.is_healthy(slot.node_id))
                    for slot in entry.replicas
                    if isinstance(slot, ActiveReplica)
                ]
                listings.append(FileListing(name=entry.name, payload=entry.payload, replicas=locations))
            return listings

    # Nodes -----------------------------------------------------------------

    def list_nodes(self) -> List[NodeStatus]:
        with self._lock:
            return self.node_registry.list_all()

    def fail_node(self, node_id: int) -> NodeTransition:
        with self._lock:
            self.node_registry.mark_down(node_id)
            invalidated = self.file_catalog.invalidate_replicas_on_node(node_id)
            healed = self.healing_service.heal()
            return self._record_transition(NodeTransition(node_id, False, invalidated, healed))

    def recover_node(self, node_id: int) -> NodeTransition:
        with self._lock:
            self.node_registry.mark_up(node_id)
            healed = self.healing_service.heal()
            return self._record_transition(NodeTransition(node_id, True, [], healed))

    # Activity --------------------------------------------------------------

    def recent_activity(self, limit: int = 10) -> List[MessageEnvelope]:
        return self.activity_service.recent(limit)

    # Internals -------------------------------------------------------------

    def _record_transition(self, transition: NodeTransition) -> NodeTransition:
        self.bus.publish(
            MessageEnvelope(
                topic="node.transitions",
                payload={
                    "node_id": transition.node_id,
                    "status": "up" if transition.healthy else "down",
                    "invalidated": list(transition.invalidated_files),
                    "healed": len(transition.healing_events),
                },
            )
        )
        return transition

    def _validate_name(self, name: str) -> None:
        limit = self.config.catalog.max_name_length
        if not isinstance(name, str) or not name:
            raise InvalidFileName("File name must be a non-empty string")
        if len(name) > limit:
            raise InvalidFileName(f"File name longer than {limit} characters")

    def _validate_payload(self, payload: Union[bytes, str]) -> bytes:
        if isinstance(payload, str):
            data = payload.encode("utf-8")
        elif isinstance(payload, (bytes, bytearray, memoryview)):
            data = bytes(payload)
        else:
            raise InvalidRequest(f"Payload must be bytes or str, got {type(payload).__name__}")
        limit = self.config.catalog.max_payload_bytes
        if len(data) > limit:
            raise PayloadTooLarge(f"Payload of {len(data)} bytes exceeds limit of {limit} bytes")
        return data

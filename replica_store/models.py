"""Data models shared across the store services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Union


@dataclass
class Node:
    node_id: int
    is_up: bool = True


@dataclass(frozen=True)
class EmptySlot:
    """Replica slot that designates no node."""

    @property
    def is_active(self) -> bool:
        return False


@dataclass(frozen=True)
class ActiveReplica:
    """Replica slot assigned to a node. The node may since have gone down."""

    node_id: int

    @property
    def is_active(self) -> bool:
        return True


ReplicaSlot = Union[EmptySlot, ActiveReplica]

EMPTY_SLOT = EmptySlot()


@dataclass
class StoredFile:
    slot_index: int
    name: str
    payload: bytes
    replicas: List[ReplicaSlot] = field(default_factory=list)

    def active_node_ids(self) -> List[int]:
        return [slot.node_id for slot in self.replicas if isinstance(slot, ActiveReplica)]


@dataclass
class NodeStatus:
    node_id: int
    healthy: bool


@dataclass
class ReplicaLocation:
    node_id: int
    node_healthy: bool


@dataclass
class FileListing:
    name: str
    payload: bytes
    replicas: List[ReplicaLocation]


@dataclass
class HealingEvent:
    file_name: str
    node_id: int


@dataclass
class CreateResult:
    name: str
    replica_count: int
    node_ids: List[int]
    replication_factor: int

    @property
    def degraded(self) -> bool:
        return self.replica_count < self.replication_factor


@dataclass
class ReadResult:
    name: str
    node_id: int
    payload: bytes


@dataclass
class NodeTransition:
    node_id: int
    healthy: bool
    invalidated_files: List[str] = field(default_factory=list)
    healing_events: List[HealingEvent] = field(default_factory=list)


@dataclass
class ObservabilityEvent:
    event_type: str
    message: str
    attributes: Optional[dict] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

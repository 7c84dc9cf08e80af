"""Fixed-capacity table of named files and their replica slots."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from ..errors import CatalogFull, DuplicateName, NoHealthyNodes, NotFound
from ..models import EMPTY_SLOT, ActiveReplica, StoredFile
from .base import BaseService
from .node_registry import NodeRegistry
from .placement_service import PlacementEngine

logger = logging.getLogger(__name__)


@dataclass
class FileCatalog(BaseService):
    node_registry: NodeRegistry
    placement_engine: PlacementEngine
    _slots: List[Optional[StoredFile]] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        self._slots = [None] * self.config.catalog.max_files

    @property
    def capacity(self) -> int:
        return len(self._slots)

    @property
    def replication_factor(self) -> int:
        return self.config.replication.replication_factor

    def lookup_by_name(self, name: str) -> StoredFile:
        for entry in self._slots:
            if entry is not None and entry.name == name:
                return entry
        raise NotFound(name)

    def contains(self, name: str) -> bool:
        try:
            self.lookup_by_name(name)
        except NotFound:
            return False
        return True

    def create(self, name: str, payload: bytes) -> StoredFile:
        if self.contains(name):
            raise DuplicateName(name)
        index = self._free_slot()
        if index is None:
            raise CatalogFull(self.capacity)

        entry = StoredFile(
            slot_index=index,
            name=name,
            payload=bytes(payload),
            replicas=[EMPTY_SLOT] * self.replication_factor,
        )
        self._slots[index] = entry
        created = self.placement_engine.place(entry)
        if created == 0:
            self._slots[entry.slot_index] = None
            logger.warning("No UP nodes available; file '%s' not stored", name)
            raise NoHealthyNodes(name)

        if created < self.replication_factor:
            logger.warning(
                "File '%s' stored, but only %d replicas created (needed %d)",
                name,
                created,
                self.replication_factor,
            )
        else:
            logger.info("File '%s' stored with %d replicas", name, created)
        self.emit_metric("catalog.files_created", 1.0)
        self.emit_event("file_created", name=name, replicas=created)
        return entry

    def invalidate_replicas_on_node(self, node_id: int) -> List[str]:
        """Empty every active slot naming ``node_id``; returns the affected file names."""
        affected: List[str] = []
        for entry in self.list_all():
            touched = False
            for index, slot in enumerate(entry.replicas):
                if isinstance(slot, ActiveReplica) and slot.node_id == node_id:
                    entry.replicas[index] = EMPTY_SLOT
                    touched = True
            if touched:
                affected.append(entry.name)
        if affected:
            logger.debug("Invalidated replicas on node %d for %s", node_id, affected)
        return affected

    @staticmethod
    def count_active_replicas(entry: StoredFile) -> int:
        return sum(1 for slot in entry.replicas if slot.is_active)

    def active_healthy_replica_exists(self, entry: StoredFile) -> bool:
        return self.first_serving_node(entry) is not None

    def first_serving_node(self, entry: StoredFile) -> Optional[int]:
        for slot in entry.replicas:
            if isinstance(slot, ActiveReplica) and self.node_registry.is_healthy(slot.node_id):
                return slot.node_id
        return None

    def list_all(self) -> Iterator[StoredFile]:
        return (entry for entry in self._slots if entry is not None)

    def file_count(self) -> int:
        return sum(1 for entry in self._slots if entry is not None)

    def _free_slot(self) -> Optional[int]:
        for index, entry in enumerate(self._slots):
            if entry is None:
                return index
        return None

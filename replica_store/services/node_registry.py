"""Fixed pool of storage nodes and their up/down state."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from ..errors import AlreadyDown, AlreadyUp, InvalidNode
from ..models import Node, NodeStatus
from .base import BaseService

logger = logging.getLogger(__name__)


@dataclass
class NodeRegistry(BaseService):
    """Dense node ids ``0..N-1``; nodes are never added or removed after startup."""

    _nodes: List[Node] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        self.initialize(self.config.nodes.node_count)

    def initialize(self, node_count: int) -> None:
        self._nodes = [Node(node_id=node_id, is_up=True) for node_id in range(node_count)]
        logger.debug("Initialised %d nodes", node_count)
        self.emit_metric("nodes.healthy", float(node_count))

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    def mark_down(self, node_id: int) -> Node:
        node = self._get(node_id)
        if not node.is_up:
            raise AlreadyDown(node_id)
        node.is_up = False
        logger.info("Node %d marked as DOWN", node_id)
        self.emit_event("node_down", node_id=node_id)
        self.emit_metric("nodes.healthy", float(self.healthy_count()))
        return node

    def mark_up(self, node_id: int) -> Node:
        node = self._get(node_id)
        if node.is_up:
            raise AlreadyUp(node_id)
        node.is_up = True
        logger.info("Node %d is now UP", node_id)
        self.emit_event("node_up", node_id=node_id)
        self.emit_metric("nodes.healthy", float(self.healthy_count()))
        return node

    def is_healthy(self, node_id: int) -> bool:
        return self._get(node_id).is_up

    def healthy_node_ids(self) -> List[int]:
        return [node.node_id for node in self._nodes if node.is_up]

    def healthy_count(self) -> int:
        return len(self.healthy_node_ids())

    def list_all(self) -> List[NodeStatus]:
        return [NodeStatus(node_id=node.node_id, healthy=node.is_up) for node in self._nodes]

    def _get(self, node_id: int) -> Node:
        if not isinstance(node_id, int) or isinstance(node_id, bool) or not 0 <= node_id < len(self._nodes):
            raise InvalidNode(node_id, len(self._nodes))
        return self._nodes[node_id]

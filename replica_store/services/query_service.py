"""Read path: serve a file from the first live replica."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..errors import Unavailable
from ..models import ReadResult
from .base import BaseService
from .file_catalog import FileCatalog

logger = logging.getLogger(__name__)


@dataclass
class QueryService(BaseService):
    file_catalog: FileCatalog

    def read(self, name: str) -> ReadResult:
        entry = self.file_catalog.lookup_by_name(name)
        node_id = self.file_catalog.first_serving_node(entry)
        if node_id is None:
            logger.warning("File '%s' has no replica on an UP node", name)
            self.emit_metric("reads.unavailable", 1.0)
            raise Unavailable(name)
        logger.debug("File '%s' read from node %d", name, node_id)
        self.emit_metric("reads.served", 1.0, node_id=str(node_id))
        return ReadResult(name=entry.name, node_id=node_id, payload=entry.payload)

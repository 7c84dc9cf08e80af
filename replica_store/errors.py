"""Error taxonomy shared by the store services and its front ends."""

from __future__ import annotations


class StoreError(Exception):
    """Base exception for store errors. All of them are recoverable."""

    code = "store_error"


class InvalidConfiguration(StoreError):
    """Startup configuration is out of range."""

    code = "invalid_configuration"


class InvalidNode(StoreError):
    """Node id outside the configured range."""

    code = "invalid_node"

    def __init__(self, node_id: int, node_count: int):
        super().__init__(f"Invalid node id {node_id} (valid range 0 to {node_count - 1})")
        self.node_id = node_id


class AlreadyDown(StoreError):
    """Node is already DOWN."""

    code = "already_down"

    def __init__(self, node_id: int):
        super().__init__(f"Node {node_id} already DOWN")
        self.node_id = node_id


class AlreadyUp(StoreError):
    """Node is already UP."""

    code = "already_up"

    def __init__(self, node_id: int):
        super().__init__(f"Node {node_id} is already UP")
        self.node_id = node_id


class DuplicateName(StoreError):
    code = "duplicate_name"

    def __init__(self, name: str):
        super().__init__(f"File with name '{name}' already exists")
        self.name = name


class CatalogFull(StoreError):
    code = "catalog_full"

    def __init__(self, capacity: int):
        super().__init__(f"File table full ({capacity} files). Cannot create more files")
        self.capacity = capacity


class NoHealthyNodes(StoreError):
    """No UP node could take a replica, so the file was not stored."""

    code = "no_healthy_nodes"

    def __init__(self, name: str):
        super().__init__(f"No UP nodes available. File '{name}' cannot be stored")
        self.name = name


class NotFound(StoreError):
    code = "not_found"

    def __init__(self, name: str):
        super().__init__(f"File '{name}' not found")
        self.name = name


class Unavailable(StoreError):
    """The file exists but every replica sits on a failed node.

    Transient: the file may become readable again after recovery.
    """

    code = "unavailable"

    def __init__(self, name: str):
        super().__init__(f"All replicas of '{name}' are on FAILED nodes. Data temporarily unavailable")
        self.name = name


class InvalidRequest(StoreError):
    """Input rejected at the store boundary."""

    code = "invalid_request"


class InvalidFileName(InvalidRequest):
    code = "invalid_file_name"


class PayloadTooLarge(InvalidRequest):
    code = "payload_too_large"

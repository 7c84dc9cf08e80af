"""Configuration primitives for the replicated file store."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from .errors import InvalidConfiguration


@dataclass
class NodePoolConfig:
    node_count: int = 4


@dataclass
class ReplicationPolicyConfig:
    replication_factor: int = 3


@dataclass
class CatalogConfig:
    max_files: int = 100
    max_name_length: int = 63
    max_payload_bytes: int = 255


@dataclass
class MessageBusConfig:
    backend: str = "in-memory"
    topics: List[str] = field(default_factory=lambda: [
        "file.created",
        "node.transitions",
        "healing.events",
    ])


@dataclass
class ObservabilityConfig:
    log_level: str = "INFO"
    event_history: int = 200


@dataclass
class StoreConfig:
    nodes: NodePoolConfig
    replication: ReplicationPolicyConfig
    catalog: CatalogConfig
    message_bus: MessageBusConfig
    observability: ObservabilityConfig

    @staticmethod
    def default() -> "StoreConfig":
        return StoreConfig(
            nodes=NodePoolConfig(),
            replication=ReplicationPolicyConfig(),
            catalog=CatalogConfig(),
            message_bus=MessageBusConfig(),
            observability=ObservabilityConfig(),
        )

    @staticmethod
    def from_env(environ: Optional[Mapping[str, str]] = None) -> "StoreConfig":
        env = os.environ if environ is None else environ
        cfg = StoreConfig.default()
        cfg.nodes.node_count = _env_int(env, "REPLICA_STORE_NODES", cfg.nodes.node_count)
        cfg.replication.replication_factor = _env_int(
            env, "REPLICA_STORE_REPLICATION_FACTOR", cfg.replication.replication_factor
        )
        cfg.catalog.max_files = _env_int(env, "REPLICA_STORE_MAX_FILES", cfg.catalog.max_files)
        cfg.observability.log_level = env.get("REPLICA_STORE_LOG_LEVEL", cfg.observability.log_level).upper()
        return cfg

    def validate(self) -> None:
        if self.nodes.node_count < 1:
            raise InvalidConfiguration(f"node_count must be >= 1, got {self.nodes.node_count}")
        if self.replication.replication_factor < 1:
            raise InvalidConfiguration(
                f"replication_factor must be >= 1, got {self.replication.replication_factor}"
            )
        if self.catalog.max_files < 1:
            raise InvalidConfiguration(f"max_files must be >= 1, got {self.catalog.max_files}")
        if self.catalog.max_name_length < 1 or self.catalog.max_payload_bytes < 0:
            raise InvalidConfiguration("catalog name/payload limits must be positive")


def _env_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise InvalidConfiguration(f"{key} must be an integer, got {raw!r}") from exc

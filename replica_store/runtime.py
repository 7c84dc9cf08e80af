"""Runtime wiring for the replicated file store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .config import StoreConfig
from .messaging import build_bus, InMemoryBus
from .services.activity_service import ActivityService
from .services.api_gateway import StoreGateway
from .services.file_catalog import FileCatalog
from .services.healing_service import HealingService
from .services.node_registry import NodeRegistry
from .services.placement_service import PlacementEngine
from .services.query_service import QueryService
from .telemetry import TelemetryCollector


@dataclass
class ReplicaStoreRuntime:
    config: StoreConfig
    bus: InMemoryBus
    telemetry: TelemetryCollector
    node_registry: NodeRegistry
    placement_engine: PlacementEngine
    file_catalog: FileCatalog
    healing_service: HealingService
    query_service: QueryService
    activity_service: ActivityService
    gateway: StoreGateway

    @classmethod
    def bootstrap(cls, config: Optional[StoreConfig] = None) -> "ReplicaStoreRuntime":
        cfg = config or StoreConfig.default()
        cfg.validate()
        bus = build_bus(cfg.message_bus.backend)
        telemetry = TelemetryCollector(cfg.observability)

        node_registry = NodeRegistry(config=cfg, telemetry=telemetry)
        placement_engine = PlacementEngine(config=cfg, telemetry=telemetry, node_registry=node_registry)
        file_catalog = FileCatalog(
            config=cfg,
            telemetry=telemetry,
            node_registry=node_registry,
            placement_engine=placement_engine,
        )
        healing_service = HealingService(
            config=cfg,
            telemetry=telemetry,
            node_registry=node_registry,
            file_catalog=file_catalog,
            bus=bus,
        )
        query_service = QueryService(config=cfg, telemetry=telemetry, file_catalog=file_catalog)
        activity_service = ActivityService(
            bus=bus,
            telemetry=telemetry,
            topics=cfg.message_bus.topics,
            history=cfg.observability.event_history,
        )
        gateway = StoreGateway(
            config=cfg,
            node_registry=node_registry,
            file_catalog=file_catalog,
            healing_service=healing_service,
            query_service=query_service,
            activity_service=activity_service,
            bus=bus,
        )
        return cls(
            config=cfg,
            bus=bus,
            telemetry=telemetry,
            node_registry=node_registry,
            placement_engine=placement_engine,
            file_catalog=file_catalog,
            healing_service=healing_service,
            query_service=query_service,
            activity_service=activity_service,
            gateway=gateway,
        )

    def get_metrics_snapshot(self) -> dict[str, float]:
        replication_factor = self.config.replication.replication_factor
        files = list(self.file_catalog.list_all())
        degraded = [entry for entry in files if self.file_catalog.count_active_replicas(entry) < replication_factor]
        unavailable = [entry for entry in files if not self.file_catalog.active_healthy_replica_exists(entry)]
        return {
            "nodes.healthy": float(self.node_registry.healthy_count()),
            "nodes.total": float(self.node_registry.node_count),
            "files.total": float(self.file_catalog.file_count()),
            "files.degraded": float(len(degraded)),
            "files.unavailable": float(len(unavailable)),
            "healing.replicas_created": self.telemetry.metric_total("healing.replicas_created"),
        }

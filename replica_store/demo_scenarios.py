from __future__ import annotations

from typing import Callable, Dict, List, Optional

from .config import StoreConfig
from .errors import StoreError
from .runtime import ReplicaStoreRuntime


class DemoResult(dict):
    """Typed dict wrapper for scenario summaries."""


def _build_runtime(config: Optional[StoreConfig] = None) -> ReplicaStoreRuntime:
    return ReplicaStoreRuntime.bootstrap(config or StoreConfig.default())


def _snapshot_files(runtime: ReplicaStoreRuntime) -> List[Dict[str, object]]:
    return [
        {
            "name": listing.name,
            "replicas": [{"node_id": loc.node_id, "up": loc.node_healthy} for loc in listing.replicas],
        }
        for listing in runtime.gateway.list_files()
    ]


def _snapshot_nodes(runtime: ReplicaStoreRuntime) -> Dict[int, str]:
    return {row.node_id: "UP" if row.healthy else "DOWN" for row in runtime.gateway.list_nodes()}


def _event_lines(runtime: ReplicaStoreRuntime, limit: int) -> List[str]:
    return [f"{event.topic} {event.payload}" for event in runtime.gateway.recent_activity(limit)]


def _summary(name: str, runtime: ReplicaStoreRuntime, event_limit: int, **extra: object) -> DemoResult:
    result = DemoResult(
        scenario=name,
        events=_event_lines(runtime, event_limit),
        files=_snapshot_files(runtime),
        nodes=_snapshot_nodes(runtime),
        metrics=runtime.get_metrics_snapshot(),
    )
    result.update(extra)
    return result


def run_failover_healing_demo(event_limit: int = 25, config: Optional[StoreConfig] = None) -> DemoResult:
    """Create a file, fail its last replica node, and heal onto a spare if one exists."""
    runtime = _build_runtime(config)
    gateway = runtime.gateway
    created = gateway.create_file("a", "x")
    transition = gateway.fail_node(created.node_ids[-1])
    return _summary(
        "failover",
        runtime,
        event_limit,
        initial_nodes=created.node_ids,
        healed=[{"file": e.file_name, "node_id": e.node_id} for e in transition.healing_events],
    )


def run_degraded_create_demo(event_limit: int = 25, config: Optional[StoreConfig] = None) -> DemoResult:
    """Create a file while only node 0 is up."""
    runtime = _build_runtime(config)
    gateway = runtime.gateway
    for node_id in range(1, runtime.node_registry.node_count):
        gateway.fail_node(node_id)
    created = gateway.create_file("b", "y")
    return _summary(
        "degraded",
        runtime,
        event_limit,
        replica_count=created.replica_count,
        degraded=created.degraded,
    )


def run_invalid_node_demo(event_limit: int = 25, config: Optional[StoreConfig] = None) -> DemoResult:
    """Fail a node id outside the pool; nothing changes."""
    runtime = _build_runtime(config)
    error: Optional[str] = None
    try:
        runtime.gateway.fail_node(runtime.node_registry.node_count + 1)
    except StoreError as exc:
        error = exc.code
    return _summary("invalid-node", runtime, event_limit, error=error)


def run_outage_recovery_demo(event_limit: int = 25, config: Optional[StoreConfig] = None) -> DemoResult:
    """Lose every node, observe the outage, then recover node 0."""
    runtime = _build_runtime(config)
    gateway = runtime.gateway
    gateway.create_file("doc", "payload")
    for node_id in range(runtime.node_registry.node_count):
        gateway.fail_node(node_id)
    outage_error: Optional[str] = None
    try:
        gateway.read_file("doc")
    except StoreError as exc:
        outage_error = exc.code
    gateway.recover_node(0)
    read = gateway.read_file("doc")
    return _summary(
        "outage",
        runtime,
        event_limit,
        outage_error=outage_error,
        served_by=read.node_id,
    )


def run_duplicate_name_demo(event_limit: int = 25, config: Optional[StoreConfig] = None) -> DemoResult:
    """Create the same name twice; the second attempt is rejected."""
    runtime = _build_runtime(config)
    gateway = runtime.gateway
    gateway.create_file("a", "first")
    error: Optional[str] = None
    try:
        gateway.create_file("a", "second")
    except StoreError as exc:
        error = exc.code
    payload = gateway.read_file("a").payload.decode("utf-8")
    return _summary("duplicate", runtime, event_limit, error=error, payload=payload)


SCENARIOS: Dict[str, Callable[..., DemoResult]] = {
    "failover": run_failover_healing_demo,
    "degraded": run_degraded_create_demo,
    "invalid-node": run_invalid_node_demo,
    "outage": run_outage_recovery_demo,
    "duplicate": run_duplicate_name_demo,
}


def run_scenario(name: str, *, event_limit: int = 25, config: Optional[StoreConfig] = None) -> DemoResult:
    try:
        runner = SCENARIOS[name]
    except KeyError as exc:
        raise ValueError(f"Unknown scenario '{name}'") from exc
    return runner(event_limit=event_limit, config=config)

"""End-to-end behaviour of the store façade."""

from __future__ import annotations

import pytest

from replica_store.config import StoreConfig
from replica_store.errors import (
    AlreadyDown,
    AlreadyUp,
    DuplicateName,
    InvalidFileName,
    InvalidNode,
    InvalidRequest,
    NoHealthyNodes,
    NotFound,
    PayloadTooLarge,
    Unavailable,
)
from replica_store.runtime import ReplicaStoreRuntime


@pytest.fixture
def runtime() -> ReplicaStoreRuntime:
    return ReplicaStoreRuntime.bootstrap()


def _replicas(runtime: ReplicaStoreRuntime, name: str):
    listing = next(item for item in runtime.gateway.list_files() if item.name == name)
    return [(loc.node_id, loc.node_healthy) for loc in listing.replicas]


def test_failed_node_is_replaced_by_spare(runtime):
    gateway = runtime.gateway
    created = gateway.create_file("a", "x")
    assert created.replica_count == 3
    assert created.node_ids == [0, 1, 2]
    assert not created.degraded

    transition = gateway.fail_node(2)
    assert transition.invalidated_files == ["a"]
    assert [(e.file_name, e.node_id) for e in transition.healing_events] == [("a", 3)]
    assert not runtime.node_registry.is_healthy(2)
    assert _replicas(runtime, "a") == [(0, True), (1, True), (3, True)]


def test_create_with_single_healthy_node_is_degraded(runtime):
    gateway = runtime.gateway
    for node_id in (1, 2, 3):
        gateway.fail_node(node_id)
    created = gateway.create_file("b", "y")
    assert created.replica_count == 1
    assert created.degraded
    assert created.node_ids == [0]


def test_invalid_node_leaves_state_unchanged(runtime):
    gateway = runtime.gateway
    gateway.create_file("a", "x")
    before = (gateway.list_nodes(), _replicas(runtime, "a"))
    with pytest.raises(InvalidNode):
        gateway.fail_node(5)
    with pytest.raises(InvalidNode):
        gateway.recover_node(-1)
    assert (gateway.list_nodes(), _replicas(runtime, "a")) == before


def test_total_outage_then_recovery(runtime):
    gateway = runtime.gateway
    gateway.create_file("doc", "payload")
    for node_id in range(4):
        gateway.fail_node(node_id)
    with pytest.raises(Unavailable):
        gateway.read_file("doc")

    transition = gateway.recover_node(0)
    assert [(e.file_name, e.node_id) for e in transition.healing_events] == [("doc", 0)]
    read = gateway.read_file("doc")
    assert read.node_id == 0
    assert read.payload == b"payload"
    assert _replicas(runtime, "doc") == [(0, True)]

    gateway.recover_node(2)
    assert _replicas(runtime, "doc") == [(0, True), (2, True)]


def test_duplicate_name_keeps_first_file(runtime):
    gateway = runtime.gateway
    gateway.create_file("a", "first")
    with pytest.raises(DuplicateName):
        gateway.create_file("a", "second")
    assert gateway.read_file("a").payload == b"first"
    assert len(gateway.list_files()) == 1


def test_create_with_no_healthy_nodes_fails(runtime):
    gateway = runtime.gateway
    for node_id in range(4):
        gateway.fail_node(node_id)
    with pytest.raises(NoHealthyNodes):
        gateway.create_file("lost", "data")
    assert gateway.list_files() == []
    with pytest.raises(NotFound):
        gateway.read_file("lost")


def test_repeated_transitions_are_rejected(runtime):
    gateway = runtime.gateway
    with pytest.raises(AlreadyUp):
        gateway.recover_node(1)
    gateway.fail_node(1)
    with pytest.raises(AlreadyDown):
        gateway.fail_node(1)


def test_read_served_from_first_live_slot(runtime):
    gateway = runtime.gateway
    gateway.create_file("a", "x")
    assert gateway.read_file("a").node_id == 0
    gateway.fail_node(0)
    assert gateway.read_file("a").node_id == 3


def test_read_succeeds_iff_an_assigned_node_is_healthy():
    cfg = StoreConfig.default()
    cfg.nodes.node_count = 3
    runtime = ReplicaStoreRuntime.bootstrap(cfg)
    gateway = runtime.gateway
    created = gateway.create_file("a", "x")
    for node_id in created.node_ids:
        healthy = [n for n in created.node_ids if runtime.node_registry.is_healthy(n)]
        assert bool(healthy)
        assert gateway.read_file("a").node_id == healthy[0]
        gateway.fail_node(node_id)
    with pytest.raises(Unavailable):
        gateway.read_file("a")


def test_listing_reports_replica_node_health():
    cfg = StoreConfig.default()
    cfg.nodes.node_count = 3
    runtime = ReplicaStoreRuntime.bootstrap(cfg)
    runtime.gateway.create_file("a", "x")
    runtime.node_registry.mark_down(1)
    assert _replicas(runtime, "a") == [(0, True), (1, False), (2, True)]


@pytest.mark.parametrize("name", ["", "n" * 64])
def test_file_name_limits(runtime, name):
    with pytest.raises(InvalidFileName):
        runtime.gateway.create_file(name, "x")


def test_payload_limit(runtime):
    runtime.gateway.create_file("edge", b"p" * 255)
    with pytest.raises(PayloadTooLarge):
        runtime.gateway.create_file("big", b"p" * 256)


def test_activity_history_records_events(runtime):
    gateway = runtime.gateway
    gateway.create_file("a", "x")
    gateway.fail_node(0)
    topics = [event.topic for event in gateway.recent_activity(10)]
    assert topics == ["file.created", "healing.events", "node.transitions"]
    assert gateway.recent_activity(1)[0].payload["status"] == "down"


def test_metrics_snapshot_counts_degraded_files(runtime):
    gateway = runtime.gateway
    gateway.create_file("a", "x")
    gateway.fail_node(0)
    gateway.fail_node(1)
    snapshot = runtime.get_metrics_snapshot()
    assert snapshot["nodes.healthy"] == 2.0
    assert snapshot["files.total"] == 1.0
    assert snapshot["files.degraded"] == 1.0
    assert snapshot["files.unavailable"] == 0.0


def test_activity_follows_configured_topics():
    cfg = StoreConfig.default()
    cfg.message_bus.topics = ["node.transitions"]
    runtime = ReplicaStoreRuntime.bootstrap(cfg)
    runtime.gateway.create_file("a", "x")
    runtime.gateway.fail_node(0)
    assert [event.topic for event in runtime.gateway.recent_activity(10)] == ["node.transitions"]


@pytest.mark.parametrize("payload", [5, None, ["x"]])
def test_non_byte_payloads_are_rejected(runtime, payload):
    with pytest.raises(InvalidRequest):
        runtime.gateway.create_file("a", payload)
    assert runtime.gateway.list_files() == []


def test_bytearray_payload_is_accepted(runtime):
    runtime.gateway.create_file("a", bytearray(b"raw"))
    assert runtime.gateway.read_file("a").payload == b"raw"


@pytest.mark.parametrize("node_id", ["1", 1.0, None, True])
def test_non_integer_node_ids_are_rejected(runtime, node_id):
    with pytest.raises(InvalidNode):
        runtime.gateway.fail_node(node_id)
    with pytest.raises(InvalidNode):
        runtime.gateway.recover_node(node_id)
    assert all(row.healthy for row in runtime.gateway.list_nodes())

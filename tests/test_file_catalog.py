from __future__ import annotations

import pytest

from replica_store.config import StoreConfig
from replica_store.errors import CatalogFull, DuplicateName, NoHealthyNodes, NotFound
from replica_store.models import ActiveReplica, EmptySlot
from replica_store.runtime import ReplicaStoreRuntime


def _bootstrap(node_count: int = 4, replication_factor: int = 3, max_files: int = 100) -> ReplicaStoreRuntime:
    cfg = StoreConfig.default()
    cfg.nodes.node_count = node_count
    cfg.replication.replication_factor = replication_factor
    cfg.catalog.max_files = max_files
    return ReplicaStoreRuntime.bootstrap(cfg)


def test_create_places_replicas_on_lowest_healthy_nodes():
    runtime = _bootstrap()
    entry = runtime.file_catalog.create("a", b"x")
    assert entry.replicas == [ActiveReplica(0), ActiveReplica(1), ActiveReplica(2)]
    assert runtime.file_catalog.count_active_replicas(entry) == 3


def test_placement_skips_failed_nodes():
    runtime = _bootstrap()
    runtime.node_registry.mark_down(1)
    entry = runtime.file_catalog.create("a", b"x")
    assert entry.active_node_ids() == [0, 2, 3]


def test_placement_is_deterministic_for_same_health_snapshot():
    runtime = _bootstrap()
    runtime.node_registry.mark_down(0)
    first = runtime.file_catalog.create("one", b"1")
    second = runtime.file_catalog.create("two", b"2")
    assert first.replicas == second.replicas


def test_place_resets_existing_slots():
    runtime = _bootstrap()
    entry = runtime.file_catalog.create("a", b"x")
    runtime.node_registry.mark_down(0)
    runtime.node_registry.mark_down(1)
    created = runtime.placement_engine.place(entry)
    assert created == 2
    assert entry.replicas == [ActiveReplica(2), ActiveReplica(3), EmptySlot()]


def test_degraded_create_keeps_file():
    runtime = _bootstrap()
    for node_id in (1, 2, 3):
        runtime.node_registry.mark_down(node_id)
    entry = runtime.file_catalog.create("b", b"y")
    assert runtime.file_catalog.count_active_replicas(entry) == 1
    assert runtime.file_catalog.lookup_by_name("b") is entry


def test_create_without_healthy_nodes_rolls_back():
    runtime = _bootstrap()
    for node_id in range(4):
        runtime.node_registry.mark_down(node_id)
    with pytest.raises(NoHealthyNodes):
        runtime.file_catalog.create("ghost", b"boo")
    with pytest.raises(NotFound):
        runtime.file_catalog.lookup_by_name("ghost")
    assert runtime.file_catalog.file_count() == 0


def test_duplicate_and_full_catalog():
    runtime = _bootstrap(max_files=2)
    runtime.file_catalog.create("a", b"1")
    with pytest.raises(DuplicateName):
        runtime.file_catalog.create("a", b"2")
    runtime.file_catalog.create("b", b"2")
    with pytest.raises(CatalogFull):
        runtime.file_catalog.create("c", b"3")


def test_rolled_back_slot_is_reused():
    runtime = _bootstrap(max_files=1)
    for node_id in range(4):
        runtime.node_registry.mark_down(node_id)
    with pytest.raises(NoHealthyNodes):
        runtime.file_catalog.create("a", b"1")
    runtime.node_registry.mark_up(2)
    entry = runtime.file_catalog.create("a", b"1")
    assert entry.slot_index == 0


def test_lookup_is_case_sensitive():
    runtime = _bootstrap()
    runtime.file_catalog.create("Report", b"r")
    with pytest.raises(NotFound):
        runtime.file_catalog.lookup_by_name("report")


def test_invalidate_replicas_on_node_only_touches_matching_slots():
    runtime = _bootstrap()
    runtime.file_catalog.create("a", b"1")
    runtime.node_registry.mark_down(0)
    runtime.file_catalog.create("b", b"2")
    affected = runtime.file_catalog.invalidate_replicas_on_node(1)
    assert affected == ["a", "b"]
    assert runtime.file_catalog.lookup_by_name("a").active_node_ids() == [0, 2]
    assert runtime.file_catalog.lookup_by_name("b").active_node_ids() == [2, 3]
    assert runtime.file_catalog.invalidate_replicas_on_node(1) == []


def test_active_replica_on_down_node_is_not_readable():
    runtime = _bootstrap(node_count=1, replication_factor=1)
    entry = runtime.file_catalog.create("a", b"1")
    runtime.node_registry.mark_down(0)
    assert runtime.file_catalog.count_active_replicas(entry) == 1
    assert not runtime.file_catalog.active_healthy_replica_exists(entry)


def test_list_all_preserves_slot_order():
    runtime = _bootstrap()
    for name in ("zeta", "alpha", "mid"):
        runtime.file_catalog.create(name, b"")
    assert [entry.name for entry in runtime.file_catalog.list_all()] == ["zeta", "alpha", "mid"]

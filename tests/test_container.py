import pytest
from prometheus_client import Counter

from coremetrics.core.descriptors import CloudDescriptor
from coremetrics.metrics.store import registry_samples
from tests._helpers import RecordingReporter, make_real_container, plugin


def test_create_core_starts_reporters(real_container):
    core = real_container.create_core("products")
    assert real_container.get_core("products") is core
    assert ("start", "rec", "solr.core.products") in RecordingReporter.events
    assert real_container.core_names() == ["products"]


def test_create_duplicate_core(real_container):
    real_container.create_core("products")
    with pytest.raises(ValueError):
        real_container.create_core("products")


def test_create_without_reporters(real_container):
    real_container.create_core("quiet", load_reporters=False)
    assert RecordingReporter.events == []


def test_rename_carries_metrics_into_new_registry(real_container):
    core = real_container.create_core("old")
    Counter("queries", "Queries", registry=core.metric_coordinator.get_registry()).inc(3)
    real_container.rename("old", "new")
    assert core.name == "new"
    assert core.metric_coordinator.registry_name == "solr.core.new"
    store = real_container.registry_store
    assert registry_samples(store.lookup("solr.core.new"), ("queries_total",)) == {"queries_total": 3.0}
    assert registry_samples(store.lookup("solr.core.old")) == {}
    assert real_container.core_names() == ["new"]
    assert ("close", "rec", "solr.core.old") in RecordingReporter.events
    assert RecordingReporter.events[-1] == ("start", "rec", "solr.core.new")


def test_rename_cloud_core_keeps_registry_when_replica_unchanged(real_container):
    core = real_container.create_core("c_shard1_replica_n1", CloudDescriptor("c", "shard1"))
    RecordingReporter.events.clear()
    real_container.rename("c_shard1_replica_n1", "c_shard1_copy_replica_n1")
    assert core.metric_coordinator.registry_name == "solr.core.c.shard1.replica_n1"
    assert RecordingReporter.events == []


@pytest.mark.parametrize("src, dst, exc", [("absent", "x", KeyError), ("a", "b", ValueError)])
def test_rename_errors(real_container, src, dst, exc):
    real_container.create_core("a")
    real_container.create_core("b")
    with pytest.raises(exc):
        real_container.rename(src, dst)


def test_unload_closes_core(real_container):
    core = real_container.create_core("products")
    real_container.unload("products")
    assert core.closed
    assert real_container.get_core("products") is None
    assert ("close", "rec", "solr.core.products") in RecordingReporter.events
    with pytest.raises(KeyError):
        real_container.unload("products")


def test_set_name_on_closed_core(real_container):
    core = real_container.create_core("products")
    core.close()
    with pytest.raises(RuntimeError):
        core.set_name("renamed")


def test_shutdown_closes_node_reporters():
    container = make_real_container(reporters=[plugin("rec", group="core"), plugin("node_rec", group="node")])
    container.reporter_manager.load_reporters(
        container.config.metrics.reporters, container.resource_loader, None, "node", "solr.node"
    )
    core = container.create_core("products")
    container.shutdown()
    assert core.closed
    assert ("close", "node_rec", "solr.node") in RecordingReporter.events
    assert container.reporter_manager.registry_names() == set()


def test_rename_cloud_core_falls_back_to_core_node_name(real_container):
    core = real_container.create_core("coll_shard1_replica1", CloudDescriptor("coll", "shard1", "core_node5"))
    Counter("queries", "Queries", registry=core.metric_coordinator.get_registry()).inc(3)
    real_container.rename("coll_shard1_replica1", "renamed")
    assert core.metric_coordinator.registry_name == "solr.core.coll.shard1.core_node5"
    samples = registry_samples(core.metric_coordinator.get_registry(), ("queries_total",))
    assert samples == {"queries_total": 3.0}

from coremetrics.core.descriptors import CloudDescriptor
from tests._helpers import RecordingReporter, make_container, make_real_container, plugin


def test_close_without_reporters_completes():
    container = make_real_container(reporters=[])
    core = container.create_core("core_a")
    core.metric_coordinator.close()
    assert container.reporter_manager.registry_names() == set()


def test_close_after_registry_removed():
    container = make_real_container()
    core = container.create_core("core_a")
    container.registry_store.remove_registry(core.metric_coordinator.registry_name)
    core.close()
    assert container.reporter_manager.get_reporters("solr.core.core_a") == {}


def test_close_covers_registry_and_leader_registry():
    container = make_container()
    core = container.create_core("coll_shard1_replica1", CloudDescriptor("coll", "shard1"))
    container.reporter_manager.reset()
    core.close()
    tag = core.metric_coordinator.tag
    assert container.reporter_manager.calls == [
        ("close", "solr.core.coll.shard1.replica1", tag),
        ("close", "solr.collection.coll.shard1.leader", tag),
    ]


def test_core_close_is_exactly_once():
    container = make_container()
    core = container.create_core("core_a")
    container.reporter_manager.reset()
    core.close()
    core.close()
    assert container.reporter_manager.calls == [("close", "solr.core.core_a", core.metric_coordinator.tag)]


def test_close_only_affects_own_tag():
    container = make_real_container()
    a = container.create_core("core_a")
    # a second coordinator whose core is named like the first (rename overlap)
    b = container.create_core("core_tmp")
    b.metric_coordinator.snapshot = a.metric_coordinator.snapshot
    b.metric_coordinator.load_reporters()

    reporters = container.reporter_manager.get_reporters("solr.core.core_a")
    assert set(reporters) == {f"rec@{a.metric_coordinator.tag}", f"rec@{b.metric_coordinator.tag}"}

    b.metric_coordinator.close()
    remaining = container.reporter_manager.get_reporters("solr.core.core_a")
    assert set(remaining) == {f"rec@{a.metric_coordinator.tag}"}
    assert not remaining[f"rec@{a.metric_coordinator.tag}"].closed


def test_load_reporters_uses_container_plugins_and_core_group():
    container = make_real_container(reporters=[
        plugin("core_rep", group="core"),
        plugin("node_rep", group="node"),
        plugin("global_rep"),
    ])
    core = container.create_core("core_a")
    keys = set(container.reporter_manager.get_reporters(core.metric_coordinator.registry_name))
    tag = core.metric_coordinator.tag
    assert keys == {f"core_rep@{tag}", f"global_rep@{tag}"}
    assert ("start", "core_rep", "solr.core.core_a") in RecordingReporter.events

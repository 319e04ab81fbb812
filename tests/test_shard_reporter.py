from prometheus_client import Counter

from coremetrics.core.descriptors import CloudDescriptor
from coremetrics.metrics.store import registry_samples
from coremetrics.reporters.shard import ReplicaAggregateCollector, aggregate_collector
from tests._helpers import make_real_container, plugin


def _cloud_container():
    return make_real_container(reporters=[plugin("shard_rep", "shard", group="shard", init_args={"period": 0})])


def _shard_reporter(core):
    manager = core.container.reporter_manager
    tag = core.metric_coordinator.tag
    return manager.get_reporters(core.metric_coordinator.registry_name)[f"shard_rep@{tag}"]


def test_replicas_publish_into_leader_registry():
    container = _cloud_container()
    r1 = container.create_core("coll_shard1_replica1", CloudDescriptor("coll", "shard1"))
    r2 = container.create_core("coll_shard1_replica2", CloudDescriptor("coll", "shard1"))
    Counter("docs_indexed", "Indexed docs", registry=r1.metric_coordinator.get_registry()).inc(5)
    Counter("docs_indexed", "Indexed docs", registry=r2.metric_coordinator.get_registry()).inc(7)

    _shard_reporter(r1).report()
    _shard_reporter(r2).report()

    leader = container.registry_store.lookup("solr.collection.coll.shard1.leader")
    samples = registry_samples(leader, ("docs_indexed_total",))
    assert samples == {
        'docs_indexed_total{replica="replica1"}': 5.0,
        'docs_indexed_total{replica="replica2"}': 7.0,
    }
    container.shutdown()


def test_close_withdraws_replica():
    container = _cloud_container()
    core = container.create_core("coll_shard1_replica1", CloudDescriptor("coll", "shard1"))
    _shard_reporter(core).report()
    leader = container.registry_store.lookup("solr.collection.coll.shard1.leader")
    assert aggregate_collector(leader).replicas() == {"replica1"}
    core.close()
    assert aggregate_collector(leader).replicas() == set()


def test_rename_moves_published_replica():
    container = _cloud_container()
    core = container.create_core("coll_shard1_replica1", CloudDescriptor("coll", "shard1"))
    _shard_reporter(core).report()
    container.rename("coll_shard1_replica1", "coll_shard1_replica2")
    _shard_reporter(core).report()
    leader = container.registry_store.lookup("solr.collection.coll.shard1.leader")
    assert aggregate_collector(leader).replicas() == {"replica2"}
    container.shutdown()


def test_aggregate_collector_is_registered_once():
    from prometheus_client import CollectorRegistry

    reg = CollectorRegistry(auto_describe=True)
    first = aggregate_collector(reg)
    assert isinstance(first, ReplicaAggregateCollector)
    assert aggregate_collector(reg) is first


def test_aggregate_collector_fills_missing_labels():
    c = ReplicaAggregateCollector()
    c.publish("r1", [("qps", {"handler": "select"}, 1.0)])
    c.publish("r2", [("qps", {}, 2.0)])
    families = list(c.collect())
    assert len(families) == 1
    rows = {tuple(sorted(s.labels.items())): s.value for s in families[0].samples}
    assert rows[(("handler", "select"), ("replica", "r1"))] == 1.0
    assert rows[(("handler", ""), ("replica", "r2"))] == 2.0

import pytest
from prometheus_client import Counter

from coremetrics.metrics.producer import DescriptorMetricProducer, MetricDescriptor, metric_name_for
from coremetrics.metrics.store import registry_samples
from tests._helpers import make_container


class _SpyProducer:
    def __init__(self):
        self.calls = []

    def initialize_metrics(self, coordinator, registry_name, scope):
        self.calls.append((coordinator, registry_name, scope))


def test_register_metric_producer_passes_current_registry_and_scope():
    container = make_container()
    core = container.create_core("core_a", load_reporters=False)
    spy = _SpyProducer()
    core.metric_coordinator.register_metric_producer("/admin/ping", spy)
    assert spy.calls == [(core.metric_coordinator, "solr.core.core_a", "/admin/ping")]


@pytest.mark.parametrize("scope", [None, ""])
def test_register_metric_producer_rejects_missing_scope(scope):
    container = make_container()
    core = container.create_core("core_a", load_reporters=False)
    spy = _SpyProducer()
    before = container.registry_store.names()
    with pytest.raises(ValueError):
        core.metric_coordinator.register_metric_producer(scope, spy)
    assert spy.calls == []
    assert container.registry_store.names() == before


def test_register_metric_producer_rejects_missing_producer():
    container = make_container()
    core = container.create_core("core_a", load_reporters=False)
    before = container.registry_store.names()
    with pytest.raises(ValueError):
        core.metric_coordinator.register_metric_producer("scope", None)
    assert container.registry_store.names() == before


def test_descriptor_producer_attaches_instruments():
    container = make_container()
    core = container.create_core("core_a", load_reporters=False)
    producer = DescriptorMetricProducer([
        MetricDescriptor("requests", "Handled requests", "counter"),
        MetricDescriptor("latency_seconds", "Request latency", "histogram", buckets=(0.1, 1.0)),
        MetricDescriptor("inflight", "In-flight requests", "gauge", labels=("handler",)),
    ])
    core.metric_coordinator.register_metric_producer("/select", producer)

    producer.metrics["requests"].inc(3)
    producer.metrics["inflight"].labels(handler="select").set(2)
    producer.metrics["latency_seconds"].observe(0.5)

    samples = registry_samples(core.metric_coordinator.get_registry())
    assert samples["select_requests_total"] == 3.0
    assert samples['select_inflight{handler="select"}'] == 2.0
    assert samples['select_latency_seconds_bucket{le="1.0"}'] == 1.0
    assert producer.scope == "/select"
    assert producer.registry_name == "solr.core.core_a"


def test_descriptor_producer_registration_is_idempotent():
    container = make_container()
    core = container.create_core("core_a", load_reporters=False)
    descriptors = [MetricDescriptor("requests", "Handled requests", "counter")]
    first = DescriptorMetricProducer(descriptors)
    second = DescriptorMetricProducer(descriptors)
    core.metric_coordinator.register_metric_producer("/select", first)
    core.metric_coordinator.register_metric_producer("/select", second)
    assert isinstance(first.metrics["requests"], Counter)
    assert first.metrics["requests"] is second.metrics["requests"]


def test_descriptor_producer_rejects_unknown_type():
    with pytest.raises(ValueError):
        DescriptorMetricProducer([MetricDescriptor("x", "doc", "meter")])


@pytest.mark.parametrize(
    "scope,name,expected",
    [
        ("/admin/ping", "requests", "admin_ping_requests"),
        ("QUERY./select", "errors", "query_select_errors"),
        ("///", "errors", "errors"),
        ("1st", "x", "_1st_x"),
    ],
)
def test_metric_name_for(scope, name, expected):
    assert metric_name_for(scope, name) == expected

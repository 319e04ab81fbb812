"""Metrics package public interface.

Stable import surfaces:
    from coremetrics.metrics import RegistryCoordinator, RegistryStore
    from coremetrics.metrics.naming import registry_name
    from coremetrics.metrics.groups import RegistryGroup
"""
from __future__ import annotations

from .coordinator import (
    NamingSnapshot,
    RegistryCoordinator,
    compute_leader_registry_name,
    compute_registry_name,
    compute_registry_name_for_rename,
    next_unit_tag,
)
from .groups import REGISTRY_NAME_PREFIX, RegistryGroup
from .naming import (
    RegexReplicaNameParser,
    ReplicaNameParser,
    SuffixReplicaNameParser,
    enforce_prefix,
    overridable_registry_name,
    registry_name,
)
from .producer import DescriptorMetricProducer, MetricDescriptor, MetricProducer, metric_name_for
from .store import RegistryStore, get_default_store, registry_samples

__all__ = [
    "RegistryCoordinator",
    "NamingSnapshot",
    "next_unit_tag",
    "compute_registry_name",
    "compute_leader_registry_name",
    "compute_registry_name_for_rename",
    "REGISTRY_NAME_PREFIX",
    "RegistryGroup",
    "registry_name",
    "enforce_prefix",
    "overridable_registry_name",
    "ReplicaNameParser",
    "SuffixReplicaNameParser",
    "RegexReplicaNameParser",
    "MetricProducer",
    "MetricDescriptor",
    "DescriptorMetricProducer",
    "metric_name_for",
    "RegistryStore",
    "get_default_store",
    "registry_samples",
]

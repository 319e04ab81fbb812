"""Metric producers: components that attach instruments to a core's registry.

A producer is anything with ``initialize_metrics(coordinator, registry_name, scope)``.
:class:`DescriptorMetricProducer` is the data-driven implementation: a list of
:class:`MetricDescriptor` entries becomes Prometheus instruments named
``<scope slug>_<name>`` inside the coordinator's registry.
"""
from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from prometheus_client import Counter, Gauge, Histogram, Summary

from .registration import register_collector

if TYPE_CHECKING:  # pragma: no cover
    from .coordinator import RegistryCoordinator

__all__ = [
    "MetricProducer",
    "MetricDescriptor",
    "MetricType",
    "DescriptorMetricProducer",
    "metric_name_for",
]

MetricType = str  # "counter" | "gauge" | "histogram" | "summary"

_INVALID = re.compile(r"[^a-zA-Z0-9_]+")


class MetricProducer(Protocol):
    def initialize_metrics(self, coordinator: RegistryCoordinator, registry_name: str, scope: str) -> None:
        ...


@dataclass(frozen=True)
class MetricDescriptor:
    name: str
    documentation: str
    mtype: MetricType
    labels: Sequence[str] = ()
    buckets: Sequence[float] | None = None  # for histograms


_TYPE_MAP = {
    "counter": Counter,
    "gauge": Gauge,
    "histogram": Histogram,
    "summary": Summary,
}


def metric_name_for(scope: str, name: str) -> str:
    """``('/admin/ping', 'requests')`` -> ``'admin_ping_requests'``."""
    slug = _INVALID.sub("_", scope).strip("_").lower()
    base = f"{slug}_{name}" if slug else name
    if base[0].isdigit():
        base = "_" + base
    return base


class DescriptorMetricProducer:
    """Registers descriptor-defined instruments; keeps them in ``metrics`` keyed by descriptor name."""

    def __init__(self, descriptors: Sequence[MetricDescriptor]) -> None:
        for d in descriptors:
            if d.mtype not in _TYPE_MAP:
                raise ValueError(f"unsupported metric type {d.mtype!r} for {d.name}")
        self.descriptors = list(descriptors)
        self.metrics: dict[str, Any] = {}
        self.scope: str | None = None
        self.registry_name: str | None = None

    def initialize_metrics(self, coordinator: RegistryCoordinator, registry_name: str, scope: str) -> None:
        registry = coordinator.registry_store.registry(registry_name)
        for d in self.descriptors:
            kwargs: dict[str, Any] = {}
            if d.mtype == "histogram" and d.buckets:
                kwargs["buckets"] = list(d.buckets)
            metric = register_collector(registry, _TYPE_MAP[d.mtype], metric_name_for(scope, d.name),
                                        d.documentation, d.labels, **kwargs)
            if metric is not None:
                self.metrics[d.name] = metric
        self.scope = scope
        self.registry_name = registry_name

"""Shard reporter: publishes a replica's metrics into its shard-leader registry.

Every replica of a shard reports into ``solr.collection.<collection>.<shard>.leader``
through one :class:`ReplicaAggregateCollector` per leader registry. Each
published sample keeps its original labels plus a ``replica`` label, so the
leader registry exposes the whole shard side by side.

The leader registry name is resolved from the core's coordinator on every
report, so a renamed core publishes under its current identity.
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from typing import Any

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import Collector, CollectorRegistry

from coremetrics.metrics.store import iter_samples

from .base import ScheduledReporter

logger = logging.getLogger(__name__)

_AGG_LOCK = threading.Lock()


class ReplicaAggregateCollector(Collector):
    """Custom collector holding the last published samples of each replica."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._replicas: dict[str, list[tuple[str, dict[str, str], float]]] = {}

    def publish(self, replica: str, samples: list[tuple[str, dict[str, str], float]]) -> None:
        with self._lock:
            self._replicas[replica] = samples

    def withdraw(self, replica: str) -> bool:
        with self._lock:
            return self._replicas.pop(replica, None) is not None

    def replicas(self) -> set[str]:
        with self._lock:
            return set(self._replicas)

    def describe(self) -> list:
        return []

    def collect(self) -> Iterator[GaugeMetricFamily]:
        with self._lock:
            snapshot = {r: list(s) for r, s in self._replicas.items()}
        by_name: dict[str, list[tuple[dict[str, str], float]]] = {}
        for replica, samples in sorted(snapshot.items()):
            for name, labels, value in samples:
                by_name.setdefault(name, []).append(({**labels, "replica": replica}, value))
        for name, rows in sorted(by_name.items()):
            label_names = sorted({k for labels, _ in rows for k in labels})
            family = GaugeMetricFamily(name, f"Shard aggregate of {name}", labels=label_names)
            for labels, value in rows:
                family.add_metric([labels.get(k, "") for k in label_names], value)
            yield family


def aggregate_collector(registry: CollectorRegistry) -> ReplicaAggregateCollector:
    """Return the registry's aggregate collector, registering one if absent."""
    with _AGG_LOCK:
        for c in list(getattr(registry, "_collector_to_names", {})):
            if isinstance(c, ReplicaAggregateCollector):
                return c
        collector = ReplicaAggregateCollector()
        registry.register(collector)
        return collector


class ShardReporter(ScheduledReporter):
    """Init args: ``period`` (seconds, default 60) and ``filter`` (name prefixes)."""

    settings = {"filter": ""}

    def __init__(self, store, registry_name: str) -> None:
        super().__init__(store, registry_name)
        self.core: Any = None
        self._published: tuple[str, str] | None = None  # (leader registry, replica)

    def set_core(self, core: Any) -> None:
        self.core = core

    def validate(self) -> None:
        super().validate()
        self._prefixes = tuple(p.strip() for p in str(self.filter or "").split(",") if p.strip())

    def report(self) -> None:
        if self.core is None or self.closed:
            return
        coordinator = self.core.metric_coordinator
        leader = coordinator.leader_registry_name
        replica = coordinator.replica
        if leader is None or replica is None:
            logger.debug("Core %s is not distributed; shard report skipped", self.core.name)
            return
        samples = list(iter_samples(self.registry, self._prefixes))
        if self._published and self._published != (leader, replica):
            self._withdraw()
        aggregate_collector(self.store.registry(leader)).publish(replica, samples)
        self._published = (leader, replica)

    def _withdraw(self) -> None:
        if self._published is None:
            return
        leader, replica = self._published
        reg = self.store.lookup(leader)
        if reg is not None:
            aggregate_collector(reg).withdraw(replica)
        self._published = None

    def close(self) -> None:
        super().close()
        self._withdraw()


__all__ = ["ShardReporter", "ReplicaAggregateCollector", "aggregate_collector"]

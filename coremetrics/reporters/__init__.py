"""Metric reporters and their lifecycle manager."""
from __future__ import annotations

from .base import MetricReporter, ScheduledReporter
from .http_reporter import PrometheusHttpReporter
from .loader import ResourceLoader, list_reporter_aliases, register_reporter_class
from .logging_reporter import LoggingReporter
from .manager import ReporterManager, reporter_key
from .shard import ReplicaAggregateCollector, ShardReporter

__all__ = [
    "MetricReporter",
    "ScheduledReporter",
    "LoggingReporter",
    "PrometheusHttpReporter",
    "ShardReporter",
    "ReplicaAggregateCollector",
    "ResourceLoader",
    "register_reporter_class",
    "list_reporter_aliases",
    "ReporterManager",
    "reporter_key",
]

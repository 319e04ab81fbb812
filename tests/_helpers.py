"""Shared fakes for coordinator and reporter tests."""
from __future__ import annotations

from collections.abc import Sequence

from coremetrics.config.node_config import MetricsConfig, NodeConfig, PluginInfo
from coremetrics.core.container import CoreContainer
from coremetrics.metrics.store import RegistryStore
from coremetrics.reporters.base import MetricReporter
from coremetrics.reporters.loader import ResourceLoader


class RecordingReporterManager:
    """Stand-in reporter manager that only records the calls it receives."""

    def __init__(self):
        self.calls: list[tuple] = []

    def load_reporters(self, plugin_infos, loader, tag, group, registry_name):
        self.calls.append(("load", registry_name, tag, str(group)))
        return []

    def load_shard_reporters(self, plugin_infos, core):
        coordinator = core.metric_coordinator
        self.calls.append(("load_shard", coordinator.registry_name, coordinator.tag))
        return []

    def close_reporters(self, registry_name, tag=None):
        self.calls.append(("close", registry_name, tag))
        return set()

    def close_all(self):
        self.calls.append(("close_all",))
        return set()

    def reset(self):
        self.calls.clear()


class RecordingReporter(MetricReporter):
    """Reporter appending lifecycle events to a class-level journal."""

    settings = {"label": ""}
    events: list[tuple[str, str, str]] = []

    def start(self):
        RecordingReporter.events.append(("start", self.plugin_info.name, self.registry_name))

    def report(self):
        RecordingReporter.events.append(("report", self.plugin_info.name, self.registry_name))

    def close(self):
        RecordingReporter.events.append(("close", self.plugin_info.name, self.registry_name))
        super().close()


class FailingStartReporter(MetricReporter):
    def start(self):
        raise RuntimeError("cannot connect")

    def report(self):
        pass


class FailingCloseReporter(MetricReporter):
    def report(self):
        pass

    def close(self):
        super().close()
        raise OSError("socket already gone")


TEST_ALIASES = {
    "recording": RecordingReporter,
    "failing_start": FailingStartReporter,
    "failing_close": FailingCloseReporter,
}


def plugin(name: str, class_name: str = "recording", **kwargs) -> PluginInfo:
    return PluginInfo(name=name, class_name=class_name, **kwargs)


def node_config(reporters: Sequence[PluginInfo] = (), **metrics_kwargs) -> NodeConfig:
    return NodeConfig(metrics=MetricsConfig(reporters=tuple(reporters), **metrics_kwargs))


def make_container(reporters: Sequence[PluginInfo] = (), **metrics_kwargs) -> CoreContainer:
    """Container whose reporter manager records calls instead of loading anything."""
    return CoreContainer(
        node_config(reporters, **metrics_kwargs),
        registry_store=RegistryStore(),
        reporter_manager=RecordingReporterManager(),
        resource_loader=ResourceLoader(TEST_ALIASES),
    )


def make_real_container(reporters: Sequence[PluginInfo] | None = None, **metrics_kwargs) -> CoreContainer:
    RecordingReporter.events.clear()
    if reporters is None:
        reporters = [plugin("rec", group="core")]
    return CoreContainer(node_config(reporters, **metrics_kwargs), resource_loader=ResourceLoader(TEST_ALIASES))

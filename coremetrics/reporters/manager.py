"""Reporter lifecycle management keyed by registry name and ownership tag.

Reporters are stored per resolved registry name under the key
``<plugin name>@<tag>``. The tag belongs to whoever loaded the reporter (a core
coordinator), so ``close_reporters(registry, tag)`` only touches reporters that
owner created, even when two cores briefly share a registry name during a
rename.

Failures of individual reporters are isolated: they are logged, counted in the
node registry (``reporter_failures_total``) and skipped. Set
CM_METRICS_STRICT_EXCEPTIONS=1 to re-raise instead.
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Sequence
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from prometheus_client import Counter

from coremetrics.config import env
from coremetrics.metrics.groups import RegistryGroup
from coremetrics.metrics.naming import registry_name as build_registry_name
from coremetrics.metrics.registration import register_collector

from .base import MetricReporter
from .shard import ShardReporter

if TYPE_CHECKING:  # pragma: no cover
    from coremetrics.config.node_config import PluginInfo
    from coremetrics.metrics.store import RegistryStore

    from .loader import ResourceLoader

logger = logging.getLogger(__name__)

DEFAULT_SHARD_REPORTER_PERIOD = 60


def reporter_key(name: str, tag: str | None) -> str:
    if not name:
        raise ValueError("reporter name cannot be empty")
    return f"{name}@{tag}" if tag else name


class ReporterManager:
    def __init__(self, store: RegistryStore) -> None:
        self.store = store
        self._lock = threading.RLock()
        self._reporters: dict[str, dict[str, MetricReporter]] = {}
        self.failures: dict[tuple[str, str], int] = {}
        self._failure_counter = register_collector(
            store.registry(build_registry_name(RegistryGroup.NODE)),
            Counter,
            "reporter_failures",
            "Metric reporters that failed to load or close",
            ["registry", "phase"],
        )

    # ------------------------------------------------------------------ load
    def load_reporters(self, plugin_infos: Sequence[PluginInfo] | None, loader: ResourceLoader, tag: str | None,
                       group: RegistryGroup | str, registry_name: str) -> list[str]:
        """Load every enabled plugin targeting ``group`` or ``registry_name``.

        Returns the plugin names that loaded successfully.
        """
        if not plugin_infos:
            return []
        group = RegistryGroup.from_any(group)
        resolved = self.store.resolve_name(registry_name)
        loaded: list[str] = []
        for info in plugin_infos:
            if not self._targets(info, group, resolved):
                continue
            try:
                self.load_reporter(registry_name, loader, info, tag)
            except Exception:
                self._record_failure(resolved, "load")
                logger.warning("Error loading metrics reporter %s for %s", info.name, resolved, exc_info=True)
                if env.strict_exceptions():
                    raise
            else:
                loaded.append(info.name)
        if loaded:
            logger.info("Loaded reporters %s for %s", ",".join(loaded), resolved)
        return loaded

    def _targets(self, info: PluginInfo, group: RegistryGroup, resolved: str) -> bool:
        if not info.enabled:
            return False
        groups = info.groups()
        if groups:
            return group.value in groups
        registries = info.registries()
        if registries:
            return any(self.store.resolve_name(r) == resolved for r in registries)
        # neither group nor registry: global reporter
        return True

    def load_reporter(self, registry_name: str, loader: ResourceLoader, info: PluginInfo,
                      tag: str | None, *, expected_type: type = MetricReporter, core: Any = None) -> MetricReporter:
        reporter = loader.new_instance(info.class_name, expected_type, self.store, registry_name)
        if core is not None:
            reporter.set_core(core)
        # close any reporter holding this key before the new one starts
        self._evict(registry_name, reporter_key(info.name, tag))
        try:
            reporter.init(info)
        except Exception:
            self._close_quietly(reporter)
            raise
        self.register_reporter(registry_name, info.name, tag, reporter)
        return reporter

    def load_shard_reporters(self, plugin_infos: Sequence[PluginInfo] | None, core: Any) -> list[str]:
        """Load ``shard`` group reporters for a distributed core under its registry and tag."""
        coordinator = core.metric_coordinator
        if not plugin_infos or not coordinator.distributed:
            return []
        registry_name = coordinator.registry_name
        resolved = self.store.resolve_name(registry_name)
        loaded: list[str] = []
        for info in plugin_infos:
            if not info.enabled or RegistryGroup.SHARD.value not in info.groups():
                continue
            args = {"period": DEFAULT_SHARD_REPORTER_PERIOD, **info.init_args}
            try:
                self.load_reporter(registry_name, core.resource_loader, replace(info, init_args=args),
                                   coordinator.tag, expected_type=ShardReporter, core=core)
            except Exception:
                self._record_failure(resolved, "load")
                logger.warning("Could not load shard reporter %s for %s", info.name, resolved, exc_info=True)
                if env.strict_exceptions():
                    raise
            else:
                loaded.append(info.name)
        if loaded:
            logger.info("Loaded shard reporters %s for %s", ",".join(loaded), resolved)
        return loaded

    def register_reporter(self, registry_name: str, name: str, tag: str | None, reporter: MetricReporter) -> None:
        key = reporter_key(name, tag)
        resolved = self.store.resolve_name(registry_name)
        with self._lock:
            per = self._reporters.setdefault(resolved, {})
            old = per.get(key)
            per[key] = reporter
        if old is not None and old is not reporter:
            logger.debug("Replacing existing reporter %s in %s", key, resolved)
            self._close_quietly(old, resolved)

    # ----------------------------------------------------------------- close
    def close_reporters(self, registry_name: str | None, tag: str | None = None) -> set[str]:
        """Close reporters of a registry; only those owned by ``tag`` when given.

        Returns the keys of the closed reporters. A registry without reporters
        is not an error.
        """
        if not registry_name:
            return set()
        resolved = self.store.resolve_name(registry_name)
        suffix = f"@{tag}" if tag else None
        with self._lock:
            per = self._reporters.get(resolved)
            if not per:
                logger.debug("No reporters to close for %s (tag=%s)", resolved, tag)
                return set()
            keys = [k for k in per if suffix is None or k.endswith(suffix)]
            removed = {k: per.pop(k) for k in keys}
            if not per:
                del self._reporters[resolved]
        for reporter in removed.values():
            self._close_quietly(reporter, resolved)
        if removed:
            logger.info("Closed reporters %s for %s", ",".join(sorted(removed)), resolved)
        return set(removed)

    def close_all(self) -> set[str]:
        with self._lock:
            names = list(self._reporters)
        closed: set[str] = set()
        for name in names:
            closed |= {f"{name}/{k}" for k in self.close_reporters(name)}
        return closed

    def _close_quietly(self, reporter: MetricReporter, resolved: str | None = None) -> None:
        try:
            reporter.close()
        except Exception:
            registry = resolved or reporter.registry_name
            self._record_failure(registry, "close")
            logger.warning("Error closing metrics reporter %r", reporter, exc_info=True)
            if env.strict_exceptions():
                raise

    # ---------------------------------------------------------- inspection
    def get_reporters(self, registry_name: str) -> dict[str, MetricReporter]:
        resolved = self.store.resolve_name(registry_name)
        with self._lock:
            return dict(self._reporters.get(resolved, {}))

    def registry_names(self) -> set[str]:
        with self._lock:
            return {name for name, per in self._reporters.items() if per}

    def reporter_keys(self, registry_names: Iterable[str] | None = None) -> set[tuple[str, str]]:
        with self._lock:
            names = list(registry_names) if registry_names is not None else list(self._reporters)
            return {(n, k) for n in names for k in self._reporters.get(self.store.resolve_name(n), {})}

    def _evict(self, registry_name: str, key: str) -> None:
        resolved = self.store.resolve_name(registry_name)
        with self._lock:
            per = self._reporters.get(resolved)
            old = per.pop(key, None) if per else None
            if per is not None and not per:
                del self._reporters[resolved]
        if old is not None:
            logger.debug("Closing existing reporter %s in %s before reload", key, resolved)
            self._close_quietly(old, resolved)

    def _record_failure(self, registry: str, phase: str) -> None:
        key = (registry, phase)
        with self._lock:
            self.failures[key] = self.failures.get(key, 0) + 1
        if self._failure_counter is not None:
            self._failure_counter.labels(registry=registry, phase=phase).inc()


__all__ = ["ReporterManager", "reporter_key", "DEFAULT_SHARD_REPORTER_PERIOD"]

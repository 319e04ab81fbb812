"""Metric reporter base classes.

A reporter reads one registry from the :class:`RegistryStore` and publishes it
elsewhere. Lifecycle: construct -> ``init(plugin_info)`` (applies init args,
validates, starts) -> ``report()`` any number of times -> ``close()``.
"""
from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, ClassVar

from prometheus_client import CollectorRegistry

from coremetrics.utils.exceptions import ReporterConfigError

if TYPE_CHECKING:  # pragma: no cover
    from coremetrics.config.node_config import PluginInfo
    from coremetrics.metrics.store import RegistryStore

logger = logging.getLogger(__name__)


class MetricReporter:
    #: Init args accepted from ``PluginInfo.init_args``, with their defaults.
    settings: ClassVar[dict[str, Any]] = {}

    def __init__(self, store: RegistryStore, registry_name: str) -> None:
        self.store = store
        self.registry_name = registry_name
        self.plugin_info: PluginInfo | None = None
        self.closed = False
        for key, default in self._all_settings().items():
            setattr(self, key, default)

    @classmethod
    def _all_settings(cls) -> dict[str, Any]:
        merged: dict[str, Any] = {}
        for klass in reversed(cls.__mro__):
            merged.update(getattr(klass, "settings", {}) or {})
        return merged

    def init(self, plugin_info: PluginInfo) -> None:
        self.plugin_info = plugin_info
        allowed = self._all_settings()
        unknown = sorted(set(plugin_info.init_args) - set(allowed))
        if unknown:
            raise ReporterConfigError(
                f"{type(self).__name__} ({plugin_info.name}) does not accept init args: {', '.join(unknown)}"
            )
        for key, value in plugin_info.init_args.items():
            setattr(self, key, value)
        self.validate()
        self.start()

    @property
    def registry(self) -> CollectorRegistry:
        return self.store.registry(self.registry_name)

    def validate(self) -> None:
        """Raise ReporterConfigError for unusable settings."""

    def start(self) -> None:
        """Begin publishing; called once after successful validation."""

    def report(self) -> None:
        raise NotImplementedError

    def close(self) -> None:
        self.closed = True

    def __repr__(self) -> str:
        name = self.plugin_info.name if self.plugin_info else "?"
        return f"{type(self).__name__}(name={name!r}, registry={self.registry_name!r})"


class ScheduledReporter(MetricReporter):
    """Reporter calling ``report()`` every ``period`` seconds on a daemon thread.

    ``period <= 0`` disables scheduling; ``report()`` is then only called explicitly.
    """

    settings = {"period": 60.0}

    def __init__(self, store: RegistryStore, registry_name: str) -> None:
        super().__init__(store, registry_name)
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def validate(self) -> None:
        try:
            self.period = float(self.period)
        except (TypeError, ValueError) as e:
            raise ReporterConfigError(f"period must be a number, got {self.period!r}") from e
        if self.period < 0:
            raise ReporterConfigError("period must be >= 0")

    def start(self) -> None:
        if self.period <= 0:
            return
        self._thread = threading.Thread(
            target=self._run,
            name=f"cm-reporter-{self.registry_name}",
            daemon=True,
        )
        self._thread.start()
        logger.debug("Scheduled %r every %ss", self, self.period)

    def _run(self) -> None:  # pragma: no cover - timing/background
        while not self._stop.wait(self.period):
            try:
                self.report()
            except Exception:
                logger.warning("Scheduled report failed for %r", self, exc_info=True)

    def close(self) -> None:
        self._stop.set()
        t = self._thread
        if t is not None and t is not threading.current_thread():
            t.join(timeout=max(1.0, self.period))
        self._thread = None
        super().close()


__all__ = ["MetricReporter", "ScheduledReporter"]

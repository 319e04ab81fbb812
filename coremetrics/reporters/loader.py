"""Reporter class resolution.

Plugin descriptors name their reporter class either by a registered alias
(``logging``, ``prometheus_http``, ``shard``) or by a dotted import path
(``mypkg.reporters.StatsdReporter`` or ``mypkg.reporters:StatsdReporter``).

Aliases live in a small global table guarded by an RLock; re-registering an
alias overwrites it and logs a warning.
"""
from __future__ import annotations

import importlib
import logging
import threading
from typing import Any

from coremetrics.utils.exceptions import ReporterLoadError

from .base import MetricReporter

logger = logging.getLogger(__name__)

_LOCK = threading.RLock()
_ALIASES: dict[str, type] = {}


def register_reporter_class(alias: str, cls: type) -> None:
    key = alias.strip().lower()
    if not key:
        raise ValueError("reporter alias cannot be empty")
    with _LOCK:
        if key in _ALIASES and _ALIASES[key] is not cls:
            logger.warning("reporter_loader.duplicate_alias name=%s (overwriting)", key)
        _ALIASES[key] = cls


def list_reporter_aliases() -> list[str]:
    with _LOCK:
        return sorted(_ALIASES)


def _import_path(path: str) -> Any:
    if ":" in path:
        module_name, _, attr = path.partition(":")
    else:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        raise ReporterLoadError(f"Not an importable class path: {path!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ReporterLoadError(f"Cannot import module {module_name!r} for {path!r}: {e}") from e
    try:
        return getattr(module, attr)
    except AttributeError as e:
        raise ReporterLoadError(f"Module {module_name!r} has no attribute {attr!r}") from e


class ResourceLoader:
    """Resolves and instantiates plugin classes for one core or node.

    ``extra_aliases`` are consulted before the global alias table so a core
    can shadow a reporter implementation without touching process state.
    """

    def __init__(self, extra_aliases: dict[str, type] | None = None) -> None:
        self._aliases = {k.strip().lower(): v for k, v in (extra_aliases or {}).items()}

    def find_class(self, name: str, expected_type: type = MetricReporter) -> type:
        key = name.strip().lower()
        cls = self._aliases.get(key)
        if cls is None:
            with _LOCK:
                cls = _ALIASES.get(key)
        if cls is None:
            cls = _import_path(name.strip())
        if not isinstance(cls, type) or not issubclass(cls, expected_type):
            raise ReporterLoadError(f"{name!r} does not resolve to a {expected_type.__name__} subclass")
        return cls

    def new_instance(self, name: str, expected_type: type, *args: Any, **kwargs: Any) -> Any:
        cls = self.find_class(name, expected_type)
        try:
            return cls(*args, **kwargs)
        except Exception as e:
            raise ReporterLoadError(f"Cannot instantiate {cls.__name__}: {e}") from e


def _register_builtins() -> None:
    from .http_reporter import PrometheusHttpReporter
    from .logging_reporter import LoggingReporter
    from .shard import ShardReporter

    register_reporter_class("logging", LoggingReporter)
    register_reporter_class("prometheus_http", PrometheusHttpReporter)
    register_reporter_class("shard", ShardReporter)


_register_builtins()

__all__ = [
    "ResourceLoader",
    "register_reporter_class",
    "list_reporter_aliases",
]

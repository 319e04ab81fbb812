"""Process-wide registry store keyed by registry name.

Each registry is a ``prometheus_client.CollectorRegistry``. Names are resolved
through :func:`overridable_registry_name` so a configured override maps a
canonical name (``solr.core.products``) onto another registry, and every name
carries the ``solr.`` prefix.
"""
from __future__ import annotations

import logging
import threading
from collections.abc import Iterator, Mapping

from prometheus_client import CollectorRegistry

from . import _singleton
from .naming import overridable_registry_name

logger = logging.getLogger(__name__)


class RegistryStore:
    def __init__(self, overrides: Mapping[str, str] | None = None) -> None:
        self._lock = threading.RLock()
        self._registries: dict[str, CollectorRegistry] = {}
        self._overrides: dict[str, str] = dict(overrides or {})

    @property
    def overrides(self) -> dict[str, str]:
        return dict(self._overrides)

    def resolve_name(self, name: str) -> str:
        if not name:
            raise ValueError("registry name cannot be empty")
        return overridable_registry_name(name, self._overrides)

    def registry(self, name: str) -> CollectorRegistry:
        """Return the registry for ``name``, creating an empty one if absent."""
        key = self.resolve_name(name)
        with self._lock:
            reg = self._registries.get(key)
            if reg is None:
                reg = CollectorRegistry(auto_describe=True)
                self._registries[key] = reg
                logger.debug("Created metric registry %s", key)
            return reg

    def lookup(self, name: str) -> CollectorRegistry | None:
        """Return the registry for ``name`` or None; never creates."""
        if not name:
            return None
        with self._lock:
            return self._registries.get(self.resolve_name(name))

    def has_registry(self, name: str) -> bool:
        return self.lookup(name) is not None

    def names(self) -> set[str]:
        with self._lock:
            return set(self._registries)

    def remove_registry(self, name: str) -> bool:
        with self._lock:
            return self._registries.pop(self.resolve_name(name), None) is not None

    def clear_registry(self, name: str) -> int:
        """Unregister every collector of a registry; returns how many were removed."""
        reg = self.lookup(name)
        if reg is None:
            return 0
        collectors = set(getattr(reg, '_collector_to_names', {}))
        for c in collectors:
            reg.unregister(c)
        return len(collectors)

    def swap_registries(self, name1: str, name2: str) -> None:
        """Exchange two registries so collected metrics follow a renamed core."""
        with self._lock:
            a = self.registry(name1)
            b = self.registry(name2)
            self._registries[self.resolve_name(name1)] = b
            self._registries[self.resolve_name(name2)] = a
        logger.debug("Swapped metric registries %s <-> %s", name1, name2)


def sample_key(name: str, labels: Mapping[str, str]) -> str:
    if not labels:
        return name
    inner = ",".join(f'{k}="{v}"' for k, v in sorted(labels.items()))
    return f"{name}{{{inner}}}"


def iter_samples(registry: CollectorRegistry, prefixes: tuple[str, ...] = ()) -> Iterator[tuple[str, dict[str, str], float]]:
    """Yield ``(name, labels, value)`` for every sample, optionally filtered by name prefix."""
    for family in registry.collect():
        for s in family.samples:
            if prefixes and not s.name.startswith(prefixes):
                continue
            yield s.name, dict(s.labels), float(s.value)


def registry_samples(registry: CollectorRegistry, prefixes: tuple[str, ...] = ()) -> dict[str, float]:
    """Flatten a registry into ``{sample_key: value}``."""
    return {sample_key(name, labels): value for name, labels, value in iter_samples(registry, prefixes)}


def get_default_store() -> RegistryStore:
    return _singleton.create_if_absent(RegistryStore)


def clear_default_store() -> None:
    _singleton.clear_singleton()


__all__ = [
    "RegistryStore",
    "sample_key",
    "iter_samples",
    "registry_samples",
    "get_default_store",
    "clear_default_store",
]

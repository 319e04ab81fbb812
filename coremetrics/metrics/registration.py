"""Idempotent collector creation inside a specific registry.

Prometheus raises ``ValueError`` (duplicated timeseries) when a collector with
the same name is created twice in one registry. Producers can be registered
again after a core reload, so duplicates are recovered from the registry's
name map instead of failing. Unexpected errors are logged and re-raised only
when CM_METRICS_STRICT_EXCEPTIONS is set.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from prometheus_client import CollectorRegistry

from coremetrics.config import env

logger = logging.getLogger(__name__)


def find_collector(registry: CollectorRegistry, name: str) -> Any:
    names_map = getattr(registry, '_names_to_collectors', {})
    return names_map.get(name)


def register_collector(registry: CollectorRegistry, ctor: Callable, name: str, documentation: str,
                       labels: Sequence[str] | None = None, **ctor_kwargs) -> Any:
    existing = find_collector(registry, name)
    if existing is not None:
        return existing
    try:
        if labels:
            return ctor(name, documentation, list(labels), registry=registry, **ctor_kwargs)
        return ctor(name, documentation, registry=registry, **ctor_kwargs)
    except ValueError:
        # Counters register several names (_total, _created); recover by base name.
        collector = find_collector(registry, name) or find_collector(registry, f"{name}_total")
        if collector is None:
            raise
        return collector
    except Exception as e:
        logger.error("register_collector unexpected error creating %s: %s", name, e, exc_info=True)
        if env.strict_exceptions():
            raise
        return None


__all__ = ["find_collector", "register_collector"]

"""Lightweight structured logging context helper.

Process-wide contextual fields (via contextvars) injected into log records by
``setup_logging``. The coordinator pushes the core name and registry name while
it closes or reloads reporters so every reporter log line carries them.

Context fields (stable keys):
- core: name of the core being processed
- registry: registry name reporters are bound to
- tag: reporter ownership tag of the coordinator

Usage:
  from coremetrics.utils import log_context as lc
  with lc.push_context(core='products', registry='solr.core.products'):
      logger.info('Reloading reporters')
"""
from __future__ import annotations

import contextvars
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

CONTEXT_KEYS = ("core", "registry", "tag")

_CTX: contextvars.ContextVar[dict[str, Any]] = contextvars.ContextVar("cm_log_ctx", default={})


def get_context() -> dict[str, Any]:
    """Return a shallow copy of the current context dict."""
    ctx = _CTX.get()
    return dict(ctx) if ctx else {}


def set_context(**fields: Any) -> None:
    """Replace or add context fields (overwrites existing keys)."""
    cur = dict(_CTX.get())
    cur.update({k: v for k, v in fields.items() if v is not None})
    _CTX.set(cur)


def clear_context(*keys: str) -> None:
    """Clear specific keys or all if no keys provided."""
    if not keys:
        _CTX.set({})
        return
    cur = dict(_CTX.get())
    for k in keys:
        cur.pop(k, None)
    _CTX.set(cur)


@contextmanager
def push_context(**fields: Any) -> Iterator[None]:
    """Temporarily add/override context fields within a block."""
    merged = dict(_CTX.get())
    merged.update({k: v for k, v in fields.items() if v is not None})
    token = _CTX.set(merged)
    try:
        yield
    finally:
        _CTX.reset(token)


__all__ = [
    "CONTEXT_KEYS",
    "get_context",
    "set_context",
    "clear_context",
    "push_context",
]

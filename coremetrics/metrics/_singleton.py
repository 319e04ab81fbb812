"""Process default RegistryStore anchor.

Containers normally receive their store explicitly; this anchor only serves
callers that want one shared store per process without threading it through.
"""
from __future__ import annotations

import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .store import RegistryStore

DEFAULT_STORE: RegistryStore | None = None
_STORE_LOCK = threading.Lock()


def create_if_absent(factory):
    """Atomically create and publish the default store using factory() if absent.

    The factory is only invoked inside the lock when the store is absent.
    """
    global DEFAULT_STORE  # noqa: PLW0603
    if DEFAULT_STORE is not None:
        return DEFAULT_STORE
    with _STORE_LOCK:
        if DEFAULT_STORE is None:
            DEFAULT_STORE = factory()
        return DEFAULT_STORE


def clear_singleton():
    """Forget the default store (test reset path). Safe to call when unset."""
    global DEFAULT_STORE  # noqa: PLW0603
    with _STORE_LOCK:
        DEFAULT_STORE = None


__all__ = ["create_if_absent", "clear_singleton"]

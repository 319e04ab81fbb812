"""Pytest configuration for coremetrics.

Responsibilities:
1. Ensure project root on sys.path.
2. Isolate CM_* environment settings per test so env-driven behavior
   (strict exceptions, disabled reporters, dotenv loading) never leaks.
3. Reset the process default registry store between tests.
"""
import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def _isolate_cm_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("CM_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("CM_SKIP_DOTENV", "1")
    yield


@pytest.fixture(autouse=True)
def _reset_default_store():
    from coremetrics.metrics.store import clear_default_store
    clear_default_store()
    yield
    clear_default_store()


@pytest.fixture()
def recording_container():
    from tests._helpers import make_container
    return make_container()


@pytest.fixture()
def real_container():
    """Container with a real RegistryStore/ReporterManager and the recording reporter alias."""
    from tests._helpers import make_real_container
    container = make_real_container()
    yield container
    container.shutdown()


@pytest.fixture()
def restore_root_logging():
    """Undo setup_logging() changes to the root logger after the test."""
    import logging
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for h in root.handlers[:]:
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    for h in handlers:
        if h not in root.handlers:
            root.addHandler(h)
    root.setLevel(level)

"""Environment variable helpers.

Consistent parsing of ``CM_*`` settings with sane defaults and shared truthy
semantics. Every coremetrics module reads the environment through these
helpers so tests can drive behavior with ``monkeypatch.setenv``.
"""
from __future__ import annotations

import os
from collections.abc import Callable

ENV_PREFIX = "CM_"
TRUTHY = {"1", "true", "yes", "on", "y"}


def env_name(key: str) -> str:
    """Return the full variable name for ``key`` (``'CONFIG'`` -> ``'CM_CONFIG'``)."""
    key = key.strip().upper()
    return key if key.startswith(ENV_PREFIX) else ENV_PREFIX + key


def is_truthy(value: str | None) -> bool:
    if not value:
        return False
    return value.strip().lower() in TRUTHY


def get_str(name: str, default: str = "") -> str:
    v = os.getenv(env_name(name))
    if v is None:
        return default
    return v


def get_bool(name: str, default: bool = False) -> bool:
    v = os.getenv(env_name(name))
    if v is None:
        return default
    return is_truthy(v)


def get_int(name: str, default: int) -> int:
    v = os.getenv(env_name(name))
    if v is None or v.strip() == "":
        return default
    try:
        return int(v.strip())
    except ValueError:
        return default


def get_float(name: str, default: float) -> float:
    v = os.getenv(env_name(name))
    if v is None or v.strip() == "":
        return default
    try:
        return float(v.strip())
    except ValueError:
        return default


def get_csv(name: str, default: list[str] | None = None, *, sep: str = ",",
            transform: Callable[[str], str] | None = None) -> list[str]:
    v = os.getenv(env_name(name))
    if v is None:
        return list(default or [])
    parts = [p.strip() for p in v.split(sep) if p.strip()]
    if transform:
        parts = [transform(p) for p in parts]
    return parts


def strict_exceptions() -> bool:
    """Fail-fast toggle: re-raise reporter failures instead of isolating them."""
    return get_bool("METRICS_STRICT_EXCEPTIONS")


__all__ = [
    "ENV_PREFIX",
    "TRUTHY",
    "env_name",
    "is_truthy",
    "get_str",
    "get_bool",
    "get_int",
    "get_float",
    "get_csv",
    "strict_exceptions",
]

"""coremetrics exception hierarchy.

A small exception tree so callers can tell configuration mistakes apart from
reporter plugin failures. Invalid call arguments use the builtin ``ValueError``.
"""
from __future__ import annotations


class CoreMetricsError(Exception):
    """Base class for all coremetrics exceptions."""


class ConfigError(CoreMetricsError):
    """Configuration-related issues (unreadable file, schema violations)."""


class ReporterError(CoreMetricsError):
    """Base class for metric reporter failures."""


class ReporterConfigError(ReporterError):
    """Reporter init arguments were unknown or failed validation."""


class ReporterLoadError(ReporterError):
    """Reporter class could not be resolved or instantiated."""


__all__ = [
    "CoreMetricsError",
    "ConfigError",
    "ReporterError",
    "ReporterConfigError",
    "ReporterLoadError",
]

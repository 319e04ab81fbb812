"""Shared utilities: exceptions, logging setup and log context."""
from .exceptions import (
    ConfigError,
    CoreMetricsError,
    ReporterConfigError,
    ReporterError,
    ReporterLoadError,
)

__all__ = [
    "CoreMetricsError",
    "ConfigError",
    "ReporterError",
    "ReporterConfigError",
    "ReporterLoadError",
]

"""Reporter that writes registry snapshots to a logger."""
from __future__ import annotations

import logging

from coremetrics.metrics.store import registry_samples
from coremetrics.utils.exceptions import ReporterConfigError

from .base import ScheduledReporter


class LoggingReporter(ScheduledReporter):
    """Logs one line per sample: ``<registry> <sample> = <value>``.

    Init args: ``period`` (seconds), ``logger`` (logger name), ``level`` and
    ``filter`` (comma separated metric name prefixes).
    """

    settings = {"logger": "coremetrics.reports", "level": "INFO", "filter": ""}

    def validate(self) -> None:
        super().validate()
        level = logging.getLevelName(str(self.level).upper())
        if not isinstance(level, int):
            raise ReporterConfigError(f"unknown log level {self.level!r}")
        self._level = level
        self._prefixes = tuple(p.strip() for p in str(self.filter or "").split(",") if p.strip())
        self._log = logging.getLogger(self.logger)

    def report(self) -> None:
        samples = registry_samples(self.registry, self._prefixes)
        for key in sorted(samples):
            self._log.log(self._level, "%s %s = %s", self.registry_name, key, samples[key])


__all__ = ["LoggingReporter"]

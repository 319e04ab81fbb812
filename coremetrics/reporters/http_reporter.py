"""Reporter exposing one registry on a Prometheus scrape endpoint."""
from __future__ import annotations

import logging

from prometheus_client import start_http_server

from coremetrics.utils.exceptions import ReporterConfigError

from .base import MetricReporter

logger = logging.getLogger(__name__)


class PrometheusHttpReporter(MetricReporter):
    """Serves the registry at ``http://<addr>:<port>/metrics``.

    ``port=0`` binds an ephemeral port; the bound port is available as
    ``bound_port`` after start.
    """

    settings = {"port": 9108, "addr": "0.0.0.0"}

    def __init__(self, store, registry_name: str) -> None:
        super().__init__(store, registry_name)
        self._server = None
        self._thread = None
        self.bound_port: int | None = None

    def validate(self) -> None:
        try:
            self.port = int(self.port)
        except (TypeError, ValueError) as e:
            raise ReporterConfigError(f"port must be an integer, got {self.port!r}") from e
        if not 0 <= self.port <= 65535:
            raise ReporterConfigError(f"port out of range: {self.port}")

    def start(self) -> None:
        self._server, self._thread = start_http_server(self.port, addr=self.addr, registry=self.registry)
        self.bound_port = self._server.server_address[1]
        logger.info("Metrics for %s available at http://%s:%s/metrics", self.registry_name, self.addr, self.bound_port)

    def report(self) -> None:
        """Scrape-driven; nothing to push."""

    def close(self) -> None:
        if self._server is not None:
            self._server.shutdown()
            self._server.server_close()
            if self._thread is not None:
                self._thread.join(timeout=5)
            logger.info("Stopped metrics endpoint for %s", self.registry_name)
        self._server = None
        self._thread = None
        super().close()


__all__ = ["PrometheusHttpReporter"]

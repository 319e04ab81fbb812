"""A core: the runtime unit whose metrics a RegistryCoordinator manages."""
from __future__ import annotations

import logging
import threading
from dataclasses import replace
from typing import TYPE_CHECKING

from coremetrics.metrics.coordinator import RegistryCoordinator
from coremetrics.metrics.naming import replica_parser_for
from coremetrics.reporters.loader import ResourceLoader

from .descriptors import CloudDescriptor, CoreDescriptor, CoreDescriptorProvider, DescriptorProvider

if TYPE_CHECKING:  # pragma: no cover
    from .container import CoreContainer

logger = logging.getLogger(__name__)


class Core:
    """Owns one coordinator; rename and close are serialized behind ``_lock``."""

    def __init__(self, name: str, container: CoreContainer, descriptor: CoreDescriptor | None = None, *,
                 descriptor_provider: DescriptorProvider | None = None,
                 resource_loader: ResourceLoader | None = None) -> None:
        if not name:
            raise ValueError("core name cannot be empty")
        self._lock = threading.RLock()
        self._name = name
        self.container = container
        self.descriptor = descriptor or CoreDescriptor(name)
        self.descriptor_provider = descriptor_provider or CoreDescriptorProvider()
        self.resource_loader = resource_loader or container.resource_loader
        self.closed = False
        parser = replica_parser_for(container.config.metrics.replica_name_pattern)
        self.metric_coordinator = RegistryCoordinator(self, replica_parser=parser)

    @property
    def name(self) -> str:
        return self._name

    @property
    def cloud_descriptor(self) -> CloudDescriptor | None:
        return self.descriptor.cloud_descriptor

    def open(self) -> Core:
        """Start the core's reporters."""
        with self._lock:
            self.metric_coordinator.load_reporters()
        return self

    def set_name(self, new_name: str) -> None:
        if not new_name:
            raise ValueError("core name cannot be empty")
        with self._lock:
            if self.closed:
                raise RuntimeError(f"core {self._name} is closed")
            old = self._name
            self._name = new_name
            self.descriptor = replace(self.descriptor, name=new_name)
            self.metric_coordinator.after_rename()
        logger.info("Core renamed %s -> %s", old, new_name)

    def update_cloud_descriptor(self, cloud_descriptor: CloudDescriptor | None) -> None:
        """Replace deployment identity; takes effect on the next rename."""
        with self._lock:
            self.descriptor = replace(self.descriptor, cloud_descriptor=cloud_descriptor)

    def close(self) -> None:
        with self._lock:
            if self.closed:
                return
            self.closed = True
            self.metric_coordinator.close()
        logger.info("Core %s closed", self._name)

    def __repr__(self) -> str:
        return f"Core(name={self._name!r}, registry={self.metric_coordinator.registry_name!r})"


__all__ = ["Core"]

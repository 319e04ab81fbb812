"""Container of cores: owns the registry store and the reporter manager."""
from __future__ import annotations

import logging
import threading

from coremetrics.config.node_config import NodeConfig
from coremetrics.metrics.coordinator import NamingSnapshot
from coremetrics.metrics.store import RegistryStore
from coremetrics.reporters.loader import ResourceLoader
from coremetrics.reporters.manager import ReporterManager

from .descriptors import CloudDescriptor, CoreDescriptor, DescriptorProvider
from .unit import Core

logger = logging.getLogger(__name__)


class CoreContainer:
    def __init__(self, config: NodeConfig | None = None, *, registry_store: RegistryStore | None = None,
                 reporter_manager: ReporterManager | None = None,
                 resource_loader: ResourceLoader | None = None) -> None:
        self.config = config or NodeConfig()
        self.registry_store = registry_store or RegistryStore(self.config.metrics.registry_overrides)
        self.reporter_manager = reporter_manager or ReporterManager(self.registry_store)
        self.resource_loader = resource_loader or ResourceLoader()
        self._lock = threading.RLock()
        self._cores: dict[str, Core] = {}

    def create_core(self, name: str, cloud_descriptor: CloudDescriptor | None = None, *,
                    descriptor_provider: DescriptorProvider | None = None, load_reporters: bool = True) -> Core:
        with self._lock:
            if name in self._cores:
                raise ValueError(f"core {name} already exists")
            core = Core(name, self, CoreDescriptor(name, cloud_descriptor), descriptor_provider=descriptor_provider)
            self._cores[name] = core
        if load_reporters:
            core.open()
        logger.info("Created core %s (registry=%s)", name, core.metric_coordinator.registry_name)
        return core

    def get_core(self, name: str) -> Core | None:
        with self._lock:
            return self._cores.get(name)

    def core_names(self) -> list[str]:
        with self._lock:
            return sorted(self._cores)

    def rename(self, name: str, to_name: str) -> Core:
        """Rename a core; collected metrics follow it into its new registry."""
        with self._lock:
            core = self._cores.get(name)
            if core is None:
                raise KeyError(name)
            if to_name in self._cores:
                raise ValueError(f"core {to_name} already exists")
            old_registry = core.metric_coordinator.registry_name
            new_registry = NamingSnapshot.resolve(
                core, core_name=to_name, parser=core.metric_coordinator.replica_parser
            ).registry_name
            if new_registry != old_registry:
                self.registry_store.swap_registries(old_registry, new_registry)
            core.set_name(to_name)
            del self._cores[name]
            self._cores[to_name] = core
        return core

    def unload(self, name: str) -> None:
        with self._lock:
            core = self._cores.pop(name, None)
        if core is None:
            raise KeyError(name)
        core.close()

    def shutdown(self) -> None:
        with self._lock:
            cores = list(self._cores.values())
            self._cores.clear()
        for core in cores:
            try:
                core.close()
            except Exception:
                logger.warning("Error closing core %s during shutdown", core.name, exc_info=True)
        self.reporter_manager.close_all()


__all__ = ["CoreContainer"]

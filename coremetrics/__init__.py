"""coremetrics: per-core metrics registry naming and reporter lifecycle."""
from __future__ import annotations

from .config import NodeConfig, PluginInfo, load_node_config
from .core import CloudDescriptor, Core, CoreContainer, CoreDescriptor
from .metrics import (
    RegistryCoordinator,
    RegistryGroup,
    RegistryStore,
    compute_leader_registry_name,
    compute_registry_name,
    compute_registry_name_for_rename,
)
from .reporters import MetricReporter, ReporterManager, ResourceLoader
from .version import __version__

__all__ = [
    "__version__",
    "NodeConfig",
    "PluginInfo",
    "load_node_config",
    "CloudDescriptor",
    "CoreDescriptor",
    "Core",
    "CoreContainer",
    "RegistryCoordinator",
    "RegistryGroup",
    "RegistryStore",
    "compute_registry_name",
    "compute_leader_registry_name",
    "compute_registry_name_for_rename",
    "MetricReporter",
    "ReporterManager",
    "ResourceLoader",
]

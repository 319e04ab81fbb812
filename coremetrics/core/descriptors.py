"""Deployment descriptors of a core.

A core that belongs to a sharded collection carries a :class:`CloudDescriptor`;
standalone cores carry none. Coordinators never read the descriptor directly
but ask a :class:`DescriptorProvider`, so tests and orchestrators can
substitute the source of deployment identity.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol


@dataclass(frozen=True)
class CloudDescriptor:
    collection_name: str
    shard_id: str
    core_node_name: str | None = None


@dataclass(frozen=True)
class CoreDescriptor:
    name: str
    cloud_descriptor: CloudDescriptor | None = None

    @property
    def collection_name(self) -> str | None:
        return self.cloud_descriptor.collection_name if self.cloud_descriptor else None


class DescriptorProvider(Protocol):
    def get_descriptor(self, core: Any) -> CloudDescriptor | None:
        ...


class CoreDescriptorProvider:
    """Reads the cloud descriptor from ``core.descriptor`` at call time."""

    def get_descriptor(self, core: Any) -> CloudDescriptor | None:
        descriptor = getattr(core, "descriptor", None)
        if descriptor is None:
            return None
        return descriptor.cloud_descriptor


__all__ = [
    "CloudDescriptor",
    "CoreDescriptor",
    "DescriptorProvider",
    "CoreDescriptorProvider",
]

"""Registry group taxonomy.

Every registry name starts with ``solr.<group>``; the group tells reporters and
aggregation tools which part of the node a registry describes.
"""

from __future__ import annotations

from enum import Enum

REGISTRY_NAME_PREFIX = "solr."


class RegistryGroup(str, Enum):
    NODE = "node"
    JVM = "jvm"
    JETTY = "jetty"
    CORE = "core"
    COLLECTION = "collection"
    SHARD = "shard"
    CLUSTER = "cluster"
    OVERSEER = "overseer"

    def __str__(self) -> str:
        return self.value

    @property
    def prefix(self) -> str:
        """Full dotted prefix of registries in this group, e.g. ``solr.core.``."""
        return f"{REGISTRY_NAME_PREFIX}{self.value}."

    @classmethod
    def from_any(cls, value: object) -> "RegistryGroup":
        if isinstance(value, cls):
            return value
        v = str(value).strip().lower()
        for g in cls:
            if g.value == v:
                return g
        raise ValueError(f"Unknown registry group: {value!r}")


__all__ = ["REGISTRY_NAME_PREFIX", "RegistryGroup"]

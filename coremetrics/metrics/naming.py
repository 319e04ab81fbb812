"""Hierarchical registry names and replica-name strategies.

Registry names are dot-separated paths under a fixed ``solr.<group>`` prefix so
aggregation tools can group registries of many cores that belong to the same
collection/shard by name prefix:

    registry_name(RegistryGroup.CORE, "products", "shard1", "replica_n1")
        -> "solr.core.products.shard1.replica_n1"

All functions here are pure. Name overrides (configured aliases for a full
registry name) are applied by the registry store, not here.
"""
from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Protocol

from .groups import REGISTRY_NAME_PREFIX, RegistryGroup


def join_name(*parts: str | None) -> str:
    """Join non-empty parts with dots; ``None`` and empty parts are skipped."""
    return ".".join(p for p in parts if p)


def enforce_prefix(name: str) -> str:
    if name.startswith(REGISTRY_NAME_PREFIX):
        return name
    return REGISTRY_NAME_PREFIX + name


def registry_name(group: RegistryGroup | str, *names: str | None) -> str:
    """Build the full registry name for ``group`` and the given name segments.

    If the first segment already carries the ``solr.<group>.`` prefix it is
    taken as an expanded name and the group is not added a second time.
    """
    group = RegistryGroup.from_any(group)
    if names and names[0] and names[0].startswith(group.prefix):
        full = join_name(*names)
    else:
        full = join_name(group.value, *names)
    return enforce_prefix(full)


def overridable_registry_name(name: str, overrides: Mapping[str, str] | None = None) -> str:
    """Enforce the prefix, then apply a configured override for the full name."""
    full = enforce_prefix(name)
    if overrides:
        alias = overrides.get(full)
        if alias:
            return enforce_prefix(alias)
    return full


class ReplicaNameParser(Protocol):
    """Strategy extracting a replica identity from a composite core name."""

    def parse(self, collection: str | None, core_name: str) -> str | None:
        ...


class SuffixReplicaNameParser:
    """Default core naming convention ``<collection>_<shard>_replica<...>``.

    ``products_shard1_1_replica_n3`` in collection ``products`` -> ``replica_n3``.
    A remainder without a ``_replica`` part is returned whole.
    """

    marker = "_replica"

    def parse(self, collection: str | None, core_name: str) -> str | None:
        if not collection or not core_name.startswith(collection):
            return None
        if len(core_name) <= len(collection):
            return None
        rest = core_name[len(collection) + 1:]
        if not rest:
            return None
        pos = rest.rfind(self.marker)
        if pos == -1:
            return rest
        return rest[pos + 1:]

    def __repr__(self) -> str:
        return "SuffixReplicaNameParser()"


class RegexReplicaNameParser:
    """Pattern-based convention; the pattern must define a ``replica`` group.

    The placeholder ``{collection}`` is replaced with the escaped collection
    name before matching, e.g. ``^{collection}__(?P<shard>\\w+?)__(?P<replica>\\w+)$``.
    """

    def __init__(self, pattern: str) -> None:
        if "(?P<replica>" not in pattern:
            raise ValueError("replica name pattern must define a named group 'replica'")
        try:
            re.compile(pattern.replace("{collection}", re.escape("x")))
        except re.error as e:
            raise ValueError(f"invalid replica name pattern {pattern!r}: {e}") from e
        self.pattern = pattern

    def parse(self, collection: str | None, core_name: str) -> str | None:
        if not collection:
            return None
        compiled = re.compile(self.pattern.replace("{collection}", re.escape(collection)))
        m = compiled.match(core_name)
        if m is None:
            return None
        return m.group("replica") or None

    def __repr__(self) -> str:
        return f"RegexReplicaNameParser({self.pattern!r})"


DEFAULT_REPLICA_PARSER = SuffixReplicaNameParser()


def replica_parser_for(pattern: str | None) -> ReplicaNameParser:
    """Return the parser for a configured pattern (``None`` -> default convention)."""
    if not pattern:
        return DEFAULT_REPLICA_PARSER
    return RegexReplicaNameParser(pattern)


__all__ = [
    "join_name",
    "enforce_prefix",
    "registry_name",
    "overridable_registry_name",
    "ReplicaNameParser",
    "SuffixReplicaNameParser",
    "RegexReplicaNameParser",
    "DEFAULT_REPLICA_PARSER",
    "replica_parser_for",
]

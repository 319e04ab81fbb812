"""Per-core metrics registry coordination.

One :class:`RegistryCoordinator` is owned by each core. It derives the core's
registry name, binds metric producers to that registry and manages the
reporters loaded for it across renames and shutdown.

Registry names are hierarchical so aggregation tools can group cores that
belong to the same collection/shard by name prefix. For a standalone core
``my_collection_shard1_1_replica1`` the registry is
``solr.core.my_collection_shard1_1_replica1``. When the same core belongs to
the distributed collection ``my_collection`` the registry becomes
``solr.core.my_collection.shard1_1.replica1`` and the shard leader registry is
``solr.collection.my_collection.shard1_1.leader``.

Naming state lives in an immutable :class:`NamingSnapshot`; a rename builds a
new snapshot and reporters are only reloaded when the registry name changes.

Methods are not safe for concurrent use on one instance; the owning core
serializes rename and close.
"""
from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from prometheus_client import CollectorRegistry

from coremetrics.utils import log_context

from .groups import RegistryGroup
from .naming import DEFAULT_REPLICA_PARSER, ReplicaNameParser, registry_name

if TYPE_CHECKING:  # pragma: no cover
    from coremetrics.reporters.manager import ReporterManager

    from .producer import MetricProducer
    from .store import RegistryStore

logger = logging.getLogger(__name__)

LEADER_SUFFIX = "leader"

_TAG_SEQ = itertools.count(1)
_TAG_LOCK = threading.Lock()


def next_unit_tag() -> str:
    """Return a process-unique reporter ownership tag."""
    with _TAG_LOCK:
        return f"core-{next(_TAG_SEQ)}"


def compute_registry_name(distributed: bool, collection: str | None, shard: str | None,
                          replica: str | None, core_name: str) -> str:
    if distributed:
        return registry_name(RegistryGroup.CORE, collection, shard, replica)
    return registry_name(RegistryGroup.CORE, core_name)


def compute_leader_registry_name(distributed: bool, collection: str | None, shard: str | None) -> str | None:
    if distributed:
        return registry_name(RegistryGroup.COLLECTION, collection, shard, LEADER_SUFFIX)
    return None


def compute_registry_name_for_rename(core: Any, new_core_name: str,
                                     parser: ReplicaNameParser | None = None) -> str:
    """Registry name ``core`` would get once renamed to ``new_core_name``.

    Identity comes from the core's current descriptor; the replica is parsed
    from the proposed name only (no fallback to the descriptor's node name).
    """
    parser = parser or _parser_of(core)
    cd = core.descriptor_provider.get_descriptor(core)
    replica = parser.parse(cd.collection_name, new_core_name) if cd is not None else None
    return compute_registry_name(
        cd is not None,
        cd.collection_name if cd is not None else None,
        cd.shard_id if cd is not None else None,
        replica,
        new_core_name,
    )


def _parser_of(core: Any) -> ReplicaNameParser:
    coordinator = getattr(core, "metric_coordinator", None)
    parser = getattr(coordinator, "replica_parser", None)
    return parser or DEFAULT_REPLICA_PARSER


@dataclass(frozen=True)
class NamingSnapshot:
    distributed: bool
    collection: str | None
    shard: str | None
    replica: str | None
    registry_name: str
    leader_registry_name: str | None

    @classmethod
    def resolve(cls, core: Any, core_name: str | None = None,
                parser: ReplicaNameParser = DEFAULT_REPLICA_PARSER) -> NamingSnapshot:
        """Read the core's descriptor once and derive every name from it."""
        name = core.name if core_name is None else core_name
        cd = core.descriptor_provider.get_descriptor(core)
        if cd is None:
            return cls(False, None, None, None, compute_registry_name(False, None, None, None, name), None)
        replica = parser.parse(cd.collection_name, name)
        if replica is None:
            replica = cd.core_node_name
        return cls(
            True,
            cd.collection_name,
            cd.shard_id,
            replica,
            compute_registry_name(True, cd.collection_name, cd.shard_id, replica, name),
            compute_leader_registry_name(True, cd.collection_name, cd.shard_id),
        )


class RegistryCoordinator:
    """Collects metrics from producers into the core registry and manages its reporters."""

    compute_registry_name = staticmethod(compute_registry_name)
    compute_leader_registry_name = staticmethod(compute_leader_registry_name)
    compute_registry_name_for_rename = staticmethod(compute_registry_name_for_rename)

    def __init__(self, core: Any, *, replica_parser: ReplicaNameParser | None = None) -> None:
        self.core = core
        self.tag = next_unit_tag()
        self.replica_parser = replica_parser or DEFAULT_REPLICA_PARSER
        container = core.container
        self.registry_store: RegistryStore = container.registry_store
        self.reporter_manager: ReporterManager = container.reporter_manager
        self.snapshot = NamingSnapshot.resolve(core, parser=self.replica_parser)

    # Naming accessors
    @property
    def registry_name(self) -> str:
        return self.snapshot.registry_name

    @property
    def leader_registry_name(self) -> str | None:
        return self.snapshot.leader_registry_name

    @property
    def distributed(self) -> bool:
        return self.snapshot.distributed

    @property
    def collection(self) -> str | None:
        return self.snapshot.collection

    @property
    def shard(self) -> str | None:
        return self.snapshot.shard

    @property
    def replica(self) -> str | None:
        return self.snapshot.replica

    def load_reporters(self) -> None:
        """Load reporters configured globally, for the ``core`` group or for this registry.

        Distributed cores additionally get their ``shard`` group reporters.
        """
        plugin_infos = self.core.container.config.metrics.reporters
        with log_context.push_context(core=self.core.name, registry=self.registry_name, tag=self.tag):
            self.reporter_manager.load_reporters(plugin_infos, self.core.resource_loader, self.tag,
                                                 RegistryGroup.CORE, self.registry_name)
            if self.distributed:
                self.reporter_manager.load_shard_reporters(plugin_infos, self.core)

    def after_rename(self) -> bool:
        """Re-derive names from the core's new name and move reporters over.

        Returns True when reporters were reloaded, False when the registry
        name did not change.
        """
        old = self.snapshot
        self.snapshot = NamingSnapshot.resolve(self.core, parser=self.replica_parser)
        if old.registry_name == self.snapshot.registry_name:
            return False
        with log_context.push_context(core=self.core.name, registry=old.registry_name, tag=self.tag):
            logger.info("Registry renamed %s -> %s; reloading reporters", old.registry_name, self.registry_name)
            self.reporter_manager.close_reporters(old.registry_name, self.tag)
            if old.leader_registry_name is not None:
                self.reporter_manager.close_reporters(old.leader_registry_name, self.tag)
        self.load_reporters()
        return True

    def register_metric_producer(self, scope: str, producer: MetricProducer) -> None:
        """Register a producer's instruments under ``scope`` (e.g. ``/admin/ping``)."""
        if not scope or producer is None:
            raise ValueError(
                f"register_metric_producer() called with illegal arguments: scope = {scope!r}, producer = {producer!r}"
            )
        producer.initialize_metrics(self, self.registry_name, scope)

    def get_registry(self) -> CollectorRegistry | None:
        if not self.registry_name:
            return None
        return self.registry_store.registry(self.registry_name)

    def close(self) -> None:
        """Close reporters this coordinator owns."""
        with log_context.push_context(core=self.core.name, registry=self.registry_name, tag=self.tag):
            self.reporter_manager.close_reporters(self.registry_name, self.tag)
            if self.leader_registry_name is not None:
                self.reporter_manager.close_reporters(self.leader_registry_name, self.tag)

    def __repr__(self) -> str:
        return f"RegistryCoordinator(registry={self.registry_name!r}, tag={self.tag!r})"


__all__ = [
    "RegistryCoordinator",
    "NamingSnapshot",
    "next_unit_tag",
    "compute_registry_name",
    "compute_leader_registry_name",
    "compute_registry_name_for_rename",
    "LEADER_SUFFIX",
]

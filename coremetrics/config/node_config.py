"""Node configuration: reporter plugin descriptors and registry settings.

Responsibilities:
  * Load the raw JSON file (path argument or CM_CONFIG).
  * Load a local ``.env`` first so CM_* settings can live next to the config.
  * Validate against NODE_CONFIG_SCHEMA with jsonschema.
  * Apply environment overrides (CM_DISABLE_REPORTERS).

Example file::

    {
      "metrics": {
        "reporters": [
          {"name": "log", "class": "logging", "group": "core", "args": {"period": 30}},
          {"name": "shardState", "class": "shard", "group": "shard"}
        ],
        "registry_overrides": {"solr.core.legacy": "solr.core.products"}
      }
    }

Public API:
  load_node_config(path=None) -> NodeConfig
  parse_node_config(raw) -> NodeConfig
"""

from __future__ import annotations

import json
import logging
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import jsonschema
from dotenv import find_dotenv, load_dotenv

from coremetrics.metrics.naming import replica_parser_for
from coremetrics.utils.exceptions import ConfigError

from . import env
from .schema import NODE_CONFIG_SCHEMA

logger = logging.getLogger(__name__)

_SPLIT = re.compile(r"[\s,]+")


def _split(value: str | None) -> list[str]:
    if not value:
        return []
    return [p for p in _SPLIT.split(value.strip()) if p]


@dataclass(frozen=True)
class PluginInfo:
    """Declarative description of one reporter plugin."""

    name: str
    class_name: str
    group: str | None = None
    registry: str | None = None
    enabled: bool = True
    init_args: dict[str, Any] = field(default_factory=dict)

    def groups(self) -> list[str]:
        return _split(self.group)

    def registries(self) -> list[str]:
        return _split(self.registry)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> PluginInfo:
        return cls(
            name=raw["name"],
            class_name=raw["class"],
            group=raw.get("group"),
            registry=raw.get("registry"),
            enabled=bool(raw.get("enabled", True)),
            init_args=dict(raw.get("args") or {}),
        )


@dataclass(frozen=True)
class MetricsConfig:
    reporters: tuple[PluginInfo, ...] = ()
    registry_overrides: dict[str, str] = field(default_factory=dict)
    replica_name_pattern: str | None = None

    def with_disabled(self, names: set[str]) -> MetricsConfig:
        if not names:
            return self
        reporters = tuple(replace(p, enabled=False) if p.name in names else p for p in self.reporters)
        return replace(self, reporters=reporters)


@dataclass(frozen=True)
class NodeConfig:
    metrics: MetricsConfig = field(default_factory=MetricsConfig)


def parse_node_config(raw: Mapping[str, Any]) -> NodeConfig:
    try:
        jsonschema.validate(instance=raw, schema=NODE_CONFIG_SCHEMA)
    except jsonschema.ValidationError as e:
        path = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise ConfigError(f"Invalid node config at {path}: {e.message}") from e
    metrics_raw = raw.get("metrics") or {}
    pattern = metrics_raw.get("replica_name_pattern")
    try:
        replica_parser_for(pattern)
    except ValueError as e:
        raise ConfigError(f"Invalid node config at metrics/replica_name_pattern: {e}") from e
    metrics = MetricsConfig(
        reporters=tuple(PluginInfo.from_dict(r) for r in metrics_raw.get("reporters", [])),
        registry_overrides=dict(metrics_raw.get("registry_overrides") or {}),
        replica_name_pattern=pattern,
    )
    disabled = set(env.get_csv("DISABLE_REPORTERS"))
    if disabled:
        logger.info("Reporters disabled via environment: %s", ",".join(sorted(disabled)))
        metrics = metrics.with_disabled(disabled)
    return NodeConfig(metrics=metrics)


def load_node_config(path: str | os.PathLike[str] | None = None) -> NodeConfig:
    if not env.get_bool("SKIP_DOTENV"):
        load_dotenv(find_dotenv(usecwd=True), override=False)
    if path is None:
        path = env.get_str("CONFIG") or None
    if path is None:
        logger.debug("No node config path given; using defaults")
        return parse_node_config({})
    p = Path(path)
    try:
        with p.open(encoding="utf-8") as fh:
            raw = json.load(fh)
    except OSError as e:
        raise ConfigError(f"Cannot read node config {p}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Node config {p} is not valid JSON: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"Node config {p} must contain a JSON object")
    cfg = parse_node_config(raw)
    logger.info("Loaded node config %s (reporters=%d)", p, len(cfg.metrics.reporters))
    return cfg


__all__ = [
    "PluginInfo",
    "MetricsConfig",
    "NodeConfig",
    "parse_node_config",
    "load_node_config",
]

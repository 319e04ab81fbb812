"""Configuration: environment helpers and node config loading."""
from __future__ import annotations

from .node_config import MetricsConfig, NodeConfig, PluginInfo, load_node_config, parse_node_config

__all__ = [
    "PluginInfo",
    "MetricsConfig",
    "NodeConfig",
    "parse_node_config",
    "load_node_config",
]

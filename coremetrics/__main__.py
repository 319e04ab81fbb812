"""Command line helpers.

  python -m coremetrics names --core-name products_shard1_replica_n1 --collection products --shard shard1
  python -m coremetrics reporters --config node.json
"""
from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Sequence
from dataclasses import asdict
from typing import Any

from .config.node_config import load_node_config
from .metrics.coordinator import compute_leader_registry_name, compute_registry_name
from .metrics.naming import replica_parser_for
from .utils.exceptions import ConfigError
from .utils.logging_utils import setup_logging


def _names(args: argparse.Namespace) -> dict[str, Any]:
    distributed = bool(args.collection)
    if distributed and not args.shard:
        raise SystemExit("--shard is required together with --collection")
    replica = None
    if distributed:
        replica = replica_parser_for(args.replica_pattern).parse(args.collection, args.core_name)
        if replica is None:
            replica = args.core_node_name
    return {
        'core_name': args.core_name,
        'distributed': distributed,
        'replica': replica,
        'registry_name': compute_registry_name(distributed, args.collection, args.shard, replica, args.core_name),
        'leader_registry_name': compute_leader_registry_name(distributed, args.collection, args.shard),
    }


def _reporters(args: argparse.Namespace) -> dict[str, Any]:
    cfg = load_node_config(args.config)
    return {
        'reporters': [asdict(p) for p in cfg.metrics.reporters],
        'registry_overrides': cfg.metrics.registry_overrides,
        'replica_name_pattern': cfg.metrics.replica_name_pattern,
    }


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog='coremetrics')
    ap.add_argument('--log-level', default='WARNING')
    sub = ap.add_subparsers(dest='command', required=True)

    names = sub.add_parser('names', help='Compute registry names for a core')
    names.add_argument('--core-name', required=True)
    names.add_argument('--collection', help='Collection name (distributed cores only)')
    names.add_argument('--shard', help='Shard id (distributed cores only)')
    names.add_argument('--core-node-name', help='Replica id used when the core name does not carry one')
    names.add_argument('--replica-pattern', help='Regex with a named group "replica"')
    names.set_defaults(func=_names)

    rep = sub.add_parser('reporters', help='Show reporter plugins from a node config')
    rep.add_argument('--config', help='Node config JSON (defaults to CM_CONFIG)')
    rep.set_defaults(func=_reporters)
    return ap


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)
    try:
        out = args.func(args)
    except ConfigError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    print(json.dumps(out, indent=2, sort_keys=True))
    return 0


if __name__ == '__main__':
    sys.exit(main())

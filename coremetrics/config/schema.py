"""JSON schema (draft-07) for node configuration files."""
from __future__ import annotations

from typing import Any

REPORTER_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["name", "class"],
    "properties": {
        "name": {"type": "string", "minLength": 1},
        "class": {"type": "string", "minLength": 1},
        "group": {"type": ["string", "null"]},
        "registry": {"type": ["string", "null"]},
        "enabled": {"type": "boolean"},
        "args": {"type": "object"},
    },
    "additionalProperties": False,
}

NODE_CONFIG_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        "metrics": {
            "type": "object",
            "properties": {
                "reporters": {"type": "array", "items": REPORTER_SCHEMA},
                "registry_overrides": {
                    "type": "object",
                    "additionalProperties": {"type": "string", "minLength": 1},
                },
                "replica_name_pattern": {"type": ["string", "null"]},
            },
            "additionalProperties": False,
        },
    },
    "additionalProperties": True,
}

__all__ = ["NODE_CONFIG_SCHEMA", "REPORTER_SCHEMA"]

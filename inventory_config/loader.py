"""
Settings loader (``inventory_config.loader``).

Responsibility
--------------
Loads a settings YAML file and parses it into the frozen dataclasses of
``inventory_config.schema``.  Runtime code calls
``inventory_config.get_active_settings()`` instead of this module.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Invalid values (unknown bulk history policy, non-positive limits,
  unknown alias field)  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from inventory_config.schema import IdSettings, IngestionSettings, InventorySettings
from inventory_ingestion.mapping.aliases import DEFAULT_COLUMN_ALIASES
from inventory_kernel.domain.dtos import BulkHistoryPolicy


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _positive_int(value: Any, name: str) -> int:
    number = int(value)
    if number < 1:
        raise ValueError(f"{name} must be at least 1, got {number}")
    return number


def parse_ids(data: dict[str, Any]) -> IdSettings:
    return IdSettings(
        prefix=str(data.get("prefix", "JRS-")),
        max_attempts=_positive_int(data.get("max_attempts", 5), "ids.max_attempts"),
    )


def parse_ingestion(data: dict[str, Any]) -> IngestionSettings:
    aliases = data.get("column_aliases") or {}
    unknown = sorted(set(aliases) - set(DEFAULT_COLUMN_ALIASES))
    if unknown:
        raise ValueError(f"Unknown import fields in column_aliases: {unknown}")
    return IngestionSettings(
        max_reported_errors=_positive_int(
            data.get("max_reported_errors", 10), "ingestion.max_reported_errors"
        ),
        column_aliases=tuple(
            (name, tuple(str(a) for a in names)) for name, names in sorted(aliases.items())
        ),
    )


def parse_settings(data: dict[str, Any]) -> InventorySettings:
    """
    Parse an ``InventorySettings`` from a dict.

    Raises:
        KeyError: if ``config_id``, ``version``, ``database_url`` or
            ``base_url`` is missing.
        ValueError: for an unknown ``lifecycle.bulk_history_policy``.
    """
    lifecycle = data.get("lifecycle") or {}
    policy = str(lifecycle.get("bulk_history_policy", BulkHistoryPolicy.SKIP.value)).lower()

    return InventorySettings(
        config_id=str(data["config_id"]),
        version=int(data["version"]),
        database_url=str(data["database_url"]),
        base_url=str(data["base_url"]),
        log_level=str(data.get("log_level", "INFO")).upper(),
        seed_locations=tuple(str(n) for n in data.get("seed_locations") or ()),
        ids=parse_ids(data.get("ids") or {}),
        bulk_history_policy=BulkHistoryPolicy(policy),
        ingestion=parse_ingestion(data.get("ingestion") or {}),
        checksum=compute_checksum(data),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()

"""
inventory_config -- single public entrypoint for runtime settings.

Responsibility:
    ``get_active_settings()`` is the one way to obtain settings.  It loads
    the YAML file (``sets/default.yaml`` unless ``INVENTORY_CONFIG`` or an
    explicit path says otherwise) and applies environment overrides.

Environment overrides:
    INVENTORY_CONFIG         path of the settings file
    INVENTORY_DATABASE_URL   replaces ``database_url``
    INVENTORY_BASE_URL       replaces ``base_url``
    INVENTORY_LOG_LEVEL      replaces ``log_level``

Audit relevance:
    Every call emits an ``inventory_config_loaded`` log entry with the
    config id, version and checksum of the file that was read.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import replace
from pathlib import Path

from inventory_config.loader import load_yaml_file, parse_settings
from inventory_config.schema import IdSettings, IngestionSettings, InventorySettings

_logger = logging.getLogger("inventory_kernel.config")

DEFAULT_SETTINGS_PATH = Path(__file__).parent / "sets" / "default.yaml"

ENV_CONFIG_PATH = "INVENTORY_CONFIG"
ENV_DATABASE_URL = "INVENTORY_DATABASE_URL"
ENV_BASE_URL = "INVENTORY_BASE_URL"
ENV_LOG_LEVEL = "INVENTORY_LOG_LEVEL"


def get_active_settings(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> InventorySettings:
    """
    Load settings and apply environment overrides.

    Raises:
        FileNotFoundError: the settings file does not exist.
        ValueError / KeyError: the file does not parse.
    """
    env = os.environ if environ is None else environ
    path = Path(config_path or env.get(ENV_CONFIG_PATH) or DEFAULT_SETTINGS_PATH)

    settings = parse_settings(load_yaml_file(path))

    overrides: dict[str, str] = {}
    if env.get(ENV_DATABASE_URL):
        overrides["database_url"] = env[ENV_DATABASE_URL]
    if env.get(ENV_BASE_URL):
        overrides["base_url"] = env[ENV_BASE_URL]
    if env.get(ENV_LOG_LEVEL):
        overrides["log_level"] = env[ENV_LOG_LEVEL].upper()
    if overrides:
        settings = replace(settings, **overrides)

    _logger.info(
        "inventory_config_loaded",
        extra={
            "config_id": settings.config_id,
            "config_version": settings.version,
            "checksum": settings.checksum,
            "config_path": str(path),
            "env_overrides": sorted(overrides),
        },
    )
    return settings


__all__ = [
    "DEFAULT_SETTINGS_PATH",
    "IdSettings",
    "IngestionSettings",
    "InventorySettings",
    "get_active_settings",
]

"""
InventorySettings schema.

The typed form of a settings YAML file.  The loader parses YAML into these
frozen dataclasses; ``inventory_config.get_active_settings()`` returns one.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from inventory_kernel.domain.dtos import BulkHistoryPolicy


@dataclass(frozen=True)
class IdSettings:
    """Item ID generation."""

    prefix: str = "JRS-"
    max_attempts: int = 5


@dataclass(frozen=True)
class IngestionSettings:
    """Spreadsheet import."""

    max_reported_errors: int = 10
    # field -> replacement alias list
    column_aliases: tuple[tuple[str, tuple[str, ...]], ...] = ()

    @property
    def alias_overrides(self) -> dict[str, tuple[str, ...]]:
        return dict(self.column_aliases)


@dataclass(frozen=True)
class InventorySettings:
    """Everything the bootstrap needs to open the store and wire services."""

    config_id: str
    version: int
    database_url: str
    base_url: str
    log_level: str = "INFO"
    seed_locations: tuple[str, ...] = ("Warehouse", "Office", "Vehicle", "Customer")
    ids: IdSettings = field(default_factory=IdSettings)
    bulk_history_policy: BulkHistoryPolicy = BulkHistoryPolicy.SKIP
    ingestion: IngestionSettings = field(default_factory=IngestionSettings)
    checksum: str = ""

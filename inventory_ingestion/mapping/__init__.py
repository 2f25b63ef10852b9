"""Header alias mapping for ingestion (pure)."""

from inventory_ingestion.mapping.aliases import (
    DEFAULT_COLUMN_ALIASES,
    merge_aliases,
    resolve_field,
    resolve_row,
)

__all__ = [
    "DEFAULT_COLUMN_ALIASES",
    "merge_aliases",
    "resolve_field",
    "resolve_row",
]

"""Pure types for the import system."""

from inventory_ingestion.domain.types import DEFAULT_MAX_REPORTED_ERRORS, ImportResult

__all__ = [
    "DEFAULT_MAX_REPORTED_ERRORS",
    "ImportResult",
]

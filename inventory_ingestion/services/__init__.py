"""Ingestion services."""

from inventory_ingestion.services.import_service import (
    IMPORT_NOTE,
    ImportService,
    build_create_request,
)

__all__ = [
    "IMPORT_NOTE",
    "ImportService",
    "build_create_request",
]

"""Source adapters for item ingestion (file I/O only, no DB)."""

from inventory_ingestion.adapters.base import SourceAdapter, SourceProbe, is_blank_row
from inventory_ingestion.adapters.csv_adapter import CsvSourceAdapter
from inventory_ingestion.adapters.xlsx_adapter import XlsxSourceAdapter

__all__ = [
    "SourceAdapter",
    "SourceProbe",
    "CsvSourceAdapter",
    "XlsxSourceAdapter",
    "is_blank_row",
]

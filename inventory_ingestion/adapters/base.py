"""
Source adapter protocol and probe DTO.

Contract:
    SourceAdapter.read() yields one dict per data row (streaming), blank rows
    included, so the n-th dict is always spreadsheet row n + 1 (the header is
    row 1).  SourceAdapter.probe() returns a quick snapshot: row count,
    columns, sample rows.

Architecture: inventory_ingestion/adapters.  File I/O only, no DB or kernel
imports.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Protocol, runtime_checkable


@runtime_checkable
class SourceAdapter(Protocol):
    """Protocol for reading tabular source files into row dicts."""

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[dict[str, Any]]:
        """Yield one dict per data row.  Streams; does not load entire file."""
        ...

    def probe(self, source_path: Path, options: dict[str, Any]) -> "SourceProbe":
        """Quick probe: row count, detected columns, sample rows."""
        ...


@dataclass(frozen=True)
class SourceProbe:
    """Result of probing a source file (row count, columns, first N rows)."""

    row_count: int
    columns: tuple[str, ...]
    sample_rows: tuple[dict[str, Any], ...]  # First 5 non-blank rows; do not mutate
    encoding: str | None = None
    detected_delimiter: str | None = None


def is_blank_row(row: dict[str, Any]) -> bool:
    """True when every cell is empty or whitespace."""
    return all(value is None or str(value).strip() == "" for value in row.values())

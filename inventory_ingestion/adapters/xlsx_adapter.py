"""
XLSX source adapter for order spreadsheets.

Layout options:
  - sheet by index (0-based) or name
  - skip_rows before the header row
  - header_row: 0-based index (after skip_rows) of the header; default 0

Cell values are normalized the way a CSV export would render them: blank
cells become "", whole floats become ints, dates become ISO strings, text
is stripped.  Blank rows are yielded (all "") so positions match the sheet.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterator

import openpyxl

from inventory_ingestion.adapters.base import SourceProbe, is_blank_row

SAMPLE_SIZE = 5
MAX_ROWS = 100_000


def _normalize_header_cell(value: Any) -> str:
    """Normalize a header cell for use as a column key."""
    if value is None:
        return ""
    return re.sub(r"\s+", " ", str(value)).strip()


def _cell_value(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        return value.strip()
    return value


def _headers(row: tuple[Any, ...]) -> list[str]:
    cells = [_normalize_header_cell(value) for value in row]
    while cells and not cells[-1]:
        cells.pop()
    headers: list[str] = []
    for c, cell in enumerate(cells):
        key = cell or f"Column_{c + 1}"
        base = key
        cnt = 0
        while key in headers:
            cnt += 1
            key = f"{base}_{cnt}"
        headers.append(key)
    return headers


def _record(headers: list[str], row: tuple[Any, ...]) -> dict[str, Any]:
    values = [_cell_value(row[c]) if c < len(row) else "" for c in range(len(headers))]
    return dict(zip(headers, values))


class XlsxSourceAdapter:
    """Read .xlsx files as one dict per row, keyed by the header row."""

    def _get_sheet(self, wb: Any, options: dict[str, Any]) -> Any:
        sheet_ref = options.get("sheet")
        if sheet_ref is None:
            return wb.active
        if isinstance(sheet_ref, int):
            return wb.worksheets[sheet_ref]
        return wb[sheet_ref]

    def _rows(self, source_path: Path, options: dict[str, Any], max_row: int) -> list[tuple[Any, ...]]:
        wb = openpyxl.load_workbook(source_path, read_only=True, data_only=True)
        try:
            sheet = self._get_sheet(wb, options)
            skip_rows = int(options.get("skip_rows", 0))
            return list(
                sheet.iter_rows(min_row=1 + skip_rows, max_row=max_row, values_only=True)
            )
        finally:
            wb.close()

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[dict[str, Any]]:
        rows = self._rows(source_path, options, MAX_ROWS)
        if not rows:
            return
        hi = int(options.get("header_row", 0))
        headers = _headers(rows[hi])
        for row in rows[hi + 1 :]:
            yield _record(headers, row)

    def probe(self, source_path: Path, options: dict[str, Any]) -> SourceProbe:
        rows = self._rows(source_path, options, MAX_ROWS)
        if not rows:
            return SourceProbe(row_count=0, columns=(), sample_rows=())

        hi = int(options.get("header_row", 0))
        headers = _headers(rows[hi])
        sample: list[dict[str, Any]] = []
        for row in rows[hi + 1 :]:
            record = _record(headers, row)
            if not is_blank_row(record):
                sample.append(record)
            if len(sample) >= SAMPLE_SIZE:
                break
        return SourceProbe(
            row_count=len(rows) - hi - 1,
            columns=tuple(headers),
            sample_rows=tuple(sample),
        )

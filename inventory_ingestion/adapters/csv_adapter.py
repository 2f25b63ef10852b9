"""
CSV source adapter.

Uses csv.reader over a header row.  Configurable: delimiter, encoding,
quoting, skip_rows.  Handles a BOM via utf-8-sig when encoding is utf-8.
Blank lines are yielded as all-empty rows so row positions match the
spreadsheet the file came from; short rows are padded with "" and extra
cells beyond the header are dropped.
"""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Any, Iterable, Iterator, TextIO

from inventory_ingestion.adapters.base import SourceProbe, is_blank_row

_QUOTING = {
    "minimal": csv.QUOTE_MINIMAL,
    "all": csv.QUOTE_ALL,
    "nonnumeric": csv.QUOTE_NONNUMERIC,
    "none": csv.QUOTE_NONE,
}

SAMPLE_SIZE = 5


def _get_encoding(options: dict[str, Any]) -> str:
    enc = options.get("encoding", "utf-8")
    if enc.lower() == "utf-8":
        return "utf-8-sig"  # Strip BOM if present
    return enc


def _get_quoting(options: dict[str, Any]) -> int:
    q = options.get("quoting", "minimal")
    if isinstance(q, int):
        return q
    return _QUOTING.get(str(q).lower(), csv.QUOTE_MINIMAL)


def _skip(f: TextIO, skip_rows: int) -> TextIO:
    for _ in range(skip_rows):
        next(f, None)
    return f


def _reader(lines: Iterable[str], options: dict[str, Any]) -> Iterator[list[str]]:
    return csv.reader(
        lines,
        delimiter=options.get("delimiter", ","),
        quoting=_get_quoting(options),
    )


def _record(columns: tuple[str, ...], row: list[str]) -> dict[str, Any]:
    cells = list(row[: len(columns)])
    cells.extend([""] * (len(columns) - len(cells)))
    return dict(zip(columns, cells))


def _rows(lines: Iterable[str], options: dict[str, Any]) -> Iterator[dict[str, Any]]:
    reader = _reader(lines, options)
    header = next(reader, None)
    if header is None:
        return
    columns = tuple(cell.strip() for cell in header)
    for row in reader:
        yield _record(columns, row)


class CsvSourceAdapter:
    """Read CSV text or files as one dict per row.  Streams."""

    def read_text(self, text: str, options: dict[str, Any] | None = None) -> Iterator[dict[str, Any]]:
        """Rows of CSV already held in memory (pasted text, request body)."""
        options = options or {}
        f = io.StringIO(text.lstrip("\ufeff"), newline="")
        yield from _rows(_skip(f, int(options.get("skip_rows", 0))), options)

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[dict[str, Any]]:
        encoding = _get_encoding(options)
        with source_path.open("r", encoding=encoding, newline="") as f:
            yield from _rows(_skip(f, int(options.get("skip_rows", 0))), options)

    def probe(self, source_path: Path, options: dict[str, Any]) -> SourceProbe:
        encoding = _get_encoding(options)
        delimiter = options.get("delimiter", ",")

        with source_path.open("r", encoding=encoding, newline="") as f:
            reader = _reader(_skip(f, int(options.get("skip_rows", 0))), options)
            columns = tuple(cell.strip() for cell in next(reader, []))
            sample: list[dict[str, Any]] = []
            count = 0
            for row in reader:
                count += 1
                record = _record(columns, row)
                if len(sample) < SAMPLE_SIZE and not is_blank_row(record):
                    sample.append(record)

        return SourceProbe(
            row_count=count,
            columns=columns,
            sample_rows=tuple(sample),
            encoding=encoding,
            detected_delimiter=delimiter,
        )

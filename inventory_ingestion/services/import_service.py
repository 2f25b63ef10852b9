"""
Import service: spreadsheet rows -> items, one row at a time.

Reads rows through a source adapter, resolves headers through the alias
table, normalizes dates, status and payment status, and hands each row to
LifecycleController.create_item with the note "Imported from CSV".  The
controller normalizes the size token and resolves the age group.

Each row is its own transaction.  A failing row is logged, reported as
``"Row <n>: <message>"`` (the header is row 1) and skipped; the batch
always runs to the end.

Uses structured logging (LogContext, get_logger("ingestion.*")).
"""

from __future__ import annotations

import csv
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any
from uuid import uuid4

from inventory_kernel.domain.dtos import CreateItemRequest
from inventory_kernel.domain.normalize import (
    normalize_date,
    normalize_location,
    normalize_payment_status,
    normalize_quantity,
    normalize_status,
)
from inventory_kernel.exceptions import ValidationError
from inventory_kernel.logging_config import LogContext, get_logger
from inventory_kernel.services.lifecycle_controller import LifecycleController

from inventory_ingestion.adapters.base import SourceAdapter, SourceProbe, is_blank_row
from inventory_ingestion.adapters.csv_adapter import CsvSourceAdapter
from inventory_ingestion.adapters.xlsx_adapter import XlsxSourceAdapter
from inventory_ingestion.domain.types import DEFAULT_MAX_REPORTED_ERRORS, ImportResult
from inventory_ingestion.mapping.aliases import DEFAULT_COLUMN_ALIASES, resolve_row

logger = get_logger("ingestion.import_service")

IMPORT_NOTE = "Imported from CSV"

# Spreadsheet row of the first data row (the header is row 1).
FIRST_DATA_ROW = 2

_SUFFIX_FORMATS = {
    ".csv": "csv",
    ".txt": "csv",
    ".tsv": "csv",
    ".xlsx": "xlsx",
    ".xlsm": "xlsx",
}


def _default_adapters() -> dict[str, SourceAdapter]:
    return {
        "csv": CsvSourceAdapter(),
        "xlsx": XlsxSourceAdapter(),
    }


def build_create_request(
    row: Mapping[str, Any],
    aliases: Mapping[str, tuple[str, ...]] = DEFAULT_COLUMN_ALIASES,
) -> CreateItemRequest:
    """
    Map one raw row to a CreateItemRequest.

    Raises:
        ValidationError: the quantity cell is present but not a whole number.
    """
    values = resolve_row(row, aliases)

    raw_quantity = values["quantity"].strip()
    quantity = normalize_quantity(raw_quantity)
    if quantity is None:
        if raw_quantity:
            raise ValidationError("quantity", f"not a whole number: {raw_quantity!r}")
        quantity = 1

    return CreateItemRequest(
        customer_name=values["customer_name"].strip(),
        quantity=quantity,
        item_type=values["item_type"].strip(),
        color=values["color"].strip(),
        design=values["design"].strip(),
        team=values["team"].strip(),
        number=values["number"].strip(),
        size=values["size"],
        age_group=values["age_group"] or None,
        namebar=values["namebar"].strip(),
        chest_logo=values["chest_logo"].strip(),
        notes=values["notes"].strip(),
        date_ordered=normalize_date(values["date_ordered"]),
        date_invoiced=normalize_date(values["date_invoiced"]),
        date_received=normalize_date(values["date_received"]),
        status=normalize_status(values["status"]),
        payment_status=normalize_payment_status(values["payment_status"]),
        tracking_number=values["tracking_number"].strip(),
        location=normalize_location(values["location"]),
    )


class ImportService:
    """Feeds spreadsheet rows to the lifecycle controller's create path."""

    def __init__(
        self,
        controller: LifecycleController,
        *,
        aliases: Mapping[str, tuple[str, ...]] | None = None,
        max_reported_errors: int = DEFAULT_MAX_REPORTED_ERRORS,
        adapters: dict[str, SourceAdapter] | None = None,
    ):
        self._controller = controller
        self._aliases = dict(aliases) if aliases is not None else dict(DEFAULT_COLUMN_ALIASES)
        self._max_reported_errors = max_reported_errors
        self._adapters = adapters if adapters is not None else _default_adapters()

    # -- entry points --------------------------------------------------------

    def import_batch(self, text: str, source_name: str = "csv") -> ImportResult:
        """Import delimited text with a header row (pasted or uploaded CSV)."""
        adapter = self._adapters.get("csv")
        if not isinstance(adapter, CsvSourceAdapter):
            adapter = CsvSourceAdapter()
        return self.import_rows(adapter.read_text(text or ""), source_name=source_name)

    def import_file(self, source_path: Path, options: dict[str, Any] | None = None) -> ImportResult:
        """Import a .csv or .xlsx file, chosen by suffix."""
        source_path = Path(source_path)
        adapter = self._adapter_for(source_path)
        options = dict(options or {})
        if source_path.suffix.lower() == ".tsv":
            options.setdefault("delimiter", "\t")
        # Lines dropped before the header shift every data row down.
        first_row = FIRST_DATA_ROW + int(options.get("skip_rows", 0))
        if isinstance(adapter, XlsxSourceAdapter):
            first_row += int(options.get("header_row", 0))
        return self.import_rows(
            adapter.read(source_path, options),
            source_name=source_path.name,
            first_row=first_row,
        )

    def probe_file(self, source_path: Path, options: dict[str, Any] | None = None) -> SourceProbe:
        """Preview a source file: row count, columns, sample rows."""
        source_path = Path(source_path)
        options = dict(options or {})
        if source_path.suffix.lower() == ".tsv":
            options.setdefault("delimiter", "\t")
        return self._adapter_for(source_path).probe(source_path, options)

    # -- row loop ------------------------------------------------------------

    def import_rows(
        self,
        rows: Iterable[Mapping[str, Any]],
        source_name: str = "rows",
        first_row: int = FIRST_DATA_ROW,
    ) -> ImportResult:
        """
        Create one item per non-blank row.

        ``rows`` must include blank rows so each row is reported by its
        spreadsheet row number, counting from ``first_row``.
        """
        batch_id = uuid4().hex[:12]
        errors: list[str] = []
        item_ids: list[str] = []
        total = 0
        blank = 0

        with LogContext.bind(batch_id=batch_id, operation="import_batch"):
            logger.info("import_batch_started", extra={"source_name": source_name})

            for row_number, row in self._numbered(rows, errors, first_row):
                if is_blank_row(row):
                    blank += 1
                    continue
                total += 1
                with LogContext.bind(source_row=str(row_number)):
                    try:
                        request = build_create_request(row, self._aliases)
                        item_id = self._controller.create_item(request, note=IMPORT_NOTE)
                    except Exception as exc:
                        errors.append(f"Row {row_number}: {exc}")
                        logger.warning(
                            "import_row_failed",
                            extra={"error": str(exc)},
                            exc_info=True,
                        )
                        continue
                    item_ids.append(item_id)
                    logger.debug("import_row_created", extra={"created_item_id": item_id})

            result = ImportResult(
                imported_count=len(item_ids),
                errors=tuple(errors),
                total_rows=total,
                skipped_blank_rows=blank,
                item_ids=tuple(item_ids),
                max_reported_errors=self._max_reported_errors,
            )
            logger.info(
                "import_batch_completed",
                extra={
                    "source_name": source_name,
                    "imported_count": result.imported_count,
                    "failed_count": result.failed_count,
                    "total_rows": total,
                },
            )
        return result

    @staticmethod
    def _numbered(
        rows: Iterable[Mapping[str, Any]],
        errors: list[str],
        first_row: int = FIRST_DATA_ROW,
    ) -> Iterator[tuple[int, Mapping[str, Any]]]:
        """Pair rows with spreadsheet row numbers; a parse error ends the input."""
        iterator = iter(rows)
        row_number = first_row - 1
        while True:
            row_number += 1
            try:
                row = next(iterator)
            except StopIteration:
                return
            except csv.Error as exc:
                errors.append(f"Row {row_number}: {exc}")
                logger.warning("import_parse_failed", extra={"error": str(exc)}, exc_info=True)
                return
            yield row_number, row

    def _adapter_for(self, source_path: Path) -> SourceAdapter:
        fmt = _SUFFIX_FORMATS.get(source_path.suffix.lower())
        adapter = self._adapters.get(fmt) if fmt else None
        if adapter is None:
            raise ValueError(f"No adapter for file type {source_path.suffix!r}")
        return adapter

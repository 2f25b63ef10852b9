"""
inventory_ingestion.domain.types -- Pure frozen dataclasses for the import
system.  ZERO I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_MAX_REPORTED_ERRORS = 10


@dataclass(frozen=True)
class ImportResult:
    """
    Outcome of one import batch.

    ``errors`` holds every row failure as ``"Row <n>: <message>"`` in row
    order; ``reported_errors`` is the prefix shown to a person.
    """

    imported_count: int
    errors: tuple[str, ...] = ()
    total_rows: int = 0
    skipped_blank_rows: int = 0
    item_ids: tuple[str, ...] = ()
    max_reported_errors: int = field(default=DEFAULT_MAX_REPORTED_ERRORS, compare=False)

    @property
    def failed_count(self) -> int:
        return len(self.errors)

    @property
    def reported_errors(self) -> tuple[str, ...]:
        return self.errors[: self.max_reported_errors]

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

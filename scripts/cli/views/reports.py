"""Dashboard, location and import result views."""

from inventory_ingestion.adapters.base import SourceProbe
from inventory_ingestion.domain.types import ImportResult
from inventory_kernel.domain.dtos import InventorySummary, LocationInfo
from inventory_kernel.domain.statuses import REMAKE_LABEL, STATUS_LABELS

from scripts.cli.util import print_rule
from scripts.cli.views.items import show_item_table


def show_summary(summary: InventorySummary) -> None:
    print()
    print_rule("INVENTORY SUMMARY")
    print(f"  {'Total':<16} {summary.total:>6}")
    for status, count in summary.by_status.items():
        print(f"  {STATUS_LABELS[status]:<16} {count:>6}")
    print(f"  {REMAKE_LABEL:<16} {summary.needs_remake:>6}")
    if summary.recent:
        print("\n  Most recent:")
        show_item_table(list(summary.recent))
    else:
        print()


def show_locations(locations: list[LocationInfo]) -> None:
    if not locations:
        print("\n  No locations.\n")
        return
    print()
    print(f"  {'ID':>4}  {'Name':<20} {'Items':>6}  Description")
    for loc in locations:
        print(f"  {loc.id:>4}  {loc.name:<20} {loc.item_count:>6}  {loc.description or ''}")
    print()


def show_import_result(result: ImportResult) -> None:
    print(f"  Imported {result.imported_count} of {result.total_rows} row(s).")
    if result.skipped_blank_rows:
        print(f"  Skipped {result.skipped_blank_rows} blank row(s).")
    for message in result.reported_errors:
        print(f"  {message}")
    hidden = result.failed_count - len(result.reported_errors)
    if hidden > 0:
        print(f"  ... and {hidden} more error(s).")


def show_probe(probe: SourceProbe) -> None:
    print(f"  Rows: {probe.row_count}")
    print(f"  Columns: {list(probe.columns)}")
    if probe.encoding:
        print(f"  Encoding: {probe.encoding}")
    if probe.detected_delimiter:
        print(f"  Delimiter: {probe.detected_delimiter!r}")
    print("  Sample:")
    for i, row in enumerate(probe.sample_rows, 1):
        print(f"    {i}: {row}")

"""CLI views: print items, history, summaries, locations, import results."""

from scripts.cli.views.items import show_history, show_item, show_item_table
from scripts.cli.views.reports import (
    show_import_result,
    show_locations,
    show_probe,
    show_summary,
)

__all__ = [
    "show_history",
    "show_import_result",
    "show_item",
    "show_item_table",
    "show_locations",
    "show_probe",
    "show_summary",
]

"""
Header alias resolution: raw spreadsheet row -> canonical field values.

Order forms and exports have used many spellings for the same column over
the years (``NUMBER``, ``Number``, ``#``, ...).  Each canonical field has an
ordered alias list; the first alias present in the row's headers wins.
Headers are compared exactly after trimming surrounding whitespace.

ZERO I/O.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

# Canonical field -> accepted headers, in priority order.
DEFAULT_COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "quantity": ("QTY", "Qty", "qty", "Quantity", "QUANTITY"),
    "item_type": ("TYPE", "Type", "type", "Item Type", "ITEM TYPE"),
    "color": ("COLOR", "Color", "color", "Colour", "COLOUR"),
    "design": ("DESIGN", "Design", "design"),
    "customer_name": (
        "Customer Name",
        "CUSTOMER NAME",
        "customer_name",
        "CUSTOMER",
        "Customer",
        "Player Name",
        "PLAYER NAME",
    ),
    "team": ("TEAM", "Team", "team"),
    "number": ("NUMBER", "Number", "number", "#", "No.", "NO.", "Jersey #", "JERSEY #"),
    "size": ("SIZE", "Size", "size"),
    "age_group": ("AGE", "Age", "age", "Age Group", "AGE GROUP", "age_group"),
    "namebar": ("NAMEBAR", "Namebar", "namebar", "Name Bar", "NAME BAR", "NAME ON BACK"),
    "chest_logo": ("CHEST LOGO", "Chest Logo", "chest_logo", "LOGO", "Logo"),
    "notes": ("NOTES", "Notes", "notes", "COMMENTS", "Comments"),
    "date_ordered": ("DATE ORDERED", "Date Ordered", "date_ordered", "ORDERED", "Ordered"),
    "date_invoiced": ("DATE INVOICED", "Date Invoiced", "date_invoiced", "INVOICED", "Invoiced"),
    "date_received": ("DATE RECEIVED", "Date Received", "date_received", "RECEIVED", "Received"),
    "status": ("STATUS", "Status", "status"),
    "payment_status": ("PAYMENT", "Payment", "PAYMENT STATUS", "Payment Status", "payment_status"),
    "tracking_number": ("TRACKING", "Tracking", "TRACKING #", "Tracking Number", "tracking_number"),
    "location": ("LOCATION", "Location", "location"),
}


def merge_aliases(
    overrides: Mapping[str, tuple[str, ...] | list[str]] | None,
    base: Mapping[str, tuple[str, ...]] = DEFAULT_COLUMN_ALIASES,
) -> dict[str, tuple[str, ...]]:
    """
    Replace the alias list of each field named in ``overrides``.

    Unknown field names are rejected so a typo in a settings file does not
    silently do nothing.
    """
    merged = dict(base)
    for field_name, aliases in (overrides or {}).items():
        if field_name not in merged:
            raise ValueError(f"Unknown import field {field_name!r}")
        merged[field_name] = tuple(str(a) for a in aliases)
    return merged


def resolve_field(
    row: Mapping[str, Any],
    aliases: tuple[str, ...],
) -> str:
    """Value of the first alias present in ``row``; "" when none is."""
    trimmed = {str(k).strip(): v for k, v in row.items() if k is not None}
    for alias in aliases:
        if alias in trimmed:
            value = trimmed[alias]
            return "" if value is None else str(value)
    return ""


def resolve_row(
    row: Mapping[str, Any],
    aliases: Mapping[str, tuple[str, ...]] = DEFAULT_COLUMN_ALIASES,
) -> dict[str, str]:
    """Every canonical field resolved from ``row`` (missing fields are "")."""
    return {field_name: resolve_field(row, names) for field_name, names in aliases.items()}

"""
Normalizer -- free-form tokens to canonical field values.

Responsibility:
    Converts the loosely formatted values that arrive from order forms and
    spreadsheets (sizes like ``"YM"``, US dates like ``"1/5/2025"``, status
    words in any case) into the values stored on an item.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.  Used by the
    lifecycle controller and by the ingestion pipeline.

Invariants enforced:
    - Every function is total: it never raises, whatever it is given.
    - Every function is pure: same input, same output, no side effects.

Known ambiguity:
    The size prefix convention ``A``/``Y`` (adult/youth) cannot be told
    apart from a garment size that genuinely starts with ``A`` or ``Y``.
    ``"AL"`` always means Adult Large.
"""

from __future__ import annotations

import re
from typing import Any

from inventory_kernel.domain.statuses import (
    DEFAULT_AGE_GROUP,
    DEFAULT_PAYMENT_STATUS,
    DEFAULT_STATUS,
    AgeGroup,
    ItemStatus,
    PaymentStatus,
)

_US_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")

_STATUS_VALUES = {s.value: s for s in ItemStatus}
_PAYMENT_VALUES = {p.value: p for p in PaymentStatus}


def _text(raw: Any) -> str:
    if raw is None:
        return ""
    return str(raw).strip()


def normalize_size(raw: Any) -> tuple[str, AgeGroup]:
    """
    Split an age-group prefix off a size token.

    ``"YM"`` -> ``("M", Youth)``, ``"AL"`` -> ``("L", Adult)``,
    ``"XL"`` -> ``("XL", Adult)``, ``""`` -> ``("", Adult)``.
    The residual size is never validated against a size list.
    """
    size = _text(raw).upper()
    if not size:
        return "", DEFAULT_AGE_GROUP
    if size[0] == "Y":
        return size[1:], AgeGroup.YOUTH
    if size[0] == "A":
        return size[1:], AgeGroup.ADULT
    return size, DEFAULT_AGE_GROUP


def normalize_age_group(raw: Any) -> AgeGroup | None:
    """Map an explicit age-group value; blank means "not supplied"."""
    if isinstance(raw, AgeGroup):
        return raw
    value = _text(raw).upper()
    if not value:
        return None
    if value.startswith("Y"):
        return AgeGroup.YOUTH
    return AgeGroup.ADULT


def resolve_size_and_age(raw_size: Any, explicit_age: Any = None) -> tuple[str, AgeGroup]:
    """Normalized size plus the age group: explicit value wins over the prefix."""
    size, derived = normalize_size(raw_size)
    age = normalize_age_group(explicit_age)
    return size, age or derived


def normalize_date(raw: Any) -> str:
    """
    Rewrite ``M/D/YYYY`` and ``MM/DD/YYYY`` to ``YYYY-MM-DD``.

    Anything else (already-ISO, blank, malformed) passes through trimmed.
    Month and day ranges are not checked.
    """
    value = _text(raw)
    match = _US_DATE.match(value)
    if match is None:
        return value
    month, day, year = match.groups()
    return f"{year}-{int(month):02d}-{int(day):02d}"


def normalize_status(raw: Any) -> ItemStatus:
    """Lower-case and trim; anything outside the enum becomes ``ordered``."""
    if isinstance(raw, ItemStatus):
        return raw
    return _STATUS_VALUES.get(_text(raw).lower(), DEFAULT_STATUS)


def normalize_payment_status(raw: Any) -> PaymentStatus:
    """Lower-case and trim; anything outside the enum becomes ``unpaid``."""
    if isinstance(raw, PaymentStatus):
        return raw
    value = _text(raw).lower().replace(" ", "_")
    return _PAYMENT_VALUES.get(value, DEFAULT_PAYMENT_STATUS)


def normalize_location(raw: Any) -> str | None:
    """Blank locations are stored as "no location"."""
    value = _text(raw)
    return value or None


def normalize_quantity(raw: Any) -> int | None:
    """
    Parse a quantity cell; blank means "use the default".

    Returns None for blank input and for anything that is not a whole
    number (``"2.0"`` counts as 2).  Range checking is the store's job.
    """
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    value = _text(raw)
    if not value:
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    if not number.is_integer():
        return None
    return int(number)

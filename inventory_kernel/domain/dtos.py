"""
Request and result DTOs for the inventory kernel.

Responsibility:
    Gives every mutation an explicit request type (create, full edit, bulk
    partial update) and every read an immutable result type, so no component
    passes stringly-keyed field maps around.

Architecture position:
    Kernel > Domain -- pure data, zero I/O.  Services convert ORM rows to the
    ``*Info`` types before returning; callers never hold ORM entities.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, replace
from datetime import datetime
from enum import Enum
from typing import Any

from inventory_kernel.domain.statuses import (
    PAYMENT_COLORS,
    PAYMENT_LABELS,
    STATUS_COLORS,
    STATUS_LABELS,
    AgeGroup,
    ItemStatus,
    PaymentStatus,
)


class BulkHistoryPolicy(str, Enum):
    """
    Whether bulk status changes are written to the history ledger.

    SKIP keeps the long-standing behaviour: single-item status changes are
    always logged, bulk ones are not.  RECORD writes one entry per item whose
    status actually changed.
    """

    SKIP = "skip"
    RECORD = "record"


# =============================================================================
# Requests
# =============================================================================


@dataclass(frozen=True)
class CreateItemRequest:
    """
    Fields for a new item.  Only ``customer_name`` is required.

    ``status``/``payment_status`` default to ordered/unpaid when None.
    ``age_group`` overrides the age derived from the size prefix.
    """

    customer_name: str
    quantity: int = 1
    item_type: str = ""
    color: str = ""
    design: str = ""
    team: str = ""
    number: str = ""
    size: str = ""
    age_group: AgeGroup | str | None = None
    namebar: str = ""
    chest_logo: str = ""
    notes: str = ""
    date_ordered: str = ""
    date_invoiced: str = ""
    date_received: str = ""
    date_delivered: str = ""
    status: ItemStatus | str | None = None
    payment_status: PaymentStatus | str | None = None
    needs_remake: bool = False
    tracking_number: str = ""
    location: str | None = None


@dataclass(frozen=True)
class UpdateItemRequest:
    """
    Full edit of an item: every mutable field is supplied and overwritten.

    Use ``from_item`` to pre-fill from the current state and change a few
    fields, the way an edit form does.
    """

    quantity: int
    item_type: str
    color: str
    design: str
    customer_name: str
    team: str
    number: str
    size: str
    age_group: AgeGroup | str | None
    namebar: str
    chest_logo: str
    notes: str
    date_ordered: str
    date_invoiced: str
    date_received: str
    date_delivered: str
    status: ItemStatus | str
    payment_status: PaymentStatus | str
    needs_remake: bool
    tracking_number: str
    location: str | None

    @classmethod
    def from_item(cls, item: "ItemInfo", **changes: Any) -> "UpdateItemRequest":
        names = {f.name for f in fields(cls)}
        base = {name: getattr(item, name) for name in names}
        unknown = set(changes) - names
        if unknown:
            raise TypeError(f"Unknown update fields: {sorted(unknown)}")
        return replace(cls(**base), **changes)


@dataclass(frozen=True)
class BulkUpdateFields:
    """
    Partial field set applied to many items at once.

    A field left as None is untouched; a field that is set overwrites
    unconditionally (an empty string clears the value).
    """

    status: ItemStatus | str | None = None
    payment_status: PaymentStatus | str | None = None
    tracking_number: str | None = None
    date_delivered: str | None = None

    def as_values(self) -> dict[str, Any]:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    @property
    def is_empty(self) -> bool:
        return not self.as_values()


@dataclass(frozen=True)
class ItemQuery:
    """
    Filter/sort request for item listings.

    Filters combine with AND.  ``sort`` must be one of the whitelisted keys
    (see ItemStore.SORT_COLUMNS); anything else sorts by ``created_at``.
    ``direction`` is ``asc`` or ``desc`` (default).
    """

    status: ItemStatus | str | None = None
    location: str | None = None
    search: str | None = None
    sort: str | None = None
    direction: str | None = None
    limit: int | None = None


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class ItemInfo:
    """Immutable snapshot of one item."""

    id: str
    quantity: int
    item_type: str
    color: str
    design: str
    customer_name: str
    team: str
    number: str
    size: str
    age_group: AgeGroup
    namebar: str
    chest_logo: str
    notes: str
    date_ordered: str
    date_invoiced: str
    date_received: str
    date_delivered: str
    status: ItemStatus
    payment_status: PaymentStatus
    needs_remake: bool
    tracking_number: str
    location: str | None
    created_at: datetime
    updated_at: datetime

    @property
    def status_label(self) -> str:
        return STATUS_LABELS[self.status]

    @property
    def status_color(self) -> str:
        return STATUS_COLORS[self.status]

    @property
    def payment_label(self) -> str:
        return PAYMENT_LABELS[self.payment_status]

    @property
    def payment_color(self) -> str:
        return PAYMENT_COLORS[self.payment_status]

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["age_group"] = self.age_group.value
        data["status"] = self.status.value
        data["payment_status"] = self.payment_status.value
        data["created_at"] = self.created_at.isoformat()
        data["updated_at"] = self.updated_at.isoformat()
        return data


@dataclass(frozen=True)
class HistoryEntryInfo:
    """Immutable snapshot of one status transition."""

    id: int
    item_id: str
    old_status: ItemStatus | None
    new_status: ItemStatus
    location: str | None
    changed_at: datetime
    note: str | None

    @property
    def is_creation(self) -> bool:
        return self.old_status is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "item_id": self.item_id,
            "old_status": self.old_status.value if self.old_status else None,
            "new_status": self.new_status.value,
            "location": self.location,
            "changed_at": self.changed_at.isoformat(),
            "note": self.note,
        }


@dataclass(frozen=True)
class LocationInfo:
    """A registered location and how many items currently sit there."""

    id: int
    name: str
    description: str | None
    item_count: int = 0

    @property
    def in_use(self) -> bool:
        return self.item_count > 0


@dataclass(frozen=True)
class StatusChange:
    """One item's status before and after a bulk update."""

    item_id: str
    old_status: ItemStatus
    new_status: ItemStatus
    location: str | None


@dataclass(frozen=True)
class InventorySummary:
    """Dashboard numbers: totals, per-status counts, most recent items."""

    total: int
    by_status: dict[ItemStatus, int]
    needs_remake: int
    recent: tuple[ItemInfo, ...] = field(default_factory=tuple)

"""
Pure domain layer.

This module contains pure data transfer objects and domain logic
with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O

Time enters only through an injected Clock.
"""

from inventory_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from inventory_kernel.domain.dtos import (
    BulkHistoryPolicy,
    BulkUpdateFields,
    CreateItemRequest,
    HistoryEntryInfo,
    InventorySummary,
    ItemInfo,
    ItemQuery,
    LocationInfo,
    StatusChange,
    UpdateItemRequest,
)
from inventory_kernel.domain.ids import (
    extract_item_id,
    generate_item_id,
    public_item_url,
)
from inventory_kernel.domain.normalize import (
    normalize_date,
    normalize_payment_status,
    normalize_size,
    normalize_status,
)
from inventory_kernel.domain.statuses import (
    PAYMENT_COLORS,
    PAYMENT_LABELS,
    STATUS_COLORS,
    STATUS_LABELS,
    AgeGroup,
    ItemStatus,
    PaymentStatus,
)

__all__ = [
    "AgeGroup",
    "BulkHistoryPolicy",
    "BulkUpdateFields",
    "Clock",
    "CreateItemRequest",
    "DeterministicClock",
    "HistoryEntryInfo",
    "InventorySummary",
    "ItemInfo",
    "ItemQuery",
    "ItemStatus",
    "LocationInfo",
    "PAYMENT_COLORS",
    "PAYMENT_LABELS",
    "PaymentStatus",
    "STATUS_COLORS",
    "STATUS_LABELS",
    "StatusChange",
    "SystemClock",
    "UpdateItemRequest",
    "extract_item_id",
    "generate_item_id",
    "normalize_date",
    "normalize_payment_status",
    "normalize_size",
    "normalize_status",
    "public_item_url",
]

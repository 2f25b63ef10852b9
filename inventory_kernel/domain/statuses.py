"""
Status vocabularies for inventory items.

Two independent state fields live on every item:

    ItemStatus       ordered -> received -> inventory -> delivered
    PaymentStatus    unpaid -> invoiced -> partial -> paid, plus not_required

Neither field enforces a transition graph: any member may be set from any
other.  Only ItemStatus transitions are written to the history ledger.
The ``needs_remake`` flag is orthogonal to both and is not a status.

The label/color tables are the read-only data handed to the rendering layer.
"""

from enum import Enum


class ItemStatus(str, Enum):
    """Fulfillment stage of an item."""

    ORDERED = "ordered"
    RECEIVED = "received"
    INVENTORY = "inventory"
    DELIVERED = "delivered"


class PaymentStatus(str, Enum):
    """Billing stage of an item."""

    UNPAID = "unpaid"
    INVOICED = "invoiced"
    PARTIAL = "partial"
    PAID = "paid"
    NOT_REQUIRED = "not_required"


class AgeGroup(str, Enum):
    """Garment age group, usually derived from the size prefix."""

    ADULT = "Adult"
    YOUTH = "Youth"


DEFAULT_STATUS = ItemStatus.ORDERED
DEFAULT_PAYMENT_STATUS = PaymentStatus.UNPAID
DEFAULT_AGE_GROUP = AgeGroup.ADULT

STATUS_LABELS: dict[ItemStatus, str] = {
    ItemStatus.ORDERED: "Ordered",
    ItemStatus.RECEIVED: "Received",
    ItemStatus.INVENTORY: "In Inventory",
    ItemStatus.DELIVERED: "Delivered",
}

STATUS_COLORS: dict[ItemStatus, str] = {
    ItemStatus.ORDERED: "#ff9800",
    ItemStatus.RECEIVED: "#2196f3",
    ItemStatus.INVENTORY: "#4caf50",
    ItemStatus.DELIVERED: "#9c27b0",
}

PAYMENT_LABELS: dict[PaymentStatus, str] = {
    PaymentStatus.UNPAID: "Unpaid",
    PaymentStatus.INVOICED: "Invoiced",
    PaymentStatus.PARTIAL: "Partial",
    PaymentStatus.PAID: "Paid",
    PaymentStatus.NOT_REQUIRED: "Not Required",
}

PAYMENT_COLORS: dict[PaymentStatus, str] = {
    PaymentStatus.UNPAID: "#f44336",
    PaymentStatus.INVOICED: "#ff9800",
    PaymentStatus.PARTIAL: "#ffc107",
    PaymentStatus.PAID: "#4caf50",
    PaymentStatus.NOT_REQUIRED: "#9e9e9e",
}

REMAKE_LABEL = "Need Remake"
REMAKE_COLOR = "#f44336"


def parse_status(value: "ItemStatus | str") -> ItemStatus:
    """Strict conversion; raises ValueError for non-members."""
    if isinstance(value, ItemStatus):
        return value
    return ItemStatus(str(value).strip().lower())


def parse_payment_status(value: "PaymentStatus | str") -> PaymentStatus:
    """Strict conversion; raises ValueError for non-members."""
    if isinstance(value, PaymentStatus):
        return value
    return PaymentStatus(str(value).strip().lower())

"""Domain models for the inventory kernel."""

from inventory_kernel.models.item import Item
from inventory_kernel.models.location import Location
from inventory_kernel.models.status_history import StatusHistory

__all__ = [
    "Item",
    "Location",
    "StatusHistory",
]

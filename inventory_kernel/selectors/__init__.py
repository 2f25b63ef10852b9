"""Read-only selectors for the inventory kernel."""

from inventory_kernel.selectors.base import BaseSelector
from inventory_kernel.selectors.dashboard_selector import DashboardSelector, LabelItem

__all__ = [
    "BaseSelector",
    "DashboardSelector",
    "LabelItem",
]

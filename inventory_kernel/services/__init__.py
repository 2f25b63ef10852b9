"""Kernel services: item store, history ledger, location registry, lifecycle."""

from inventory_kernel.services.base import BaseService
from inventory_kernel.services.history_ledger import HistoryLedger
from inventory_kernel.services.item_store import SORT_COLUMNS, ItemStore
from inventory_kernel.services.lifecycle_controller import LifecycleController
from inventory_kernel.services.location_registry import LocationRegistry

__all__ = [
    "BaseService",
    "HistoryLedger",
    "ItemStore",
    "LifecycleController",
    "LocationRegistry",
    "SORT_COLUMNS",
]

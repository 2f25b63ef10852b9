"""
Inventory Kernel - item lifecycle and audit trail

A single-store inventory system for custom apparel units with:
- Status and payment state tracking
- Append-only status history
- Bulk mutation
- Location registry with usage guards
"""

__version__ = "0.1.0"

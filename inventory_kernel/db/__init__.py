"""Database layer - store handle, base classes, column types, and guards."""

from inventory_kernel.db.base import Base, TimestampedBase
from inventory_kernel.db.engine import DEFAULT_SEED_LOCATIONS, Database
from inventory_kernel.db.migrations import apply_migrations
from inventory_kernel.db.types import UTCDateTime, str_enum

__all__ = [
    "Base",
    "DEFAULT_SEED_LOCATIONS",
    "Database",
    "TimestampedBase",
    "UTCDateTime",
    "apply_migrations",
    "str_enum",
]

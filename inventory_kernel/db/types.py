"""
Module: inventory_kernel.db.types
Responsibility: Column types shared by every model: timezone-aware UTC
    timestamps and string-valued enums.
Architecture position: Kernel > DB.  May be imported by models/ and
    services/.  MUST NOT import from those layers.

Invariants enforced:
    - Timestamps always load as timezone-aware UTC datetimes, even on SQLite,
      which stores them without an offset.
    - Enum columns store the member *value* and reject non-members through a
      CHECK constraint, so ``status`` can never hold an unknown word.
"""

from datetime import timezone
from enum import Enum

from sqlalchemy import DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy.types import TypeDecorator


class UTCDateTime(TypeDecorator):
    """
    DateTime stored as naive UTC, loaded as aware UTC.

    Guarantees:
        - process_bind_param: aware datetime -> naive UTC on INSERT/UPDATE.
        - process_result_value: naive -> aware UTC on SELECT.
        - cache_ok=True enables SQLAlchemy statement caching.
    """

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


def str_enum(enum_cls: type[Enum], name: str) -> SAEnum:
    """Non-native enum column storing member values with a CHECK constraint."""
    return SAEnum(
        enum_cls,
        name=name,
        native_enum=False,
        create_constraint=True,
        length=20,
        validate_strings=True,
        values_callable=lambda members: [m.value for m in members],
    )


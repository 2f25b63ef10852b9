"""
HistoryLedger -- append-only status transition log.

Responsibility:
    Records one entry per item status transition and lists an item's
    entries newest first.  The ledger never updates or deletes; the
    immutability listeners reject anyone else who tries.

Architecture position:
    Kernel > Services.  Written only by LifecycleController, inside the
    same transaction as the item write it documents.

Invariants enforced:
    - Append-only (db/immutability.py).
    - ``list_for`` order is total: ``changed_at`` descending, then the
      sequence ``id`` descending, so entries stamped in the same instant
      still come back newest first.
"""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.domain.dtos import HistoryEntryInfo
from inventory_kernel.domain.statuses import ItemStatus
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.status_history import StatusHistory
from inventory_kernel.services.base import BaseService

logger = get_logger("services.history_ledger")


class HistoryLedger(BaseService):
    """Per-item status history."""

    def __init__(self, session: Session, clock: Clock | None = None):
        super().__init__(session)
        self._clock = clock or SystemClock()

    @staticmethod
    def to_info(entry: StatusHistory) -> HistoryEntryInfo:
        return HistoryEntryInfo(
            id=entry.id,
            item_id=entry.item_id,
            old_status=entry.old_status,
            new_status=entry.new_status,
            location=entry.location,
            changed_at=entry.changed_at,
            note=entry.note,
        )

    def record(
        self,
        item_id: str,
        old_status: ItemStatus | None,
        new_status: ItemStatus,
        location: str | None,
        note: str | None = None,
    ) -> HistoryEntryInfo:
        """Append one transition stamped with ``clock.now()``."""
        entry = StatusHistory(
            item_id=item_id,
            old_status=old_status,
            new_status=new_status,
            location=location,
            changed_at=self._clock.now(),
            note=note,
        )
        self.session.add(entry)
        self.session.flush()

        logger.debug(
            "history_recorded",
            extra={
                "item_id": item_id,
                "old_status": old_status.value if old_status else None,
                "new_status": new_status.value,
                "entry_id": entry.id,
            },
        )
        return self.to_info(entry)

    def list_for(self, item_id: str) -> list[HistoryEntryInfo]:
        stmt = (
            select(StatusHistory)
            .where(StatusHistory.item_id == item_id)
            .order_by(StatusHistory.changed_at.desc(), StatusHistory.id.desc())
        )
        return [self.to_info(entry) for entry in self.session.scalars(stmt)]

    def count_for(self, item_id: str) -> int:
        stmt = (
            select(func.count())
            .select_from(StatusHistory)
            .where(StatusHistory.item_id == item_id)
        )
        return self.session.scalar(stmt) or 0

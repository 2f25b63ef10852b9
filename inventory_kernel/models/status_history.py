"""
Module: inventory_kernel.models.status_history
Responsibility: Append-only ledger of item status transitions.
Architecture position: Kernel > Models.  May import from db/ and
    domain/statuses only.

Invariants enforced:
    - Rows are never updated (ORM listener in db/immutability.py).
    - Rows are deleted only together with their item (FK ON DELETE CASCADE
      plus the before_flush guard in db/immutability.py).
    - ``old_status`` is NULL only on the creation entry.

Audit relevance:
    This table is the audit trail of an item: when it moved from
    ordered to delivered, and where it sat at each step.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inventory_kernel.db.base import Base
from inventory_kernel.db.types import UTCDateTime, str_enum
from inventory_kernel.domain.statuses import ItemStatus

if TYPE_CHECKING:
    from inventory_kernel.models.item import Item


class StatusHistory(Base):
    """
    One status transition of one item.

    Contract:
        Written only by HistoryLedger.record.  ``id`` is a monotonically
        increasing sequence and breaks ties between entries that share a
        ``changed_at`` stamp.
    """

    __tablename__ = "status_history"

    __table_args__ = (
        Index("idx_status_history_item", "item_id", "changed_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    item_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("items.id", ondelete="CASCADE"),
        nullable=False,
    )

    old_status: Mapped[ItemStatus | None] = mapped_column(
        str_enum(ItemStatus, "history_old_status"),
        nullable=True,
    )

    new_status: Mapped[ItemStatus] = mapped_column(
        str_enum(ItemStatus, "history_new_status"),
        nullable=False,
    )

    location: Mapped[str | None] = mapped_column(String(100), nullable=True)

    changed_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    note: Mapped[str | None] = mapped_column("notes", Text, nullable=True)

    item: Mapped["Item"] = relationship(back_populates="history")

    def __repr__(self) -> str:
        old = self.old_status.value if self.old_status else None
        return f"<StatusHistory {self.item_id} {old} -> {self.new_status.value}>"

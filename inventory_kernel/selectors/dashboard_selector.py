"""
Module: inventory_kernel.selectors.dashboard_selector
Responsibility: Aggregate reads for the dashboard and the label sheet.
Architecture position: Kernel > Selectors.  May import from models/,
    selectors/base.py and the pure domain/ layer.

Invariants enforced:
    - ``summary().by_status`` has an entry for every ItemStatus, zero when
      no item holds it, and the entries sum to ``total``.
    - Every label carries the same deterministic public URL that
      ``public_item_url`` produces for the item.
"""

from dataclasses import dataclass

from sqlalchemy import func, select

from inventory_kernel.domain.dtos import InventorySummary, ItemInfo
from inventory_kernel.domain.ids import public_item_url
from inventory_kernel.domain.statuses import ItemStatus
from inventory_kernel.models.item import Item
from inventory_kernel.selectors.base import BaseSelector

RECENT_LIMIT = 10


@dataclass(frozen=True)
class LabelItem:
    """One printable label: the item plus the URL its QR code encodes."""

    item: ItemInfo
    url: str


class DashboardSelector(BaseSelector):
    """Read-only dashboard queries."""

    def summary(self, recent_limit: int = RECENT_LIMIT) -> InventorySummary:
        """Totals, per-status counts, remake count, most recent items."""
        by_status = {status: 0 for status in ItemStatus}
        rows = self.session.execute(
            select(Item.status, func.count()).group_by(Item.status)
        )
        for status, count in rows:
            by_status[status] = count

        needs_remake = self.session.scalar(
            select(func.count()).select_from(Item).where(Item.needs_remake.is_(True))
        ) or 0

        recent = self.session.scalars(
            select(Item)
            .order_by(Item.created_at.desc(), Item.id.desc())
            .limit(recent_limit)
        )

        return InventorySummary(
            total=sum(by_status.values()),
            by_status=by_status,
            needs_remake=needs_remake,
            recent=tuple(item.to_info() for item in recent),
        )

    def label_items(
        self,
        base_url: str,
        status: ItemStatus | None = None,
    ) -> list[LabelItem]:
        """Items for the label sheet, newest first, optionally by status."""
        stmt = select(Item).order_by(Item.created_at.desc(), Item.id.desc())
        if status is not None:
            stmt = stmt.where(Item.status == status)
        return [
            LabelItem(item=item.to_info(), url=public_item_url(base_url, item.id))
            for item in self.session.scalars(stmt)
        ]

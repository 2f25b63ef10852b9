"""
Module: inventory_kernel.models.item
Responsibility: ORM persistence for a single physical apparel unit (one
    jersey) tracked from order to delivery.
Architecture position: Kernel > Models.  May import from db/ and the
    pure domain/ layer only.  MUST NOT import from services/, selectors/, or
    outer layers.

Invariants enforced:
    - ``id`` is the immutable public key printed on the label.
    - ``qty >= 1`` (table CHECK constraint ``ck_items_qty_positive``).
    - ``status``, ``payment_status`` and ``age_group`` always hold enum
      values (non-native enum CHECK constraints).
    - Text attributes are never NULL; "unset" is the empty string.

Failure modes:
    - IntegrityError on duplicate ``id`` (retried by ItemStore.create).
    - IntegrityError when ``qty < 1`` reaches the database.

Audit relevance:
    Every status change of an Item is mirrored by a StatusHistory row.
    Deleting an Item deletes its history with it.
"""

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inventory_kernel.db.base import TimestampedBase
from inventory_kernel.db.types import str_enum
from inventory_kernel.domain.dtos import ItemInfo
from inventory_kernel.domain.statuses import (
    DEFAULT_AGE_GROUP,
    DEFAULT_PAYMENT_STATUS,
    DEFAULT_STATUS,
    AgeGroup,
    ItemStatus,
    PaymentStatus,
)

if TYPE_CHECKING:
    from inventory_kernel.models.status_history import StatusHistory


class Item(TimestampedBase):
    """
    One apparel unit.

    Contract:
        Rows are written only by ItemStore and LifecycleController.  Python
        attribute names differ from column names for ``type`` and ``qty``
        (``item_type``/``quantity``) so they do not shadow builtins.

    Non-goals:
        - ``location`` is a weak reference by name; no foreign key ties it
          to the locations table.
        - Date columns are free text and are not validated as dates.
    """

    __tablename__ = "items"

    __table_args__ = (
        CheckConstraint("qty >= 1", name="qty_positive"),
        Index("idx_items_status", "status"),
        Index("idx_items_location", "location"),
        Index("idx_items_created_at", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(32), primary_key=True)

    quantity: Mapped[int] = mapped_column("qty", Integer, nullable=False, default=1)

    item_type: Mapped[str] = mapped_column("type", String(100), nullable=False, default="")
    color: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    design: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    customer_name: Mapped[str] = mapped_column(String(200), nullable=False)
    team: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    number: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    size: Mapped[str] = mapped_column(String(50), nullable=False, default="")

    age_group: Mapped[AgeGroup] = mapped_column(
        str_enum(AgeGroup, "age_group"),
        nullable=False,
        default=DEFAULT_AGE_GROUP,
    )

    namebar: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    chest_logo: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Free-text dates, normally YYYY-MM-DD
    date_ordered: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    date_invoiced: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    date_received: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    date_delivered: Mapped[str] = mapped_column(String(32), nullable=False, default="")

    status: Mapped[ItemStatus] = mapped_column(
        str_enum(ItemStatus, "item_status"),
        nullable=False,
        default=DEFAULT_STATUS,
    )

    payment_status: Mapped[PaymentStatus] = mapped_column(
        str_enum(PaymentStatus, "payment_status"),
        nullable=False,
        default=DEFAULT_PAYMENT_STATUS,
    )

    needs_remake: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    tracking_number: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    # Weak reference to locations.name
    location: Mapped[str | None] = mapped_column(String(100), nullable=True)

    history: Mapped[list["StatusHistory"]] = relationship(
        back_populates="item",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="StatusHistory.id",
    )

    def to_info(self) -> ItemInfo:
        """Immutable snapshot for callers outside the transaction."""
        return ItemInfo(
            id=self.id,
            quantity=self.quantity,
            item_type=self.item_type,
            color=self.color,
            design=self.design,
            customer_name=self.customer_name,
            team=self.team,
            number=self.number,
            size=self.size,
            age_group=self.age_group,
            namebar=self.namebar,
            chest_logo=self.chest_logo,
            notes=self.notes,
            date_ordered=self.date_ordered,
            date_invoiced=self.date_invoiced,
            date_received=self.date_received,
            date_delivered=self.date_delivered,
            status=self.status,
            payment_status=self.payment_status,
            needs_remake=bool(self.needs_remake),
            tracking_number=self.tracking_number,
            location=self.location,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def __repr__(self) -> str:
        return f"<Item {self.id} {self.status.value if self.status else None}>"

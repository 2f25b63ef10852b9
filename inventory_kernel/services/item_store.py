"""
ItemStore -- persistence of items: create, fetch, edit, delete, query.

Responsibility:
    Owns every write to the ``items`` table and the listing query.  Each
    call validates its input, stamps times from the injected Clock and
    flushes inside the caller's transaction.

Architecture position:
    Kernel > Services -- imperative shell.  Called by LifecycleController
    (which pairs item writes with history entries) and by DashboardSelector
    for the conversion to ``ItemInfo``.

Invariants enforced:
    - ``id`` and ``created_at`` are written once, in ``create``.
    - ``updated_at`` is re-stamped by every mutation.
    - ``customer_name`` is non-blank and ``quantity >= 1`` on every write.
    - ``status`` / ``payment_status`` / ``age_group`` are enum members.
    - Listing queries are built from ORM expressions only; sort keys come
      from a fixed whitelist and search terms are bound parameters with
      LIKE wildcards escaped.

Failure modes:
    - ValidationError for a blank customer name, a quantity below 1, or a
      value outside one of the enums.
    - ItemNotFoundError from ``get``/``load``/``update``/``delete``.
    - DuplicateItemIdError once ``id_max_attempts`` generated IDs have all
      collided with existing rows.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.domain.dtos import (
    BulkUpdateFields,
    CreateItemRequest,
    ItemInfo,
    ItemQuery,
    StatusChange,
    UpdateItemRequest,
)
from inventory_kernel.domain.ids import IdFactory, make_id_factory
from inventory_kernel.domain.normalize import normalize_age_group, normalize_location
from inventory_kernel.domain.statuses import (
    DEFAULT_AGE_GROUP,
    DEFAULT_PAYMENT_STATUS,
    DEFAULT_STATUS,
    AgeGroup,
    ItemStatus,
    PaymentStatus,
    parse_payment_status,
    parse_status,
)
from inventory_kernel.exceptions import (
    DuplicateItemIdError,
    ItemNotFoundError,
    ValidationError,
)
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.item import Item
from inventory_kernel.services.base import BaseService

logger = get_logger("services.item_store")

DEFAULT_ID_MAX_ATTEMPTS = 5

# Public sort key -> mapped column.  Nothing else reaches ORDER BY.
SORT_COLUMNS = {
    "id": Item.id,
    "qty": Item.quantity,
    "type": Item.item_type,
    "design": Item.design,
    "team": Item.team,
    "customer": Item.customer_name,
    "number": Item.number,
    "namebar": Item.namebar,
    "age": Item.age_group,
    "size": Item.size,
    "color": Item.color,
    "status": Item.status,
    "payment": Item.payment_status,
    "date_ordered": Item.date_ordered,
    "created_at": Item.created_at,
}

DEFAULT_SORT = "created_at"

SEARCH_COLUMNS = (
    Item.customer_name,
    Item.number,
    Item.id,
    Item.namebar,
    Item.notes,
)

# Plain text attributes copied straight from requests.
_TEXT_FIELDS = (
    "item_type",
    "color",
    "design",
    "team",
    "number",
    "namebar",
    "chest_logo",
    "notes",
    "date_ordered",
    "date_invoiced",
    "date_received",
    "date_delivered",
    "tracking_number",
)


def coerce_status(value: ItemStatus | str) -> ItemStatus:
    try:
        return parse_status(value)
    except ValueError:
        raise ValidationError("status", f"unknown status {value!r}") from None


def coerce_payment_status(value: PaymentStatus | str) -> PaymentStatus:
    try:
        return parse_payment_status(value)
    except ValueError:
        raise ValidationError(
            "payment_status", f"unknown payment status {value!r}"
        ) from None


def _coerce_age_group(value: AgeGroup | str | None) -> AgeGroup:
    return normalize_age_group(value) or DEFAULT_AGE_GROUP


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _require_customer(name: Any) -> str:
    value = _text(name).strip()
    if not value:
        raise ValidationError("customer_name", "is required")
    return value


def _require_quantity(quantity: Any) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise ValidationError("quantity", f"must be a whole number, got {quantity!r}")
    if quantity < 1:
        raise ValidationError("quantity", f"must be at least 1, got {quantity}")
    return quantity


class ItemStore(BaseService):
    """
    Item persistence.

    Contract:
        Construct with the session of the current transaction.  Mutating
        methods return the ORM entity so the controller can pair the write
        with a history entry; read methods return ``ItemInfo``.

    Guarantees:
        - ``create`` retries ID generation on collision, up to
          ``id_max_attempts`` times.
        - ``bulk_update``/``bulk_delete`` ignore unknown and repeated IDs.
    """

    SORT_COLUMNS = SORT_COLUMNS

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        *,
        id_factory: IdFactory | None = None,
        id_max_attempts: int = DEFAULT_ID_MAX_ATTEMPTS,
    ):
        super().__init__(session)
        self._clock = clock or SystemClock()
        self._id_factory = id_factory or make_id_factory()
        self._id_max_attempts = max(1, id_max_attempts)

    # -- conversion ----------------------------------------------------------

    @staticmethod
    def to_info(item: Item) -> ItemInfo:
        return item.to_info()

    # -- create --------------------------------------------------------------

    def create(self, request: CreateItemRequest) -> Item:
        """
        Insert a new item under a freshly generated ID.

        ``request.size`` is stored as given; the controller normalizes it
        and resolves ``age_group`` beforehand.
        """
        customer = _require_customer(request.customer_name)
        quantity = _require_quantity(request.quantity)
        status = coerce_status(request.status) if request.status is not None else DEFAULT_STATUS
        payment = (
            coerce_payment_status(request.payment_status)
            if request.payment_status is not None
            else DEFAULT_PAYMENT_STATUS
        )
        age_group = _coerce_age_group(request.age_group)
        now = self._clock.now()

        for attempt in range(1, self._id_max_attempts + 1):
            item_id = self._id_factory()
            item = Item(
                id=item_id,
                quantity=quantity,
                customer_name=customer,
                size=_text(request.size),
                age_group=age_group,
                status=status,
                payment_status=payment,
                needs_remake=bool(request.needs_remake),
                location=normalize_location(request.location),
                created_at=now,
                updated_at=now,
            )
            for name in _TEXT_FIELDS:
                setattr(item, name, _text(getattr(request, name)))
            try:
                self._insert(item, attempt)
            except DuplicateItemIdError:
                logger.warning(
                    "item_id_collision",
                    extra={"item_id": item_id, "attempt": attempt},
                )
                continue
            logger.info(
                "item_created",
                extra={"item_id": item_id, "status": status.value},
            )
            return item

        raise DuplicateItemIdError(item_id, attempts=self._id_max_attempts)

    def _insert(self, item: Item, attempt: int) -> None:
        if self.session.get(Item, item.id) is not None:
            raise DuplicateItemIdError(item.id, attempts=attempt)

        savepoint = self.session.begin_nested()
        try:
            self.session.add(item)
            self.session.flush()
        except IntegrityError as exc:
            savepoint.rollback()
            if "items.id" in str(exc.orig):
                raise DuplicateItemIdError(item.id, attempts=attempt) from exc
            raise
        savepoint.commit()

    # -- reads ---------------------------------------------------------------

    def load(self, item_id: str) -> Item:
        """The ORM entity for ``item_id``; raises ItemNotFoundError."""
        item = self.session.get(Item, item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        return item

    def get(self, item_id: str) -> ItemInfo:
        return self.to_info(self.load(item_id))

    def find(self, item_id: str) -> ItemInfo | None:
        item = self.session.get(Item, item_id)
        return self.to_info(item) if item is not None else None

    def query(self, query: ItemQuery | None = None) -> list[ItemInfo]:
        """Filtered, sorted listing.  Filters combine with AND."""
        query = query or ItemQuery()
        stmt = select(Item)

        if query.status:
            try:
                status = parse_status(query.status)
            except ValueError:
                # No item can hold a status outside the lifecycle.
                logger.debug("unknown_status_filter", extra={"status": query.status})
                return []
            stmt = stmt.where(Item.status == status)
        if query.location:
            stmt = stmt.where(Item.location == query.location)
        term = (query.search or "").strip()
        if term:
            stmt = stmt.where(
                or_(*(col.icontains(term, autoescape=True) for col in SEARCH_COLUMNS))
            )

        sort_key = (query.sort or "").strip().lower()
        column = SORT_COLUMNS.get(sort_key, SORT_COLUMNS[DEFAULT_SORT])
        ascending = (query.direction or "").strip().lower() == "asc"
        if ascending:
            stmt = stmt.order_by(column.asc(), Item.id.asc())
        else:
            stmt = stmt.order_by(column.desc(), Item.id.desc())

        if query.limit is not None and query.limit > 0:
            stmt = stmt.limit(query.limit)

        return [self.to_info(item) for item in self.session.scalars(stmt)]

    def count(self) -> int:
        return self.session.scalar(select(func.count()).select_from(Item)) or 0

    # -- updates -------------------------------------------------------------

    def touch(self, item: Item) -> None:
        item.updated_at = self._clock.now()

    def stamp_received(self, item: Item) -> bool:
        """Fill an empty ``date_received`` with today's date."""
        if item.date_received:
            return False
        item.date_received = self._clock.today().isoformat()
        return True

    def update(self, item_id: str, request: UpdateItemRequest) -> Item:
        """Overwrite every mutable field of an existing item."""
        item = self.load(item_id)

        item.customer_name = _require_customer(request.customer_name)
        item.quantity = _require_quantity(request.quantity)
        item.status = coerce_status(request.status)
        item.payment_status = coerce_payment_status(request.payment_status)
        item.size = _text(request.size).strip()
        item.age_group = _coerce_age_group(request.age_group)
        item.needs_remake = bool(request.needs_remake)
        item.location = normalize_location(request.location)
        for name in _TEXT_FIELDS:
            setattr(item, name, _text(getattr(request, name)))

        self.touch(item)
        self.session.flush()
        logger.info("item_updated", extra={"item_id": item_id})
        return item

    def delete(self, item_id: str) -> None:
        item = self.load(item_id)
        self.session.delete(item)
        self.session.flush()
        logger.info("item_deleted", extra={"item_id": item_id})

    def bulk_update(
        self,
        item_ids: Iterable[str],
        fields: BulkUpdateFields,
    ) -> tuple[int, list[StatusChange]]:
        """
        Apply the set fields of ``fields`` to every existing ID.

        Returns the number of items updated and the status transitions
        that actually changed a status.
        """
        values = fields.as_values()
        if not values:
            return 0, []

        if "status" in values:
            values["status"] = coerce_status(values["status"])
        if "payment_status" in values:
            values["payment_status"] = coerce_payment_status(values["payment_status"])

        count = 0
        changes: list[StatusChange] = []
        for item_id in dict.fromkeys(item_ids):
            item = self.session.get(Item, item_id)
            if item is None:
                continue
            old_status = item.status
            for name, value in values.items():
                setattr(item, name, value)
            self.touch(item)
            count += 1
            if item.status != old_status:
                changes.append(
                    StatusChange(
                        item_id=item.id,
                        old_status=old_status,
                        new_status=item.status,
                        location=item.location,
                    )
                )

        self.session.flush()
        logger.info(
            "items_bulk_updated",
            extra={
                "count": count,
                "fields": sorted(values),
                "status_changes": len(changes),
            },
        )
        return count, changes

    def bulk_delete(self, item_ids: Iterable[str]) -> int:
        count = 0
        for item_id in dict.fromkeys(item_ids):
            item = self.session.get(Item, item_id)
            if item is None:
                continue
            self.session.delete(item)
            count += 1
        self.session.flush()
        logger.info("items_bulk_deleted", extra={"count": count})
        return count


"""
LifecycleController -- the single entry point for item mutations.

Responsibility:
    Turns a create/edit/status/payment/remake/bulk/delete request into
    one write transaction that updates the item and, where the status
    moved, appends the matching history entry.

Architecture position:
    Kernel > Services -- orchestration.  Holds the injected Database and
    builds ItemStore/HistoryLedger on the transaction's session, so both
    writes commit or roll back together.

Invariants enforced:
    - Every status change made through ``create_item``, ``update_item``
      and ``set_status`` writes exactly one history entry in the same
      transaction.  Bulk status changes follow ``BulkHistoryPolicy``.
    - Payment status and the remake flag are not statuses and write no
      history.
    - ``set_status(..., RECEIVED)`` stamps ``date_received`` when it is
      empty; an existing date is never overwritten.

Failure modes:
    - ValidationError / ItemNotFoundError / DuplicateItemIdError propagate
      unchanged (the transaction is rolled back).
    - Any SQLAlchemyError rolls the whole operation back and surfaces as a
      single PersistenceError naming the operation.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import replace

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from inventory_kernel.db.engine import Database
from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.domain.dtos import (
    BulkHistoryPolicy,
    BulkUpdateFields,
    CreateItemRequest,
    HistoryEntryInfo,
    ItemInfo,
    ItemQuery,
    UpdateItemRequest,
)
from inventory_kernel.domain.ids import IdFactory
from inventory_kernel.domain.normalize import normalize_location, resolve_size_and_age
from inventory_kernel.domain.statuses import ItemStatus, PaymentStatus
from inventory_kernel.exceptions import PersistenceError
from inventory_kernel.logging_config import LogContext, get_logger
from inventory_kernel.services.history_ledger import HistoryLedger
from inventory_kernel.services.item_store import (
    DEFAULT_ID_MAX_ATTEMPTS,
    ItemStore,
    coerce_payment_status,
    coerce_status,
)

logger = get_logger("services.lifecycle")

CREATED_NOTE = "Created"
BULK_UPDATE_NOTE = "Bulk update"


class LifecycleController:
    """
    Item lifecycle operations.

    Contract:
        Each public mutating method is one logical operation: one write
        transaction, committed on return.

    Guarantees:
        - Returned values are DTOs; no ORM entity leaves the controller.
    """

    def __init__(
        self,
        database: Database,
        clock: Clock | None = None,
        *,
        id_factory: IdFactory | None = None,
        id_max_attempts: int = DEFAULT_ID_MAX_ATTEMPTS,
        bulk_history_policy: BulkHistoryPolicy = BulkHistoryPolicy.SKIP,
    ):
        self._db = database
        self._clock = clock or SystemClock()
        self._id_factory = id_factory
        self._id_max_attempts = id_max_attempts
        self.bulk_history_policy = BulkHistoryPolicy(bulk_history_policy)

    # -- plumbing ------------------------------------------------------------

    def _store(self, session: Session) -> ItemStore:
        return ItemStore(
            session,
            self._clock,
            id_factory=self._id_factory,
            id_max_attempts=self._id_max_attempts,
        )

    def _ledger(self, session: Session) -> HistoryLedger:
        return HistoryLedger(session, self._clock)

    @contextmanager
    def _write(self, operation: str, item_id: str | None = None) -> Iterator[Session]:
        """One write transaction; store failures become PersistenceError."""
        with LogContext.bind(operation=operation, item_id=item_id):
            try:
                with self._db.write_scope() as session:
                    yield session
            except SQLAlchemyError as exc:
                logger.error(
                    "operation_rolled_back",
                    extra={"reason": str(exc)},
                    exc_info=True,
                )
                raise PersistenceError(operation, str(exc)) from exc

    # -- reads ---------------------------------------------------------------

    def get_item(self, item_id: str) -> ItemInfo:
        with self._db.session_scope() as session:
            return self._store(session).get(item_id)

    def find_item(self, item_id: str) -> ItemInfo | None:
        with self._db.session_scope() as session:
            return self._store(session).find(item_id)

    def query_items(self, query: ItemQuery | None = None) -> list[ItemInfo]:
        with self._db.session_scope() as session:
            return self._store(session).query(query)

    def history(self, item_id: str) -> list[HistoryEntryInfo]:
        with self._db.session_scope() as session:
            return self._ledger(session).list_for(item_id)

    # -- single-item mutations -----------------------------------------------

    def create_item(self, request: CreateItemRequest, note: str | None = CREATED_NOTE) -> str:
        """
        Create an item and its creation history entry.  Returns the new ID.

        The size token is normalized here: ``"YM"`` is stored as size ``M``,
        age group Youth, unless ``request.age_group`` says otherwise.
        """
        size, age_group = resolve_size_and_age(request.size, request.age_group)
        request = replace(request, size=size, age_group=age_group)

        with self._write("create_item") as session:
            item = self._store(session).create(request)
            self._ledger(session).record(
                item.id,
                None,
                item.status,
                item.location,
                note,
            )
            item_id = item.id

        logger.info("item_lifecycle_started", extra={"item_id": item_id})
        return item_id

    def update_item(self, item_id: str, request: UpdateItemRequest) -> ItemInfo:
        """
        Full edit.  A history entry (old -> new, new location, no note) is
        written only when the status changed.  The size token is normalized
        the same way as on create.
        """
        size, age_group = resolve_size_and_age(request.size, request.age_group)
        request = replace(request, size=size, age_group=age_group)

        with self._write("update_item", item_id) as session:
            store = self._store(session)
            old_status = store.load(item_id).status
            item = store.update(item_id, request)
            if item.status != old_status:
                self._ledger(session).record(
                    item.id, old_status, item.status, item.location
                )
            return store.to_info(item)

    def set_status(
        self,
        item_id: str,
        status: ItemStatus | str,
        location: str | None = None,
        note: str | None = None,
    ) -> ItemInfo:
        """
        Move an item to ``status``; always writes one history entry.

        ``location`` replaces the item's location only when supplied; the
        history entry records the location the item ends up at.
        """
        new_status = coerce_status(status)

        with self._write("set_status", item_id) as session:
            store = self._store(session)
            item = store.load(item_id)
            old_status = item.status

            item.status = new_status
            if location is not None:
                item.location = normalize_location(location)
            if new_status is ItemStatus.RECEIVED:
                store.stamp_received(item)
            store.touch(item)
            session.flush()

            self._ledger(session).record(
                item.id, old_status, new_status, item.location, note
            )
            logger.info(
                "item_status_changed",
                extra={
                    "from_status": old_status.value,
                    "to_status": new_status.value,
                },
            )
            return store.to_info(item)

    def set_payment_status(
        self, item_id: str, payment_status: PaymentStatus | str
    ) -> ItemInfo:
        new_payment = coerce_payment_status(payment_status)

        with self._write("set_payment_status", item_id) as session:
            store = self._store(session)
            item = store.load(item_id)
            item.payment_status = new_payment
            store.touch(item)
            session.flush()
            logger.info(
                "item_payment_status_changed",
                extra={"payment_status": new_payment.value},
            )
            return store.to_info(item)

    def set_remake(self, item_id: str, needs_remake: bool) -> ItemInfo:
        with self._write("set_remake", item_id) as session:
            store = self._store(session)
            item = store.load(item_id)
            item.needs_remake = bool(needs_remake)
            store.touch(item)
            session.flush()
            logger.info("item_remake_flag_set", extra={"needs_remake": bool(needs_remake)})
            return store.to_info(item)

    def delete_item(self, item_id: str) -> None:
        """Delete an item together with its history."""
        with self._write("delete_item", item_id) as session:
            self._store(session).delete(item_id)

    # -- bulk mutations ------------------------------------------------------

    def bulk_apply(self, item_ids: Iterable[str], fields: BulkUpdateFields) -> int:
        """
        Apply ``fields`` to every existing item in ``item_ids``.

        Returns the number of items updated.  Status changes are written
        to the ledger only under ``BulkHistoryPolicy.RECORD``.
        """
        ids = list(item_ids)
        with self._write("bulk_apply") as session:
            count, changes = self._store(session).bulk_update(ids, fields)
            if self.bulk_history_policy is BulkHistoryPolicy.RECORD:
                ledger = self._ledger(session)
                for change in changes:
                    ledger.record(
                        change.item_id,
                        change.old_status,
                        change.new_status,
                        change.location,
                        BULK_UPDATE_NOTE,
                    )
        return count

    def bulk_delete(self, item_ids: Iterable[str]) -> int:
        ids = list(item_ids)
        with self._write("bulk_delete") as session:
            return self._store(session).bulk_delete(ids)

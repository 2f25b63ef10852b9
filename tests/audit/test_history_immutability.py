"""
History ledger append-only enforcement (inventory_kernel/db/immutability.py).

Entries may not be updated, and may be deleted only together with their
item.  Item deletion cascades to history both through the ORM (history
loaded) and through the database foreign key (history not loaded).
"""

import pytest
from sqlalchemy import delete, func, select

from inventory_kernel.db.immutability import (
    register_immutability_listeners,
    unregister_immutability_listeners,
)
from inventory_kernel.domain.dtos import CreateItemRequest
from inventory_kernel.domain.statuses import ItemStatus
from inventory_kernel.exceptions import ImmutabilityViolationError
from inventory_kernel.models.item import Item
from inventory_kernel.models.status_history import StatusHistory


@pytest.fixture
def item_with_history(session, item_store, history_ledger):
    item = item_store.create(CreateItemRequest(customer_name="J. Smith"))
    first = history_ledger.record(item.id, None, ItemStatus.ORDERED, None, "Created")
    second = history_ledger.record(item.id, ItemStatus.ORDERED, ItemStatus.RECEIVED, None)
    return item, first, second


def _history_count(session, item_id=None) -> int:
    stmt = select(func.count()).select_from(StatusHistory)
    if item_id is not None:
        stmt = stmt.where(StatusHistory.item_id == item_id)
    return session.scalar(stmt)


class TestUpdateBlocked:
    def test_note_change_rejected(self, session, item_with_history):
        _, first, _ = item_with_history
        entry = session.get(StatusHistory, first.id)
        entry.note = "rewritten"
        with pytest.raises(ImmutabilityViolationError) as exc_info:
            session.flush()
        assert exc_info.value.entity_type == "StatusHistory"

    def test_status_change_rejected(self, session, item_with_history):
        _, _, second = item_with_history
        entry = session.get(StatusHistory, second.id)
        entry.new_status = ItemStatus.DELIVERED
        with pytest.raises(ImmutabilityViolationError):
            session.flush()

    def test_violation_logged(self, session, item_with_history, captured_logs):
        _, first, _ = item_with_history
        session.get(StatusHistory, first.id).location = "Elsewhere"
        with pytest.raises(ImmutabilityViolationError):
            session.flush()
        records = [r for r in captured_logs() if r["message"] == "immutability_violation_blocked"]
        assert records[0]["operation"] == "UPDATE"


class TestDeleteBlocked:
    def test_standalone_delete_rejected(self, session, item_with_history):
        item, first, _ = item_with_history
        session.delete(session.get(StatusHistory, first.id))
        with pytest.raises(ImmutabilityViolationError):
            session.flush()

    def test_entry_survives_rejected_delete(self, session, item_with_history):
        item, first, _ = item_with_history
        entry = session.get(StatusHistory, first.id)
        session.delete(entry)
        with pytest.raises(ImmutabilityViolationError):
            session.flush()
        session.expunge(entry)
        assert _history_count(session, item.id) == 2


class TestCascade:
    def test_orm_cascade_with_loaded_history(self, session, item_store, item_with_history):
        item, _, _ = item_with_history
        other = item_store.create(CreateItemRequest(customer_name="Other"))
        session.add(
            StatusHistory(
                item_id=other.id,
                new_status=ItemStatus.ORDERED,
                changed_at=other.created_at,
            )
        )
        session.flush()

        assert len(item.history) == 2
        session.delete(item)
        session.flush()

        assert _history_count(session, item.id) == 0
        assert _history_count(session, other.id) == 1

    def test_database_cascade_without_loaded_history(self, session, item_with_history):
        item, _, _ = item_with_history
        session.expunge_all()
        session.execute(delete(Item).where(Item.id == item.id))
        assert _history_count(session, item.id) == 0

    def test_store_delete_cascades(self, session, item_store, item_with_history):
        item, _, _ = item_with_history
        item_store.delete(item.id)
        assert _history_count(session) == 0


class TestListenerRegistration:
    def test_register_is_idempotent(self):
        register_immutability_listeners()
        register_immutability_listeners()

    def test_unregistered_allows_update(self, session, item_with_history):
        _, first, _ = item_with_history
        unregister_immutability_listeners()
        try:
            session.get(StatusHistory, first.id).note = "fixed"
            session.flush()
            assert session.get(StatusHistory, first.id).note == "fixed"
        finally:
            register_immutability_listeners()

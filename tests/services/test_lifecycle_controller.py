"""
Tests for LifecycleController (inventory_kernel/services/lifecycle_controller.py).

Covers the item lifecycle rules:
- creation writes one history entry (old=None) noted "Created"
- every single-item status change writes exactly one entry
- payment status and the remake flag write none
- created_at never changes; updated_at advances
- receipt date auto-stamping
- a failed history write rolls back the item write
"""

from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from inventory_kernel.domain.dtos import (
    BulkHistoryPolicy,
    BulkUpdateFields,
    CreateItemRequest,
    ItemQuery,
    UpdateItemRequest,
)
from inventory_kernel.domain.statuses import AgeGroup, ItemStatus, PaymentStatus
from inventory_kernel.exceptions import (
    ItemNotFoundError,
    PersistenceError,
    ValidationError,
)
from inventory_kernel.services.history_ledger import HistoryLedger
from inventory_kernel.services.lifecycle_controller import (
    BULK_UPDATE_NOTE,
    CREATED_NOTE,
    LifecycleController,
)


def _fail_record(*args, **kwargs):
    raise OperationalError("INSERT INTO status_history", {}, Exception("disk I/O error"))


class TestCreateItem:
    def test_customer_name_only(self, controller):
        item_id = controller.create_item(CreateItemRequest(customer_name="Ann"))
        item = controller.get_item(item_id)

        assert item.status is ItemStatus.ORDERED
        assert item.payment_status is PaymentStatus.UNPAID
        assert item.quantity == 1
        assert item.needs_remake is False

        history = controller.history(item_id)
        assert len(history) == 1
        assert history[0].old_status is None
        assert history[0].new_status is ItemStatus.ORDERED
        assert history[0].note == CREATED_NOTE

    def test_size_normalized(self, make_item):
        item = make_item(size="YM")
        assert item.size == "M"
        assert item.age_group is AgeGroup.YOUTH

    def test_explicit_age_group_wins(self, make_item):
        item = make_item(size="YM", age_group="Adult")
        assert item.size == "M"
        assert item.age_group is AgeGroup.ADULT

    def test_initial_status_recorded(self, controller, make_request):
        item_id = controller.create_item(make_request(status="inventory", location="Office"))
        (entry,) = controller.history(item_id)
        assert entry.new_status is ItemStatus.INVENTORY
        assert entry.location == "Office"

    def test_custom_note(self, controller, make_request):
        item_id = controller.create_item(make_request(), note="Imported from CSV")
        assert controller.history(item_id)[0].note == "Imported from CSV"

    def test_blank_customer_rejected_without_writes(self, controller):
        with pytest.raises(ValidationError):
            controller.create_item(CreateItemRequest(customer_name=""))
        assert controller.query_items() == []

    def test_history_failure_rolls_back_item(self, controller, make_request, monkeypatch):
        monkeypatch.setattr(HistoryLedger, "record", _fail_record)
        with pytest.raises(PersistenceError) as exc_info:
            controller.create_item(make_request())
        assert exc_info.value.operation == "create_item"
        monkeypatch.undo()
        assert controller.query_items() == []


class TestSetStatus:
    def test_writes_one_entry(self, controller, make_item):
        item = make_item()
        controller.set_status(item.id, "received", note="Box 3")

        history = controller.history(item.id)
        assert len(history) == 2
        assert history[0].old_status is ItemStatus.ORDERED
        assert history[0].new_status is ItemStatus.RECEIVED
        assert history[0].note == "Box 3"

    def test_same_status_still_logged(self, controller, make_item):
        item = make_item()
        controller.set_status(item.id, "ordered")
        history = controller.history(item.id)
        assert len(history) == 2
        assert history[0].old_status is history[0].new_status is ItemStatus.ORDERED

    def test_received_stamps_date_once(self, controller, make_item, deterministic_clock):
        item = make_item()
        assert item.date_received == ""

        updated = controller.set_status(item.id, ItemStatus.RECEIVED)
        assert updated.date_received == date(2024, 1, 1).isoformat()

        deterministic_clock.advance(3 * 86400)
        controller.set_status(item.id, "inventory")
        again = controller.set_status(item.id, "received")
        assert again.date_received == "2024-01-01"

    def test_existing_received_date_kept(self, controller, make_item):
        item = make_item(date_received="2023-12-24")
        assert controller.set_status(item.id, "received").date_received == "2023-12-24"

    def test_other_statuses_do_not_stamp(self, controller, make_item):
        item = make_item()
        assert controller.set_status(item.id, "inventory").date_received == ""

    def test_location_preserved_when_omitted(self, controller, make_item):
        item = make_item(location="Office")
        updated = controller.set_status(item.id, "inventory")
        assert updated.location == "Office"
        assert controller.history(item.id)[0].location == "Office"

    def test_location_replaced_when_given(self, controller, make_item):
        item = make_item(location="Office")
        updated = controller.set_status(item.id, "inventory", location="Warehouse")
        assert updated.location == "Warehouse"
        assert controller.history(item.id)[0].location == "Warehouse"

    def test_blank_location_clears(self, controller, make_item):
        item = make_item(location="Office")
        assert controller.set_status(item.id, "delivered", location="").location is None

    def test_unknown_status(self, controller, make_item):
        item = make_item()
        with pytest.raises(ValidationError):
            controller.set_status(item.id, "lost")
        assert len(controller.history(item.id)) == 1

    def test_missing_item(self, controller):
        with pytest.raises(ItemNotFoundError):
            controller.set_status("JRS-NOPE", "received")

    def test_history_failure_rolls_back_status(self, controller, make_item, monkeypatch):
        item = make_item()
        monkeypatch.setattr(HistoryLedger, "record", _fail_record)
        with pytest.raises(PersistenceError):
            controller.set_status(item.id, "delivered")
        monkeypatch.undo()

        after = controller.get_item(item.id)
        assert after.status is ItemStatus.ORDERED
        assert after.updated_at == item.updated_at
        assert len(controller.history(item.id)) == 1


class TestUpdateItem:
    def test_status_change_logged_without_note(self, controller, make_item):
        item = make_item(location="Office")
        request = UpdateItemRequest.from_item(item, status="inventory", location="Vehicle")
        controller.update_item(item.id, request)

        history = controller.history(item.id)
        assert len(history) == 2
        assert history[0].old_status is ItemStatus.ORDERED
        assert history[0].new_status is ItemStatus.INVENTORY
        assert history[0].location == "Vehicle"
        assert history[0].note is None

    def test_no_status_change_no_entry(self, controller, make_item):
        item = make_item()
        controller.update_item(item.id, UpdateItemRequest.from_item(item, notes="rush"))
        assert len(controller.history(item.id)) == 1
        assert controller.get_item(item.id).notes == "rush"

    def test_size_normalized(self, controller, make_item):
        item = make_item(size="L")
        request = UpdateItemRequest.from_item(item, size="ys", age_group=None)
        updated = controller.update_item(item.id, request)
        assert updated.size == "S"
        assert updated.age_group is AgeGroup.YOUTH

    def test_every_field_overwritten(self, controller, make_item):
        item = make_item(team="Hawks", number="42", tracking_number="1Z")
        request = UpdateItemRequest.from_item(item, team="", number="", tracking_number="")
        updated = controller.update_item(item.id, request)
        assert (updated.team, updated.number, updated.tracking_number) == ("", "", "")

    def test_missing_item(self, controller, make_item):
        item = make_item()
        with pytest.raises(ItemNotFoundError):
            controller.update_item("JRS-NOPE", UpdateItemRequest.from_item(item))


class TestTimestamps:
    def test_created_at_never_changes(self, controller, make_item, deterministic_clock):
        item = make_item()
        created_at = item.created_at
        last_updated = item.updated_at

        for status in ("received", "inventory", "delivered"):
            deterministic_clock.advance(60)
            after = controller.set_status(item.id, status)
            assert after.created_at == created_at
            assert after.updated_at > last_updated
            last_updated = after.updated_at

        deterministic_clock.advance(60)
        after = controller.update_item(item.id, UpdateItemRequest.from_item(after, notes="x"))
        assert after.created_at == created_at
        assert after.updated_at == deterministic_clock.now()


class TestPaymentAndRemake:
    def test_payment_writes_no_history(self, controller, make_item, deterministic_clock):
        item = make_item()
        deterministic_clock.advance(5)
        updated = controller.set_payment_status(item.id, "paid")

        assert updated.payment_status is PaymentStatus.PAID
        assert updated.updated_at == deterministic_clock.now()
        assert len(controller.history(item.id)) == 1

    def test_any_payment_transition_allowed(self, controller, make_item):
        item = make_item()
        for value in ("paid", "unpaid", "not_required", "invoiced"):
            assert controller.set_payment_status(item.id, value).payment_status.value == value

    def test_unknown_payment_status(self, controller, make_item):
        item = make_item()
        with pytest.raises(ValidationError):
            controller.set_payment_status(item.id, "free")

    def test_remake_flag_independent_of_status(self, controller, make_item):
        item = make_item()
        controller.set_status(item.id, "delivered")
        flagged = controller.set_remake(item.id, True)
        assert flagged.needs_remake is True
        assert flagged.status is ItemStatus.DELIVERED
        assert controller.set_remake(item.id, False).needs_remake is False
        assert len(controller.history(item.id)) == 2

    def test_missing_item(self, controller):
        with pytest.raises(ItemNotFoundError):
            controller.set_payment_status("JRS-NOPE", "paid")
        with pytest.raises(ItemNotFoundError):
            controller.set_remake("JRS-NOPE", True)


class TestDelete:
    def test_delete_cascades_only_own_history(self, controller, make_item):
        keep = make_item()
        gone = make_item()
        controller.set_status(gone.id, "received")

        controller.delete_item(gone.id)

        assert controller.find_item(gone.id) is None
        assert controller.history(gone.id) == []
        assert len(controller.history(keep.id)) == 1

    def test_delete_missing(self, controller):
        with pytest.raises(ItemNotFoundError):
            controller.delete_item("JRS-NOPE")

    def test_bulk_delete(self, controller, make_item):
        a = make_item()
        b = make_item()
        assert controller.bulk_delete([a.id, "JRS-NOPE", b.id]) == 2
        assert controller.query_items() == []
        assert controller.history(a.id) == []


class TestBulkApply:
    def test_one_valid_one_missing(self, controller, make_item):
        item = make_item()
        assert controller.bulk_apply([item.id, "JRS-NOPE"], BulkUpdateFields(status="delivered")) == 1
        assert controller.get_item(item.id).status is ItemStatus.DELIVERED

    def test_skip_policy_writes_no_history(self, controller, make_item):
        item = make_item()
        controller.bulk_apply([item.id], BulkUpdateFields(status="delivered"))
        assert len(controller.history(item.id)) == 1

    def test_record_policy(self, database, deterministic_clock, sequential_ids, make_request):
        controller = LifecycleController(
            database,
            deterministic_clock,
            id_factory=sequential_ids,
            bulk_history_policy=BulkHistoryPolicy.RECORD,
        )
        moving = controller.create_item(make_request())
        staying = controller.create_item(make_request(status="delivered"))

        count = controller.bulk_apply([moving, staying], BulkUpdateFields(status="delivered"))

        assert count == 2
        latest = controller.history(moving)[0]
        assert latest.old_status is ItemStatus.ORDERED
        assert latest.new_status is ItemStatus.DELIVERED
        assert latest.note == BULK_UPDATE_NOTE
        assert len(controller.history(staying)) == 1

    def test_policy_accepts_string(self, database):
        controller = LifecycleController(database, bulk_history_policy="record")
        assert controller.bulk_history_policy is BulkHistoryPolicy.RECORD

    def test_partial_fields(self, controller, make_item):
        item = make_item(tracking_number="OLD")
        controller.bulk_apply([item.id], BulkUpdateFields(date_delivered="2025-03-01"))
        after = controller.get_item(item.id)
        assert after.date_delivered == "2025-03-01"
        assert after.tracking_number == "OLD"

    def test_empty_fields(self, controller, make_item):
        item = make_item()
        assert controller.bulk_apply([item.id], BulkUpdateFields()) == 0


class TestQueries:
    def test_query_items_through_controller(self, controller, make_item):
        make_item(customer_name="Alice", location="Office")
        bob = make_item(customer_name="Bob", location="Warehouse")
        items = controller.query_items(ItemQuery(location="Warehouse"))
        assert [i.id for i in items] == [bob.id]

    def test_find_item(self, controller, make_item):
        item = make_item()
        assert controller.find_item(item.id) == item
        assert controller.find_item("JRS-NOPE") is None


class TestLogging:
    def test_status_change_logged_with_context(self, controller, make_item, captured_logs):
        item = make_item()
        controller.set_status(item.id, "received")

        records = [r for r in captured_logs() if r["message"] == "item_status_changed"]
        assert len(records) == 1
        assert records[0]["item_id"] == item.id
        assert records[0]["operation"] == "set_status"
        assert records[0]["to_status"] == "received"

    def test_rollback_logged(self, controller, make_item, captured_logs, monkeypatch):
        item = make_item()
        monkeypatch.setattr(HistoryLedger, "record", _fail_record)
        with pytest.raises(PersistenceError):
            controller.set_status(item.id, "delivered")

        records = [r for r in captured_logs() if r["message"] == "operation_rolled_back"]
        assert records and records[0]["level"] == "ERROR"

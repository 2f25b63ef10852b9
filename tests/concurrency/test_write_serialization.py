"""
Concurrent writers against one file database.

Writes are serialized by Database.write_scope(); every status change must
land in the ledger exactly once and the old/new pairs must chain.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from inventory_kernel.db.engine import Database
from inventory_kernel.domain.dtos import CreateItemRequest
from inventory_kernel.domain.statuses import ItemStatus
from inventory_kernel.services.lifecycle_controller import LifecycleController

pytestmark = pytest.mark.slow_locks

STATUSES = [ItemStatus.RECEIVED, ItemStatus.DELIVERED, ItemStatus.INVENTORY, ItemStatus.ORDERED]


@pytest.fixture
def file_database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'concurrent.db'}")
    db.initialize()
    yield db
    db.dispose()


@pytest.fixture
def file_controller(file_database):
    return LifecycleController(file_database)


def test_parallel_status_changes_all_recorded(file_controller):
    item_id = file_controller.create_item(CreateItemRequest(customer_name="Race"))
    calls = 40
    start = threading.Barrier(8)

    def change(n: int):
        if n < 8:
            start.wait()
        return file_controller.set_status(item_id, STATUSES[n % len(STATUSES)])

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(change, range(calls)))

    history = sorted(file_controller.history(item_id), key=lambda entry: entry.id)
    assert len(history) == calls + 1
    assert history[0].old_status is None
    for previous, entry in zip(history, history[1:]):
        assert entry.old_status is previous.new_status
    assert file_controller.get_item(item_id).status is history[-1].new_status


def test_parallel_creates_get_distinct_ids(file_controller):
    with ThreadPoolExecutor(max_workers=8) as pool:
        ids = list(
            pool.map(
                lambda n: file_controller.create_item(CreateItemRequest(customer_name=f"C{n}")),
                range(30),
            )
        )
    assert len(set(ids)) == 30
    assert len(file_controller.query_items()) == 30

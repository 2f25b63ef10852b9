"""
Pytest fixtures for the inventory kernel test suite.

Provides:
- An in-memory SQLite Database per test (tables created, locations seeded)
- A DeterministicClock so timestamps are reproducible
- Service fixtures sharing one session, and a LifecycleController
- Item factories

Note:
    The in-memory database is a single shared connection.  Tests must not
    keep the ``session`` fixture inside an open transaction while calling
    the controller (which opens its own sessions); commit or avoid the
    ``session`` fixture in controller tests.
"""

import itertools
import json
import logging
from datetime import UTC, datetime
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session

from inventory_kernel.db.engine import Database
from inventory_kernel.domain.clock import DeterministicClock
from inventory_kernel.domain.dtos import CreateItemRequest
from inventory_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from inventory_kernel.services.history_ledger import HistoryLedger
from inventory_kernel.services.item_store import ItemStore
from inventory_kernel.services.lifecycle_controller import LifecycleController
from inventory_kernel.services.location_registry import LocationRegistry

FIXED_NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture inventory_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, controller):
            controller.create_item(...)
            logs = captured_logs()
            assert any(r["message"] == "item_created" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("inventory_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Store
# =============================================================================


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock(FIXED_NOW)


@pytest.fixture
def database() -> Generator[Database, None, None]:
    db = Database("sqlite://")
    db.initialize()
    yield db
    db.dispose()


@pytest.fixture
def session(database) -> Generator[Session, None, None]:
    """A session for direct service tests; rolled back at teardown."""
    s = database.session()
    yield s
    s.rollback()
    s.close()


@pytest.fixture
def sequential_ids():
    """ID factory yielding JRS-00000001, JRS-00000002, ..."""
    counter = itertools.count(1)
    return lambda: f"JRS-{next(counter):08d}"


@pytest.fixture
def item_store(session, deterministic_clock, sequential_ids) -> ItemStore:
    return ItemStore(session, deterministic_clock, id_factory=sequential_ids)


@pytest.fixture
def history_ledger(session, deterministic_clock) -> HistoryLedger:
    return HistoryLedger(session, deterministic_clock)


@pytest.fixture
def location_registry(session) -> LocationRegistry:
    return LocationRegistry(session)


@pytest.fixture
def controller(database, deterministic_clock, sequential_ids) -> LifecycleController:
    return LifecycleController(database, deterministic_clock, id_factory=sequential_ids)


# =============================================================================
# Factories
# =============================================================================


@pytest.fixture
def make_request():
    """Build a CreateItemRequest with sensible defaults."""

    def _make(**overrides) -> CreateItemRequest:
        values = {
            "customer_name": "J. Smith",
            "team": "Hawks",
            "number": "42",
            "size": "AL",
        }
        values.update(overrides)
        return CreateItemRequest(**values)

    return _make


@pytest.fixture
def make_item(controller, make_request, deterministic_clock):
    """
    Create an item through the controller and return its ItemInfo.

    The clock advances one second per item so creation order is
    observable in ``created_at``.
    """

    def _make(**overrides):
        item_id = controller.create_item(make_request(**overrides))
        deterministic_clock.advance(1)
        return controller.get_item(item_id)

    return _make

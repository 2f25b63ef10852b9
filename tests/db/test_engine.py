"""Tests for the store handle (inventory_kernel/db/engine.py)."""

import pytest
from sqlalchemy import inspect, text

from inventory_kernel.db.engine import DEFAULT_SEED_LOCATIONS, Database
from inventory_kernel.domain.dtos import CreateItemRequest
from inventory_kernel.models.item import Item
from inventory_kernel.services.location_registry import LocationRegistry


def _location_names(db) -> list[str]:
    with db.session_scope() as session:
        return LocationRegistry(session).names()


class TestInitialize:
    def test_creates_tables(self, database):
        tables = set(inspect(database.engine).get_table_names())
        assert {"items", "status_history", "locations"} <= tables

    def test_seeds_defaults(self, database):
        assert _location_names(database) == sorted(DEFAULT_SEED_LOCATIONS)

    def test_idempotent(self, database):
        database.initialize()
        database.initialize()
        assert _location_names(database) == sorted(DEFAULT_SEED_LOCATIONS)

    def test_no_reseed_after_removal(self, database):
        with database.write_scope() as session:
            registry = LocationRegistry(session)
            registry.remove(registry.get_by_name("Vehicle").id)
        database.initialize()
        assert "Vehicle" not in _location_names(database)

    def test_custom_seed(self):
        db = Database("sqlite://")
        try:
            db.initialize(seed_locations=("Shop",))
            assert _location_names(db) == ["Shop"]
        finally:
            db.dispose()

    def test_no_seed(self):
        db = Database("sqlite://")
        try:
            db.initialize(seed_locations=None)
            assert _location_names(db) == []
        finally:
            db.dispose()


class TestSessionScope:
    def test_commits(self, database):
        with database.session_scope() as session:
            session.execute(
                text("INSERT INTO locations (name) VALUES (:name)"), {"name": "Garage"}
            )
        assert "Garage" in _location_names(database)

    def test_rolls_back_on_error(self, database):
        with pytest.raises(RuntimeError):
            with database.write_scope() as session:
                session.execute(
                    text("INSERT INTO locations (name) VALUES (:name)"), {"name": "Garage"}
                )
                raise RuntimeError("abort")
        assert "Garage" not in _location_names(database)

    def test_foreign_keys_enforced(self, database):
        with database.session_scope() as session:
            assert session.execute(text("PRAGMA foreign_keys")).scalar() == 1

    def test_savepoint_rollback_keeps_outer_work(self, database):
        with database.session_scope() as session:
            session.execute(text("INSERT INTO locations (name) VALUES ('Outer')"))
            savepoint = session.begin_nested()
            session.execute(text("INSERT INTO locations (name) VALUES ('Inner')"))
            savepoint.rollback()
        names = _location_names(database)
        assert "Outer" in names
        assert "Inner" not in names


def test_qty_check_constraint(database, deterministic_clock):
    from sqlalchemy.exc import IntegrityError

    now = deterministic_clock.now()
    with pytest.raises(IntegrityError):
        with database.session_scope() as session:
            session.add(
                Item(
                    id="JRS-ZEROQTY",
                    quantity=0,
                    customer_name="A",
                    created_at=now,
                    updated_at=now,
                )
            )


def test_timestamps_round_trip_as_utc(controller):
    item_id = controller.create_item(CreateItemRequest(customer_name="A"))
    item = controller.get_item(item_id)
    assert item.created_at.utcoffset().total_seconds() == 0


def test_item_repr():
    assert "JRS-1" in repr(Item(id="JRS-1"))

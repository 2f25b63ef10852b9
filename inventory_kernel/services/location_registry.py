"""
LocationRegistry -- the list of places an item can be.

Responsibility:
    Adds, lists and removes locations.  Items refer to a location by name,
    so removal first counts the items that still carry the name.

Architecture position:
    Kernel > Services.  Used by the CLI, the bootstrap seed, and form
    option lists (``names``).

Invariants enforced:
    - Names are unique (table constraint; duplicates are reported as
      DuplicateLocationError).
    - A location referenced by any item cannot be removed.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from inventory_kernel.domain.dtos import LocationInfo
from inventory_kernel.exceptions import (
    DuplicateLocationError,
    LocationInUseError,
    LocationNotFoundError,
    ValidationError,
)
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.item import Item
from inventory_kernel.models.location import Location
from inventory_kernel.services.base import BaseService

logger = get_logger("services.location_registry")


class LocationRegistry(BaseService):
    """Registered locations."""

    def _exists(self, name: str) -> bool:
        stmt = select(Location.id).where(Location.name == name)
        return self.session.scalar(stmt) is not None

    def _items_at(self, name: str) -> int:
        stmt = select(func.count()).select_from(Item).where(Item.location == name)
        return self.session.scalar(stmt) or 0

    def add(self, name: str, description: str | None = None) -> LocationInfo:
        """
        Register a new location.

        Raises:
            ValidationError: ``name`` is blank.
            DuplicateLocationError: the name is already registered.
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("name", "is required")
        description = (description or "").strip() or None

        if self._exists(name):
            raise DuplicateLocationError(name)

        location = Location(name=name, description=description)
        savepoint = self.session.begin_nested()
        try:
            self.session.add(location)
            self.session.flush()
        except IntegrityError as exc:
            savepoint.rollback()
            raise DuplicateLocationError(name) from exc
        savepoint.commit()

        logger.info("location_added", extra={"location": name})
        return LocationInfo(id=location.id, name=location.name, description=description)

    def ensure(self, name: str, description: str | None = None) -> bool:
        """Add ``name`` unless present.  Returns True when a row was added."""
        try:
            self.add(name, description)
        except DuplicateLocationError:
            return False
        return True

    def seed(self, names: Iterable[str]) -> int:
        """Add ``names`` when no location exists yet.  Returns rows added."""
        if self.session.scalar(select(func.count()).select_from(Location)):
            return 0
        return sum(1 for name in names if self.ensure(name))

    def remove(self, location_id: int) -> None:
        """
        Delete a location.

        Raises:
            LocationNotFoundError: no location has this id.
            LocationInUseError: items still sit at this location.
        """
        location = self.session.get(Location, location_id)
        if location is None:
            raise LocationNotFoundError(location_id)

        in_use = self._items_at(location.name)
        if in_use:
            raise LocationInUseError(location.name, in_use)

        self.session.delete(location)
        self.session.flush()
        logger.info("location_removed", extra={"location": location.name})

    def get_by_name(self, name: str) -> LocationInfo | None:
        location = self.session.scalar(select(Location).where(Location.name == name))
        if location is None:
            return None
        return LocationInfo(
            id=location.id,
            name=location.name,
            description=location.description,
            item_count=self._items_at(location.name),
        )

    def list(self) -> list[LocationInfo]:
        """All locations by name, each with its live item count."""
        usage = (
            select(Item.location, func.count().label("item_count"))
            .where(Item.location.is_not(None))
            .group_by(Item.location)
            .subquery()
        )
        stmt = (
            select(Location, func.coalesce(usage.c.item_count, 0))
            .outerjoin(usage, usage.c.location == Location.name)
            .order_by(Location.name)
        )
        return [
            LocationInfo(
                id=location.id,
                name=location.name,
                description=location.description,
                item_count=count,
            )
            for location, count in self.session.execute(stmt)
        ]

    def names(self) -> list[str]:
        return list(self.session.scalars(select(Location.name).order_by(Location.name)))

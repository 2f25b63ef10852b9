"""
Module: inventory_kernel.models.location
Responsibility: Named places an item can sit (warehouse shelf, office,
    delivery vehicle, with the customer).
Architecture position: Kernel > Models.  May import from db/base.py only.

Invariants enforced:
    - ``name`` is unique (uq_locations_name).
    - A location is not removed while any item references its name; that
      check lives in LocationRegistry.remove because items refer to
      locations by name, not by key.
"""

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import Base


class Location(Base):
    """A registered location."""

    __tablename__ = "locations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<Location {self.id} {self.name}>"

"""
Module: inventory_kernel.selectors.base
Responsibility: Abstract base class for read-only query selectors.  Selectors
    serve the dashboard and label pages: aggregate reads that do not belong
    to a single service.
Architecture position: Kernel > Selectors.  May import from db/, models/
    and the pure domain/ layer.  MUST NOT import from services/ or outer
    layers.

Invariants enforced:
    - Read-only access: selectors MUST NOT call session.add(),
      session.delete(), session.commit(), or session.flush().
    - DTO return convention: selectors return frozen dataclasses, never
      ORM instances.
"""

from abc import ABC

from sqlalchemy.orm import Session


class BaseSelector(ABC):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform read-only queries,
        and return DTOs.  The caller owns the session and its transaction.
    """

    def __init__(self, session: Session):
        self.session = session

"""
Typed Exception Hierarchy for the Inventory Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (the CLI, the import pipeline, a rendering layer) branch on the kind
of failure: a missing item is a no-op redirect, a duplicate location is a
warning, a broken paired write is a hard failure. Catching by type keeps
that logic independent of message wording.

Every exception:
  1. Is a TYPED class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable)
  3. Carries structured DATA as attributes (survives structured logging)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    InventoryKernelError (base)
    |
    +-- ValidationError
    |
    +-- NotFoundError
    |   +-- ItemNotFoundError
    |   +-- LocationNotFoundError
    |
    +-- LocationError
    |   +-- DuplicateLocationError
    |   +-- LocationInUseError
    |
    +-- DuplicateItemIdError
    |
    +-- PersistenceError
    |
    +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                    | When Raised
----------------|-------------------------|-----------------------------------------
Validation      | VALIDATION_ERROR        | Missing customer name, qty < 1, bad enum
----------------|-------------------------|-----------------------------------------
Not found       | ITEM_NOT_FOUND          | Item ID doesn't exist
                | LOCATION_NOT_FOUND      | Location ID doesn't exist
----------------|-------------------------|-----------------------------------------
Location        | DUPLICATE_LOCATION      | Location name already registered
                | LOCATION_IN_USE         | Delete while items reference the name
----------------|-------------------------|-----------------------------------------
Identity        | DUPLICATE_ITEM_ID       | Generated ID collided (retried by store)
----------------|-------------------------|-----------------------------------------
Persistence     | PERSISTENCE_FAILURE     | Store failure; whole operation rolled back
----------------|-------------------------|-----------------------------------------
Immutability    | IMMUTABILITY_VIOLATION  | Update/delete of a history entry

===============================================================================
HANDLING PATTERNS
===============================================================================

    try:
        controller.delete_item(item_id)
    except ItemNotFoundError:
        pass  # already gone; treat as done

    try:
        registry.remove(location_id)
    except LocationInUseError as e:
        warn(f"{e.name} still holds {e.item_count} item(s)")

===============================================================================
"""


class InventoryKernelError(Exception):
    """
    Base exception for all inventory kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "INVENTORY_KERNEL_ERROR"


class ValidationError(InventoryKernelError):
    """A request is missing a required field or carries an invalid value."""

    code: str = "VALIDATION_ERROR"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")


# Not-found exceptions


class NotFoundError(InventoryKernelError):
    """Base exception for lookups of unknown identifiers."""

    code: str = "NOT_FOUND"


class ItemNotFoundError(NotFoundError):
    """Item with given ID was not found."""

    code: str = "ITEM_NOT_FOUND"

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Item not found: {item_id}")


class LocationNotFoundError(NotFoundError):
    """Location with given ID was not found."""

    code: str = "LOCATION_NOT_FOUND"

    def __init__(self, location_id: int | str):
        self.location_id = location_id
        super().__init__(f"Location not found: {location_id}")


# Location registry exceptions


class LocationError(InventoryKernelError):
    """Base exception for rejected location registry operations."""

    code: str = "LOCATION_ERROR"


class DuplicateLocationError(LocationError):
    """A location with this name is already registered."""

    code: str = "DUPLICATE_LOCATION"

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Location already exists: {name}")


class LocationInUseError(LocationError):
    """Location cannot be removed while items reference it."""

    code: str = "LOCATION_IN_USE"

    def __init__(self, name: str, item_count: int):
        self.name = name
        self.item_count = item_count
        super().__init__(
            f"Location '{name}' is referenced by {item_count} item(s)"
        )


# Identity


class DuplicateItemIdError(InventoryKernelError):
    """
    A generated item ID collided with an existing row.

    Raised inside ItemStore.create for each collision; it only escapes
    once the retry budget is exhausted.
    """

    code: str = "DUPLICATE_ITEM_ID"

    def __init__(self, item_id: str, attempts: int = 1):
        self.item_id = item_id
        self.attempts = attempts
        super().__init__(
            f"Generated item ID {item_id} already exists (attempt {attempts})"
        )


# Persistence


class PersistenceError(InventoryKernelError):
    """
    The store rejected part of a logical operation.

    The whole operation (item write and its history entry) was rolled back.
    """

    code: str = "PERSISTENCE_FAILURE"

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation} failed and was rolled back: {reason}")


# Immutability


class ImmutabilityViolationError(InventoryKernelError):
    """Attempted to modify or independently delete an append-only record."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Cannot modify {entity_type} {entity_id}: {reason}"
        )

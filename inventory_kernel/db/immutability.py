"""
ORM-level append-only enforcement for the status history ledger.

===============================================================================
PROTECTED ENTITIES
===============================================================================

Entity          | Rule
----------------|----------------------------------------------------------
StatusHistory   | Never updated.  Deleted only in the same flush that
                | deletes its parent Item (cascade).

SQLAlchemy fires these checks before any SQL is emitted, so a rejected
change never reaches the database:

    session.flush()
         |
         v
    [before_flush]  --> _check_history_deletion_before_flush()
         |
         v
    [before_update] --> _check_history_immutability() --> ImmutabilityViolationError
         |
         v
    SQL sent to database (only if checks pass)

Deletions are checked in Session.before_flush because that is the last point
where the set of deleted objects is known as a whole, which is what tells a
cascade (item deleted too) apart from a stray delete.

===============================================================================
USAGE
===============================================================================

Registered by ``Database.__init__``; registration is idempotent:

    from inventory_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()

To temporarily disable (TESTS ONLY):

    from inventory_kernel.db.immutability import unregister_immutability_listeners
    unregister_immutability_listeners()
"""

from sqlalchemy import event
from sqlalchemy.orm import Session

from inventory_kernel.exceptions import ImmutabilityViolationError
from inventory_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _check_history_deletion_before_flush(session, flush_context, instances):
    """Reject deletion of a history entry whose item survives the flush."""
    from inventory_kernel.models.item import Item
    from inventory_kernel.models.status_history import StatusHistory

    deleted = list(session.deleted)
    deleted_item_ids = {obj.id for obj in deleted if isinstance(obj, Item)}

    for obj in deleted:
        if not isinstance(obj, StatusHistory):
            continue
        if obj.item_id in deleted_item_ids:
            continue

        logger.error(
            "immutability_violation_blocked",
            extra={
                "entity_type": "StatusHistory",
                "entity_id": str(obj.id),
                "item_id": obj.item_id,
                "operation": "DELETE",
            },
        )
        raise ImmutabilityViolationError(
            entity_type="StatusHistory",
            entity_id=str(obj.id),
            reason="History entries are removed only with their item",
        )


def _check_history_immutability(mapper, connection, target):
    """Prevent any update of a StatusHistory row."""
    logger.error(
        "immutability_violation_blocked",
        extra={
            "entity_type": "StatusHistory",
            "entity_id": str(target.id),
            "item_id": target.item_id,
            "operation": "UPDATE",
        },
    )
    raise ImmutabilityViolationError(
        entity_type="StatusHistory",
        entity_id=str(target.id),
        reason="History entries are append-only",
    )


def register_immutability_listeners() -> None:
    """Install the history guards.  Safe to call more than once."""
    from inventory_kernel.models.status_history import StatusHistory

    if not event.contains(Session, "before_flush", _check_history_deletion_before_flush):
        event.listen(Session, "before_flush", _check_history_deletion_before_flush)
    if not event.contains(StatusHistory, "before_update", _check_history_immutability):
        event.listen(StatusHistory, "before_update", _check_history_immutability)


def _safe_remove_listener(target, event_name, listener_fn):
    if event.contains(target, event_name, listener_fn):
        event.remove(target, event_name, listener_fn)


def unregister_immutability_listeners() -> None:
    """
    Remove the history guards.

    WARNING: Only use this in tests that need to violate the rule on purpose.
    """
    from inventory_kernel.models.status_history import StatusHistory

    _safe_remove_listener(Session, "before_flush", _check_history_deletion_before_flush)
    _safe_remove_listener(StatusHistory, "before_update", _check_history_immutability)

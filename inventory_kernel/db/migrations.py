"""
Module: inventory_kernel.db.migrations
Responsibility: In-place upgrade of ``items`` tables created by earlier
    releases, which lack the columns added over time.
Architecture position: Kernel > DB.  Called by Database.initialize() before
    create_all.  Works on the Engine with plain DDL; no ORM models involved.

Invariants enforced:
    - Idempotent: every step tolerates having run before.  A column that
      already exists ("duplicate column") is not an error.
    - After migration no column the ORM maps holds NULL, and the legacy
      status value ``need_remake`` no longer appears in ``status`` (it is
      converted into the orthogonal ``needs_remake`` flag on a ``received``
      item).
"""

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError

from inventory_kernel.logging_config import get_logger

logger = get_logger("db.migrations")

# Columns added after the first release, in the order they were introduced.
ADDED_COLUMNS: tuple[tuple[str, str], ...] = (
    ("team", "VARCHAR(200) DEFAULT ''"),
    ("age_group", "VARCHAR(20) DEFAULT 'Adult'"),
    ("date_delivered", "VARCHAR(32) DEFAULT ''"),
    ("payment_status", "VARCHAR(20) DEFAULT 'unpaid'"),
    ("needs_remake", "BOOLEAN DEFAULT 0"),
    ("tracking_number", "VARCHAR(100) DEFAULT ''"),
)

# Text columns that older rows may hold as NULL.
_TEXT_BACKFILL: tuple[str, ...] = (
    "type",
    "color",
    "design",
    "customer_name",
    "team",
    "number",
    "size",
    "namebar",
    "chest_logo",
    "notes",
    "date_ordered",
    "date_invoiced",
    "date_received",
    "date_delivered",
    "tracking_number",
)

_LEGACY_REMAKE_STATUS = "need_remake"


def _add_column(engine: Engine, table: str, name: str, ddl: str) -> bool:
    try:
        with engine.begin() as conn:
            conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {name} {ddl}"))
    except OperationalError as exc:
        if "duplicate column" in str(exc).lower():
            return False
        raise
    return True


def apply_migrations(engine: Engine) -> list[str]:
    """
    Upgrade a legacy ``items`` table.  Returns the names of added columns.

    A database without an ``items`` table is left alone; create_all builds
    the current schema from scratch.
    """
    inspector = inspect(engine)
    if not inspector.has_table("items"):
        return []

    existing = {col["name"] for col in inspector.get_columns("items")}
    added: list[str] = []
    for name, ddl in ADDED_COLUMNS:
        if name in existing:
            continue
        if _add_column(engine, "items", name, ddl):
            added.append(name)
            logger.info("column_added", extra={"table": "items", "column": name})

    existing |= set(added)

    with engine.begin() as conn:
        for column in _TEXT_BACKFILL:
            if column in existing:
                conn.execute(
                    text(f'UPDATE items SET "{column}" = \'\' WHERE "{column}" IS NULL')
                )
        conn.execute(text("UPDATE items SET age_group = 'Adult' WHERE age_group IS NULL"))
        conn.execute(
            text("UPDATE items SET payment_status = 'unpaid' WHERE payment_status IS NULL")
        )
        conn.execute(text("UPDATE items SET needs_remake = 0 WHERE needs_remake IS NULL"))
        if "created_at" in existing:
            conn.execute(
                text("UPDATE items SET created_at = CURRENT_TIMESTAMP WHERE created_at IS NULL")
            )
        if "updated_at" in existing and "created_at" in existing:
            conn.execute(
                text("UPDATE items SET updated_at = created_at WHERE updated_at IS NULL")
            )
        if "qty" in existing:
            conn.execute(text("UPDATE items SET qty = 1 WHERE qty IS NULL OR qty < 1"))
        conn.execute(text("UPDATE items SET status = 'ordered' WHERE status IS NULL"))
        converted = conn.execute(
            text(
                "UPDATE items SET status = 'received', needs_remake = 1 "
                "WHERE status = :legacy"
            ),
            {"legacy": _LEGACY_REMAKE_STATUS},
        ).rowcount

    if converted:
        logger.info("legacy_remake_status_converted", extra={"count": converted})
    if added:
        logger.info("migrations_applied", extra={"columns": added})
    return added

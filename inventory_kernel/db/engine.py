"""
Module: inventory_kernel.db.engine
Responsibility: The store handle.  Owns the SQLAlchemy engine, the session
    factory, and the process-wide write lock, and provides transactional
    scope utilities.
Architecture position: Kernel > DB.  May import from db/ and (inline, for
    table creation and seeding) from models/ and services/.  MUST NOT be a
    module-level singleton: the bootstrap opens one Database and injects it.

Invariants enforced:
    - SQLite is the supported backend.  Foreign keys are enforced
      (``PRAGMA foreign_keys=ON`` on every connection) so history rows
      cascade with their item.
    - Writes are serialized: ``write_scope()`` holds a re-entrant lock for
      the whole transaction.  SQLite admits a single writer.
    - ``session_scope()`` commits on success and rolls back on any exception.

Failure modes:
    - OperationalError ("database is locked") if another process holds the
      database file for longer than the driver timeout.
    - sqlalchemy.exc.SQLAlchemyError from any statement, re-raised after
      rollback.

Audit relevance:
    An item write and its history entry always share one write_scope(), so
    they commit or roll back together.
"""

import threading
from collections.abc import Iterable
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from inventory_kernel.db.immutability import register_immutability_listeners
from inventory_kernel.logging_config import get_logger

logger = get_logger("db.engine")

DEFAULT_SEED_LOCATIONS: tuple[str, ...] = ("Warehouse", "Office", "Vehicle", "Customer")


def _is_memory_url(database_url: str) -> bool:
    return database_url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in database_url


def _install_sqlite_pragmas(engine: Engine) -> None:
    """
    Enforce foreign keys and let SQLAlchemy own BEGIN.

    pysqlite's own transaction handling defers BEGIN and breaks SAVEPOINT;
    disabling it and emitting BEGIN ourselves gives correct nested
    transactions, which ItemStore.create relies on.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


class Database:
    """
    Injected store handle.

    Contract:
        Construct once per process (or per test), call ``initialize()``
        before first use and ``dispose()`` on shutdown.

    Guarantees:
        - ``session_scope()``: commit-or-rollback session, always closed.
        - ``write_scope()``: same, while holding the write lock.
    """

    def __init__(self, database_url: str = "sqlite://", *, echo: bool = False):
        self.database_url = database_url
        connect_args = {"check_same_thread": False}

        if _is_memory_url(database_url):
            # One shared connection, or every session sees an empty database.
            self.engine: Engine = create_engine(
                database_url,
                echo=echo,
                connect_args=connect_args,
                poolclass=StaticPool,
            )
        else:
            connect_args["timeout"] = 30
            self.engine = create_engine(
                database_url,
                echo=echo,
                connect_args=connect_args,
            )

        if self.engine.dialect.name == "sqlite":
            _install_sqlite_pragmas(self.engine)

        self._session_factory: sessionmaker[Session] = sessionmaker(
            bind=self.engine, expire_on_commit=False
        )
        self._write_lock = threading.RLock()

        register_immutability_listeners()

        logger.info(
            "engine_initialized",
            extra={
                "dialect": self.engine.dialect.name,
                "in_memory": _is_memory_url(database_url),
                "echo": echo,
            },
        )

    def session(self) -> Session:
        """A new session; the caller owns its lifecycle."""
        return self._session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope around a series of operations.

        Postconditions: On normal exit, the session is committed and closed.
            On exception, the session is rolled back and closed, and the
            exception is re-raised.
        """
        session = self._session_factory()
        logger.debug("transaction_started")
        try:
            yield session
            session.commit()
            logger.debug("transaction_committed")
        except Exception:
            session.rollback()
            logger.debug("transaction_rolled_back")
            raise
        finally:
            session.close()

    @contextmanager
    def write_scope(self) -> Generator[Session, None, None]:
        """``session_scope()`` while holding the process-wide write lock."""
        with self._write_lock:
            with self.session_scope() as session:
                yield session

    def initialize(
        self,
        seed_locations: Iterable[str] | None = DEFAULT_SEED_LOCATIONS,
    ) -> None:
        """
        Bring the store up to date.  Idempotent.

        Creates missing tables, applies column migrations to legacy tables,
        and seeds ``seed_locations`` only when the locations table is empty.
        """
        from inventory_kernel.db.base import Base
        from inventory_kernel.db.migrations import apply_migrations
        import inventory_kernel.models  # noqa: F401  (register tables)

        with self._write_lock:
            apply_migrations(self.engine)
            Base.metadata.create_all(self.engine)

        if seed_locations:
            from inventory_kernel.services.location_registry import LocationRegistry

            with self.write_scope() as session:
                added = LocationRegistry(session).seed(seed_locations)
            if added:
                logger.info("locations_seeded", extra={"count": added})

        logger.info("database_initialized")

    def dispose(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()
        logger.info("engine_disposed")

"""CLI bootstrap: open the store from settings and wire the services."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from sqlalchemy.orm import Session

from inventory_config import InventorySettings
from inventory_ingestion.mapping.aliases import merge_aliases
from inventory_ingestion.services import ImportService
from inventory_kernel.db.engine import Database
from inventory_kernel.domain.clock import Clock, SystemClock
from inventory_kernel.domain.ids import make_id_factory
from inventory_kernel.logging_config import get_logger
from inventory_kernel.services.lifecycle_controller import LifecycleController

logger = get_logger("cli.bootstrap")


@dataclass
class App:
    """Everything one CLI invocation needs; ``close()`` releases the store."""

    settings: InventorySettings
    database: Database
    controller: LifecycleController
    importer: ImportService
    clock: Clock

    @contextmanager
    def reading(self) -> Iterator[Session]:
        with self.database.session_scope() as session:
            yield session

    @contextmanager
    def writing(self) -> Iterator[Session]:
        with self.database.write_scope() as session:
            yield session

    def close(self) -> None:
        self.database.dispose()


def build_app(settings: InventorySettings, clock: Clock | None = None) -> App:
    """Open and initialize the store, then build controller and importer."""
    clock = clock or SystemClock()
    database = Database(settings.database_url)
    try:
        database.initialize(seed_locations=settings.seed_locations)
    except Exception:
        database.dispose()
        raise

    controller = LifecycleController(
        database,
        clock,
        id_factory=make_id_factory(settings.ids.prefix),
        id_max_attempts=settings.ids.max_attempts,
        bulk_history_policy=settings.bulk_history_policy,
    )
    importer = ImportService(
        controller,
        aliases=merge_aliases(settings.ingestion.alias_overrides),
        max_reported_errors=settings.ingestion.max_reported_errors,
    )
    logger.info(
        "cli_app_ready",
        extra={"config_id": settings.config_id, "database_url": settings.database_url},
    )
    return App(
        settings=settings,
        database=database,
        controller=controller,
        importer=importer,
        clock=clock,
    )

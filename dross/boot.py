"""Process bootstrap — bring the database schema up to date before serving."""

from __future__ import annotations

import asyncio
import logging
import sys

from dross import __version__
from dross.config import DrossSettings, settings
from dross.exceptions import DrossError
from dross.migrations.manager import MigrationManager
from dross.migrations.record import MigrationOutcome
from dross.migrations.steps import StepContext
from dross.migrations.store import MigrationStore
from dross.repository.faery import FaeryRepository
from dross.repository.player import PlayerRepository

_logger = logging.getLogger(__name__)


def build_manager(config: DrossSettings = settings) -> MigrationManager:
    """Wire repositories and the migration engine from settings."""
    config.db_path.parent.mkdir(parents=True, exist_ok=True)
    db_path = str(config.db_path)
    build_version = config.build_version or __version__

    players = PlayerRepository(db_path)
    faeries = FaeryRepository(db_path)
    return MigrationManager(
        store=MigrationStore(db_path, build_version),
        repositories=[players, faeries],
        context=StepContext(
            db_path=db_path,
            players=players,
            faeries=faeries,
            admin_email=config.admin_email,
        ),
        build_version=build_version,
        install_shortcut=config.install_shortcut,
    )


async def prepare_database(config: DrossSettings = settings) -> MigrationOutcome | None:
    """Boot step: migrate if needed. Returns None when already current."""
    manager = build_manager(config)
    _logger.info("Checking schema against build %s", manager.build_version)
    if not await manager.needs_migration():
        _logger.info("No migration needed")
        return None
    _logger.info("Running migrations")
    return await manager.migrate()


def main() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        asyncio.run(prepare_database())
    except DrossError as e:
        _logger.critical("Startup aborted: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()

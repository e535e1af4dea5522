"""Version Record Store — persistence for the singleton migration row."""

from __future__ import annotations

import logging

import aiosqlite
from packaging.version import Version

from dross.exceptions import MigrationStoreError, NotFoundError, RepositoryError
from dross.migrations.record import MigrationRecord

_logger = logging.getLogger(__name__)

RECORD_ID = 0


class MigrationStore:
    """Reads and writes the one row of the `migrations` table.

    `save()` works whether or not the row exists: update by fixed key,
    fall back to insert, and if the insert collides with a row written
    concurrently, update again.
    """

    table_name = "migrations"

    def __init__(self, db_path: str, build_version: str | Version):
        self._db_path = db_path
        self._build_version = build_version

    async def create_table(self) -> None:
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute("""
                CREATE TABLE IF NOT EXISTS migrations (
                    id INTEGER PRIMARY KEY CHECK (id = 0),
                    current_version VARCHAR(255),
                    target_version VARCHAR(255) NOT NULL
                )
            """)
            await db.commit()

    async def get(self) -> MigrationRecord:
        """Load the record. Raises NotFoundError if none was ever saved."""
        async with aiosqlite.connect(self._db_path) as db:
            cursor = await db.execute(
                "SELECT current_version, target_version FROM migrations WHERE id = ?",
                (RECORD_ID,),
            )
            row = await cursor.fetchone()
        if row is None:
            raise NotFoundError("No migration record")
        try:
            return MigrationRecord.from_row(row[0], row[1], self._build_version)
        except ValueError as e:
            raise RepositoryError(f"Corrupt migration record {row!r}") from e

    async def save(self, record: MigrationRecord) -> None:
        current, target = record.to_row()
        async with aiosqlite.connect(self._db_path) as db:
            try:
                if await self._update(db, current, target):
                    return
            except aiosqlite.Error as e:
                _logger.warning("Updating migration record failed, trying insert: %s", e)

            try:
                await self._insert(db, current, target)
                return
            except aiosqlite.Error as e:
                _logger.warning("Inserting migration record failed, retrying update: %s", e)

            try:
                updated = await self._update(db, current, target)
            except aiosqlite.Error as e:
                _logger.error("Could not persist migration record %s: %s", record, e)
                raise MigrationStoreError(f"Could not persist migration record {record}") from e
            if not updated:
                _logger.error("Could not persist migration record %s: no row to update", record)
                raise MigrationStoreError(f"Could not persist migration record {record}")

    async def _update(self, db: aiosqlite.Connection, current: str | None, target: str) -> int:
        cursor = await db.execute(
            "UPDATE migrations SET current_version = ?, target_version = ? WHERE id = ?",
            (current, target, RECORD_ID),
        )
        await db.commit()
        return cursor.rowcount

    async def _insert(self, db: aiosqlite.Connection, current: str | None, target: str) -> None:
        try:
            await db.execute(
                "INSERT INTO migrations (id, current_version, target_version) VALUES (?, ?, ?)",
                (RECORD_ID, current, target),
            )
            await db.commit()
        except aiosqlite.Error:
            await db.rollback()
            raise

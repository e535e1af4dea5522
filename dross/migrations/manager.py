"""Migration Manager — brings the database schema up to the build's version.

Two ways forward:
- New install: no migration has ever completed. Create every table at
  its current schema, run the seed steps, record the build version.
- Upgrade: record the intent, then walk the step chain from the recorded
  current version, persisting state before and after each step.

A failed step leaves the record at its last persisted state; the next
`migrate()` resumes from there.
"""

from __future__ import annotations

import logging
from typing import Sequence

import aiosqlite
from packaging.version import Version

from dross.exceptions import DrossError, MigrationFailedError, NotFoundError
from dross.migrations.record import (
    ZERO_VERSION,
    MigrationOutcome,
    MigrationPath,
    MigrationRecord,
    parse_version,
)
from dross.migrations.steps import STEPS, Step, StepContext, StepTable
from dross.migrations.store import MigrationStore
from dross.repository.base import Repository

_logger = logging.getLogger(__name__)

# Storage and hook failures that abort a step
_STEP_ERRORS = (DrossError, aiosqlite.Error)


class MigrationManager:
    """Decides whether the schema needs work and performs it."""

    def __init__(
        self,
        store: MigrationStore,
        repositories: Sequence[Repository],
        context: StepContext,
        build_version: str | Version,
        steps: Sequence[Step] = STEPS,
        install_shortcut: bool = True,
    ) -> None:
        self._store = store
        self._repositories = list(repositories)
        self._context = context
        self._build_version = parse_version(build_version)
        self._table = StepTable(steps)
        self._install_shortcut = install_shortcut

    @property
    def build_version(self) -> Version:
        return self._build_version

    @property
    def step_table(self) -> StepTable:
        return self._table

    async def current(self) -> MigrationRecord:
        """The persisted record, or the absent state if none exists.

        Raises MigrationFailedError if the record cannot be read.
        """
        try:
            await self._store.create_table()
            return await self._store.get()
        except NotFoundError:
            return MigrationRecord.absent(self._build_version)
        except _STEP_ERRORS as e:
            _logger.error("Could not read migration record: %s", e)
            raise MigrationFailedError(None, self._build_version) from e

    async def needs_migration(self) -> bool:
        record = await self.current()
        return not record.satisfies(self._build_version)

    async def migrate(self) -> MigrationOutcome:
        """Run whatever is needed to reach the build version.

        Raises MigrationFailedError if a step or a bracketing write fails.
        """
        record = await self.current()
        if record.satisfies(self._build_version):
            _logger.info("No migration needed, schema at %s", record.current_version)
            return MigrationOutcome(path=MigrationPath.NONE, record=record)

        if record.current_version is None and self._install_shortcut:
            return await self._install()
        return await self._upgrade(record)

    async def start_migration(self, from_version: Version | None, to_version: Version) -> None:
        """Persist the intent to move from `from_version` to `to_version`."""
        await self._persist(
            MigrationRecord(current_version=from_version, target_version=to_version),
            from_version,
            to_version,
        )

    async def complete_migration(
        self, to_version: Version, from_version: Version | None = None
    ) -> None:
        """Persist that the schema now sits at `to_version`.

        `from_version` names the step being completed in a failure report.
        """
        await self._persist(
            MigrationRecord(current_version=to_version, target_version=to_version),
            from_version,
            to_version,
        )
        _logger.info("Completed migration steps for %s", to_version)

    async def _persist(
        self,
        record: MigrationRecord,
        from_version: Version | None,
        to_version: Version,
    ) -> None:
        try:
            await self._store.save(record)
        except _STEP_ERRORS as e:
            _logger.error("Error updating migration table to %s: %s", record, e)
            raise MigrationFailedError(from_version, to_version) from e

    async def _install(self) -> MigrationOutcome:
        build = self._build_version
        _logger.info("New installation detected, creating tables at %s", build)
        await self.start_migration(None, build)

        applied = []
        try:
            for repo in self._repositories:
                await repo.create_table()
                _logger.debug("%s table created", repo.table_name)
            for step in self._table.seeding():
                _logger.info("Running seed step %s", step)
                await step.action(self._context)
                applied.append(step.name)
        except _STEP_ERRORS as e:
            _logger.error("New installation at %s failed: %s", build, e)
            raise MigrationFailedError(None, build) from e

        await self.complete_migration(build, from_version=None)
        return MigrationOutcome(
            path=MigrationPath.INSTALL,
            applied=applied,
            record=MigrationRecord(current_version=build, target_version=build),
        )

    async def _upgrade(self, record: MigrationRecord) -> MigrationOutcome:
        build = self._build_version
        _logger.info("Migrating from %s to %s", record.current_version or ZERO_VERSION, build)
        in_flight = MigrationRecord(current_version=record.current_version, target_version=build)
        await self._persist(in_flight, record.current_version, build)

        target = in_flight.target_version
        current = in_flight.current_version
        pending = self._table.pending(current, target)
        if pending is None:
            _logger.warning(
                "Unknown target version %s (latest step is %s), skipping migration",
                target, self._table.latest,
            )
            return MigrationOutcome(path=MigrationPath.UNKNOWN_TARGET, record=in_flight)

        applied = []
        for step in pending:
            # Never record a version below what is already persisted
            start = step.from_version if current is None else max(step.from_version, current)
            await self.start_migration(start, step.to_version)
            _logger.info("Running step %s", step)
            try:
                await step.action(self._context)
            except _STEP_ERRORS as e:
                _logger.error("Step %s failed: %s", step, e)
                raise MigrationFailedError(start, step.to_version) from e
            await self.complete_migration(step.to_version, from_version=start)
            current = step.to_version
            applied.append(step.name)

        return MigrationOutcome(
            path=MigrationPath.UPGRADE,
            applied=applied,
            record=MigrationRecord(current_version=current, target_version=current),
        )

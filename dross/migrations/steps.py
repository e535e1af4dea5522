"""Step Table — the ordered chain of schema versions and the work between them.

Adding a version means appending a `Step` to `STEPS`. Every action must be
safe to run again: a crash between a step's start and completion writes
leaves its effects unknown, and the next run repeats it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Sequence

import aiosqlite
from packaging.version import Version

from dross.migrations.record import ZERO_VERSION, parse_version
from dross.repository.faery import FaeryRepository
from dross.repository.player import Player, PlayerRepository

_logger = logging.getLogger(__name__)


@dataclass
class StepContext:
    """Everything a step action may touch."""

    db_path: str
    players: PlayerRepository
    faeries: FaeryRepository
    admin_email: str


StepAction = Callable[[StepContext], Awaitable[None]]


@dataclass(frozen=True)
class Step:
    """One version transition and the action that performs it."""

    from_version: Version
    to_version: Version
    name: str
    action: StepAction
    seed: bool = False  # also run on new installs, after table creation

    def __post_init__(self) -> None:
        object.__setattr__(self, "from_version", parse_version(self.from_version))
        object.__setattr__(self, "to_version", parse_version(self.to_version))
        if self.to_version <= self.from_version:
            raise ValueError(
                f"Step {self.name} does not advance: {self.from_version} -> {self.to_version}"
            )

    def __str__(self) -> str:
        return f"{self.name} ({self.from_version} -> {self.to_version})"


class StepTable:
    """A validated, linear chain of steps."""

    def __init__(self, steps: Sequence[Step]):
        if not steps:
            raise ValueError("Step table is empty")
        for prev, nxt in zip(steps, steps[1:]):
            if prev.to_version != nxt.from_version:
                raise ValueError(
                    f"Step chain is broken between {prev} and {nxt}"
                )
        self._steps = tuple(steps)

    @property
    def latest(self) -> Version:
        return self._steps[-1].to_version

    def knows(self, version: Version) -> bool:
        return any(step.to_version == version for step in self._steps)

    def pending(self, current: Version | None, target: Version) -> list[Step] | None:
        """Steps still needed to go from `current` to `target`.

        Returns None when `target` is not a version in the table.
        """
        if not self.knows(target):
            return None
        floor = current if current is not None else ZERO_VERSION
        return [
            step for step in self._steps
            if floor < step.to_version <= target
        ]

    def seeding(self) -> list[Step]:
        return [step for step in self._steps if step.seed]

    def __iter__(self):
        return iter(self._steps)


# ── Actions ──────────────────────────────────────────────────────────────────


async def _columns(db: aiosqlite.Connection, table: str) -> set[str]:
    cursor = await db.execute(f"PRAGMA table_info({table})")
    rows = await cursor.fetchall()
    return {row[1] for row in rows}


async def create_base_tables(ctx: StepContext) -> None:
    """0.2.1 schema: faeries still carried their own auth token."""
    async with aiosqlite.connect(ctx.db_path) as db:
        await db.execute("""
            CREATE TABLE IF NOT EXISTS faeries (
                id INTEGER PRIMARY KEY,
                name VARCHAR(255) NOT NULL,
                is_admin BOOLEAN NOT NULL,
                email VARCHAR(255) NOT NULL,
                auth_token VARCHAR(255),
                dross INTEGER
            )
        """)
        await db.commit()


async def drop_faery_auth_token(ctx: StepContext) -> None:
    """Auth moved to players; drop the column if an earlier run has not."""
    async with aiosqlite.connect(ctx.db_path) as db:
        if "auth_token" not in await _columns(db, "faeries"):
            _logger.info("faeries.auth_token already dropped")
            return
        await db.execute("ALTER TABLE faeries DROP COLUMN auth_token")
        await db.commit()


async def bootstrap_admin(ctx: StepContext) -> None:
    """Ensure players exist as a table and hold at least one administrator."""
    await ctx.players.create_table()
    admin_count = await ctx.players.admin_count()
    if admin_count != 0:
        _logger.info("Found %d admin player(s), skipping seed", admin_count)
        return
    _logger.info("Inserting admin user %s", ctx.admin_email)
    await ctx.players.create(Player(
        first_name="Admin",
        last_name="User",
        auth_email=ctx.admin_email,
        mailing_address="Address Example",
        is_admin=True,
    ))


STEPS: tuple[Step, ...] = (
    Step("0.0.0", "0.2.1", "create_base_tables", create_base_tables),
    Step("0.2.1", "0.2.2", "drop_faery_auth_token", drop_faery_auth_token),
    Step("0.2.2", "0.2.3", "bootstrap_admin", bootstrap_admin, seed=True),
)

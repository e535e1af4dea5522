"""Tests for the step table and the built-in step actions."""

import aiosqlite
import pytest
from packaging.version import Version

from dross.migrations.steps import (
    STEPS,
    Step,
    StepTable,
    bootstrap_admin,
    create_base_tables,
    drop_faery_auth_token,
)
from dross.repository.player import Player


async def _noop(ctx):
    pass


async def _faery_columns(db_path: str) -> set[str]:
    async with aiosqlite.connect(db_path) as db:
        cursor = await db.execute("PRAGMA table_info(faeries)")
        return {row[1] for row in await cursor.fetchall()}


# ── StepTable ────────────────────────────────────────────────────

def test_builtin_chain_is_linear():
    table = StepTable(STEPS)
    assert table.latest == Version("0.2.3")
    assert [str(s.from_version) for s in table] == ["0.0.0", "0.2.1", "0.2.2"]


def test_broken_chain_rejected():
    with pytest.raises(ValueError):
        StepTable([
            Step("0.0.0", "0.1.0", "a", _noop),
            Step("0.2.0", "0.3.0", "b", _noop),
        ])


def test_empty_table_rejected():
    with pytest.raises(ValueError):
        StepTable([])


def test_step_must_advance():
    with pytest.raises(ValueError):
        Step("0.2.2", "0.2.2", "stuck", _noop)


def test_pending_from_absent_is_whole_chain():
    table = StepTable(STEPS)
    pending = table.pending(None, Version("0.2.3"))
    assert [s.name for s in pending] == [
        "create_base_tables", "drop_faery_auth_token", "bootstrap_admin",
    ]


def test_pending_skips_completed_steps():
    table = StepTable(STEPS)
    pending = table.pending(Version("0.2.1"), Version("0.2.3"))
    assert [s.name for s in pending] == ["drop_faery_auth_token", "bootstrap_admin"]


def test_pending_stops_at_target():
    table = StepTable(STEPS)
    pending = table.pending(Version("0.0.0"), Version("0.2.2"))
    assert [s.name for s in pending] == ["create_base_tables", "drop_faery_auth_token"]


def test_pending_when_current_is_target():
    table = StepTable(STEPS)
    assert table.pending(Version("0.2.3"), Version("0.2.3")) == []


def test_pending_unknown_target_is_none():
    table = StepTable(STEPS)
    assert table.pending(Version("0.2.3"), Version("0.9.0")) is None


def test_seeding_steps():
    table = StepTable(STEPS)
    assert [s.name for s in table.seeding()] == ["bootstrap_admin"]


# ── Actions ──────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_create_base_tables_has_legacy_auth_token(context, db_path):
    await create_base_tables(context)
    await create_base_tables(context)
    assert "auth_token" in await _faery_columns(db_path)


@pytest.mark.asyncio
async def test_drop_auth_token_runs_twice(context, db_path):
    await create_base_tables(context)
    await drop_faery_auth_token(context)
    await drop_faery_auth_token(context)

    columns = await _faery_columns(db_path)
    assert "auth_token" not in columns
    assert {"id", "name", "is_admin", "email", "dross"} <= columns


@pytest.mark.asyncio
async def test_drop_auth_token_on_current_schema(context, faeries, db_path):
    await faeries.create_table()
    await drop_faery_auth_token(context)
    assert "auth_token" not in await _faery_columns(db_path)


@pytest.mark.asyncio
async def test_bootstrap_admin_exactly_once(context, players):
    await bootstrap_admin(context)
    await bootstrap_admin(context)

    assert await players.admin_count() == 1
    admin = (await players.get_all())[0]
    assert admin.auth_email == "admin@dross.test"
    assert admin.first_name == "Admin"
    assert admin.is_admin


@pytest.mark.asyncio
async def test_bootstrap_admin_skips_when_admin_exists(context, players):
    await players.create_table()
    await players.create(Player(
        first_name="Existing",
        last_name="Admin",
        auth_email="boss@dross.test",
        mailing_address="1 Main St",
        is_admin=True,
    ))

    await bootstrap_admin(context)

    everyone = await players.get_all()
    assert len(everyone) == 1
    assert everyone[0].auth_email == "boss@dross.test"


@pytest.mark.asyncio
async def test_bootstrap_admin_ignores_regular_players(context, players):
    await players.create_table()
    await players.create(Player(
        first_name="Reg",
        last_name="Ular",
        auth_email="reg@dross.test",
        mailing_address="2 Side St",
    ))

    await bootstrap_admin(context)

    assert await players.admin_count() == 1
    assert len(await players.get_all()) == 2

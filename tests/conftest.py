"""Shared test fixtures — temp-file SQLite databases and a manager factory."""

from __future__ import annotations

import os
import tempfile
from dataclasses import replace

import pytest

from dross.migrations.manager import MigrationManager
from dross.migrations.steps import STEPS, Step, StepContext
from dross.migrations.store import MigrationStore
from dross.repository.faery import FaeryRepository
from dross.repository.player import PlayerRepository

BUILD = "0.2.3"


@pytest.fixture
def db_path():
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    yield path
    os.unlink(path)


@pytest.fixture
def players(db_path):
    return PlayerRepository(db_path)


@pytest.fixture
def faeries(db_path):
    return FaeryRepository(db_path)


@pytest.fixture
def store(db_path):
    return MigrationStore(db_path, BUILD)


@pytest.fixture
def context(db_path, players, faeries):
    return StepContext(
        db_path=db_path,
        players=players,
        faeries=faeries,
        admin_email="admin@dross.test",
    )


def _wrap_steps(log: list[str], steps=STEPS) -> list[Step]:
    """Wrap each step's action so its name is appended to `log` when it runs."""
    wrapped = []
    for step in steps:
        async def _action(ctx, _step=step):
            log.append(_step.name)
            await _step.action(ctx)
        wrapped.append(replace(step, action=_action))
    return wrapped


@pytest.fixture
def recording_steps():
    return _wrap_steps


@pytest.fixture
def make_manager(store, players, faeries, context):
    def _factory(
        build_version: str = BUILD,
        steps=STEPS,
        install_shortcut: bool = True,
    ) -> MigrationManager:
        return MigrationManager(
            store=store,
            repositories=[players, faeries],
            context=context,
            build_version=build_version,
            steps=steps,
            install_shortcut=install_shortcut,
        )
    return _factory

"""Custom exception hierarchy for dross."""

from __future__ import annotations

from packaging.version import Version


class DrossError(Exception):
    """Base for all Dross Manager errors."""


class RepositoryError(DrossError):
    """A repository operation failed."""


class NotFoundError(RepositoryError):
    """No record with the given key exists."""


class AlreadyExistsError(RepositoryError):
    """A record with the given key already exists."""


class MigrationStoreError(DrossError):
    """The migration record could not be persisted."""


class MigrationFailedError(DrossError):
    """A migration step or its bracketing write did not complete."""

    def __init__(
        self, from_version: str | Version | None, to_version: str | Version
    ) -> None:
        # An absent starting point is reported as 0.0.0
        self.from_version = Version(str(from_version) if from_version is not None else "0.0.0")
        self.to_version = Version(str(to_version))
        super().__init__(f"Migration {self.from_version} -> {self.to_version} failed")

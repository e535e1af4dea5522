"""The migration record — where the schema is, and where it is heading."""

from __future__ import annotations

from enum import Enum

from packaging.version import Version
from pydantic import BaseModel, ConfigDict, Field, field_validator

ZERO_VERSION = Version("0.0.0")


def parse_version(value: str | Version) -> Version:
    """Parse a schema version.

    PEP 440 orders a local segment (`0.2.3+build`) above its release, where
    semver ignores build metadata. Schema versions never carry one.
    """
    version = value if isinstance(value, Version) else Version(value)
    if version.local is not None:
        raise ValueError(f"Schema version {value} must not carry build metadata")
    return version


class MigrationRecord(BaseModel):
    """Singleton state row of the migration table.

    `current_version` is None until the first migration completes.
    Persisted as strings; `from_row()` and `to_row()` convert at the
    storage boundary.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    current_version: Version | None = None
    target_version: Version

    @field_validator("current_version", "target_version", mode="before")
    @classmethod
    def parse_versions(cls, value):
        if value is None:
            return None
        return parse_version(value)

    @classmethod
    def absent(cls, build_version: str | Version) -> MigrationRecord:
        """State used when no record has ever been written."""
        return cls(current_version=None, target_version=build_version)

    @classmethod
    def from_row(
        cls,
        current_version: str | None,
        target_version: str | None,
        build_version: str | Version,
    ) -> MigrationRecord:
        return cls(
            current_version=current_version or None,
            target_version=target_version or build_version,
        )

    def to_row(self) -> tuple[str | None, str]:
        current = str(self.current_version) if self.current_version is not None else None
        return current, str(self.target_version)

    def satisfies(self, version: Version) -> bool:
        """True when the schema is already at or beyond `version`."""
        return self.current_version is not None and self.current_version >= version

    @property
    def in_progress(self) -> bool:
        return self.current_version is None or self.current_version < self.target_version

    def __str__(self) -> str:
        return f"({self.current_version or 'absent'}, {self.target_version})"


class MigrationPath(str, Enum):
    NONE = "none"
    INSTALL = "install"
    UPGRADE = "upgrade"
    UNKNOWN_TARGET = "unknown_target"


class MigrationOutcome(BaseModel):
    """What a `migrate()` run did."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    path: MigrationPath
    applied: list[str] = Field(default_factory=list)  # step names, in order
    record: MigrationRecord

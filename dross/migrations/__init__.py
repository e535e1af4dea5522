"""Schema migration engine for dross.

Advances the persisted schema from whatever version it is at toward the
running build's version, using a fixed chain of idempotent steps. Every
step is bracketed by writes to a singleton migration record so a crashed
run resumes where it stopped.
"""

from dross.migrations.manager import MigrationManager
from dross.migrations.record import MigrationOutcome, MigrationPath, MigrationRecord
from dross.migrations.steps import STEPS, Step, StepContext, StepTable
from dross.migrations.store import MigrationStore

__all__ = [
    "MigrationManager",
    "MigrationOutcome",
    "MigrationPath",
    "MigrationRecord",
    "MigrationStore",
    "STEPS",
    "Step",
    "StepContext",
    "StepTable",
]

"""
Data model for migration and seed scripts.

This is the single source of truth for:
- the two script kinds and the ledger table each one owns
- the markers that split a script file into UP and DOWN sections
- the Script and LedgerRecord types passed between store, ledger and engine
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

try:
    from pydantic import BaseModel, Field
except ImportError:
    raise ImportError("pydantic is required. Install with: pip install pydantic")


# =============================================================================
# SCRIPT FORMAT
# =============================================================================

SCRIPT_EXTENSION = ".sql"
UP_MARKER = "-- +migrator UP"
DOWN_MARKER = "-- +migrator DOWN"
STATEMENT_BEGIN = "-- +migrator statement BEGIN"
STATEMENT_END = "-- +migrator statement END"


# =============================================================================
# KIND
# =============================================================================


class Kind(str, Enum):
    """Which family of scripts an invocation operates on."""

    MIGRATION = "migration"
    SEED = "seed"

    @property
    def table(self) -> str:
        """Ledger table recording applied versions of this kind."""
        return LEDGER_TABLES[self]

    @property
    def directory(self) -> str:
        """Name of the subdirectory under ``db/<driver>/`` holding the scripts."""
        return self.value

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def values(cls) -> list[str]:
        return [k.value for k in cls]


LEDGER_TABLES: dict[Kind, str] = {
    Kind.MIGRATION: "node_migrator_migrations",
    Kind.SEED: "node_migrator_seeds",
}


# =============================================================================
# SCRIPT MODEL
# =============================================================================


class Script(BaseModel):
    """One versioned ``.sql`` file.

    Example:
        db/postgres/migration/20240101000000_init.sql
        -> version "20240101000000", name "init"
    """

    version: str = Field(..., description="Filename prefix before the first underscore")
    name: str = Field(default="", description="Descriptive remainder of the filename")
    path: Path = Field(..., description="Location of the file on disk")
    up_body: str = Field(default="", description="SQL between the UP and DOWN markers")
    down_body: str = Field(default="", description="SQL after the DOWN marker")

    @property
    def filename(self) -> str:
        return self.path.name


# =============================================================================
# LEDGER MODEL
# =============================================================================


@dataclass
class LedgerRecord:
    """One applied version as stored in the ledger table."""

    id: int
    version: str
    created_at: datetime | None = None

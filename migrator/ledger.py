"""
Ledger of applied script versions.

One table per kind (``node_migrator_migrations`` / ``node_migrator_seeds``)
with one row per applied version:

    id          surrogate key
    version     script version
    created_at  when it was applied, orders rollbacks
"""

from __future__ import annotations

from migrator.connection import Database
from migrator.schema import Kind, LedgerRecord


class Ledger:
    """Applied-version bookkeeping for one kind of script."""

    def __init__(self, database: Database, kind: Kind) -> None:
        self.database = database
        self.kind = kind
        self.table = kind.table

    def ensure_table(self) -> None:
        """Create the ledger table if it doesn't exist."""
        for sql in self.database.dialect.create_statements(self.table):
            self.database.query(sql)

    def applied_versions(self) -> set[str]:
        result = self.database.query(f"SELECT version FROM {self.table}")
        return {row[0] for row in result.rows}

    def records(self) -> list[LedgerRecord]:
        """All applied versions, oldest first."""
        result = self.database.query(
            f"SELECT id, version, created_at FROM {self.table} ORDER BY created_at, id"
        )
        return [LedgerRecord(id=row[0], version=row[1], created_at=row[2]) for row in result.rows]

    def most_recent(self) -> str | None:
        """Version applied last, or None when nothing is applied.

        Rows inserted within the same clock tick are ordered by id.
        """
        result = self.database.query(
            f"SELECT version FROM {self.table} ORDER BY created_at DESC, id DESC LIMIT 1"
        )
        return result.rows[0][0] if result.rows else None

    def record(self, version: str) -> None:
        p = self.database.placeholder
        self.database.query(f"INSERT INTO {self.table} (version) VALUES ({p})", [version])

    def unrecord(self, version: str) -> None:
        p = self.database.placeholder
        self.database.query(f"DELETE FROM {self.table} WHERE version = {p}", [version])

    def clear(self) -> None:
        self.database.query(f"DELETE FROM {self.table}")

    def drop(self) -> None:
        """Drop the ledger table entirely. Safe when it is already gone."""
        for sql in self.database.dialect.drop_statements(self.table):
            self.database.query(sql)

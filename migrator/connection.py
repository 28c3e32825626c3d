"""
Database executor used by the ledger and the engine.

Wraps a DB-API connection behind a single ``query(sql, params)`` call that
returns rows and a row count, and knows the SQL dialect of its driver:

- postgres: psycopg2, ``%s`` placeholders, BIGSERIAL ids
- duckdb:   duckdb, ``?`` placeholders, sequence-backed ids

Every query runs in autocommit mode, so each one commits on its own.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Sequence

from migrator.config import ConnectionSettings
from migrator.errors import ExecutionError, InvalidArgumentError


# =============================================================================
# DIALECTS
# =============================================================================


@dataclass(frozen=True)
class Dialect:
    """Driver-specific SQL used for ledger bookkeeping."""

    name: str
    placeholder: str
    create_ledger: tuple[str, ...]
    drop_ledger: tuple[str, ...]

    def create_statements(self, table: str) -> list[str]:
        return [sql.format(table=table) for sql in self.create_ledger]

    def drop_statements(self, table: str) -> list[str]:
        return [sql.format(table=table) for sql in self.drop_ledger]


POSTGRES = Dialect(
    name="postgres",
    placeholder="%s",
    create_ledger=(
        """
        CREATE TABLE IF NOT EXISTS {table} (
            id BIGSERIAL PRIMARY KEY,
            version VARCHAR(255) NOT NULL,
            created_at TIMESTAMP NOT NULL DEFAULT NOW()
        )
        """,
    ),
    drop_ledger=("DROP TABLE IF EXISTS {table}",),
)

DUCKDB = Dialect(
    name="duckdb",
    placeholder="?",
    create_ledger=(
        "CREATE SEQUENCE IF NOT EXISTS {table}_id_seq",
        """
        CREATE TABLE IF NOT EXISTS {table} (
            id BIGINT PRIMARY KEY DEFAULT nextval('{table}_id_seq'),
            version VARCHAR NOT NULL,
            created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
        """,
    ),
    # The table holds the sequence as its default, so it has to go first
    drop_ledger=(
        "DROP TABLE IF EXISTS {table}",
        "DROP SEQUENCE IF EXISTS {table}_id_seq",
    ),
)

DIALECTS: dict[str, Dialect] = {d.name: d for d in (POSTGRES, DUCKDB)}


# =============================================================================
# EXECUTOR
# =============================================================================


@dataclass
class QueryResult:
    rows: list[tuple] = field(default_factory=list)
    row_count: int = 0


class Database:
    """Serialized query execution over one DB-API connection.

    Args:
        conn: Open DB-API 2.0 connection (psycopg2 or duckdb)
        dialect: SQL dialect of the connection's driver
        driver_errors: Exception types the driver raises for failed queries
    """

    def __init__(
        self,
        conn: Any,
        dialect: Dialect,
        driver_errors: tuple[type[BaseException], ...] = (Exception,),
    ) -> None:
        self._conn = conn
        self.dialect = dialect
        self._driver_errors = driver_errors

    @property
    def placeholder(self) -> str:
        return self.dialect.placeholder

    def query(self, sql: str, params: Sequence[Any] | None = None) -> QueryResult:
        """Run one query (or a script of several statements).

        Args:
            sql: SQL text, parameters written as ``self.placeholder``
            params: Positional parameter values

        Returns:
            QueryResult with fetched rows (empty for statements without a
            result set) and the affected/returned row count

        Raises:
            ExecutionError: If the driver rejects the query
        """
        cursor = self._conn.cursor()
        try:
            if params is None:
                cursor.execute(sql)
            else:
                cursor.execute(sql, list(params))
            rows = cursor.fetchall() if cursor.description is not None else []
            rowcount = getattr(cursor, "rowcount", -1)
            row_count = rowcount if rowcount is not None and rowcount >= 0 else len(rows)
        except self._driver_errors as e:
            raise ExecutionError(str(e).strip()) from e
        finally:
            cursor.close()
        return QueryResult(rows=[tuple(r) for r in rows], row_count=row_count)

    def close(self) -> None:
        self._conn.close()


# =============================================================================
# CONNECTING
# =============================================================================


def connect(driver: str, settings: ConnectionSettings) -> Database:
    """Open a database for ``driver`` using ``settings``.

    Raises:
        InvalidArgumentError: If the driver is unknown or not installed
        ExecutionError: If the connection cannot be established
    """
    if driver == POSTGRES.name:
        return _connect_postgres(settings)
    if driver == DUCKDB.name:
        return _connect_duckdb(settings)
    raise InvalidArgumentError(
        f'Invalid driver "{driver}". Please use one of: {", ".join(DIALECTS)}.'
    )


def _connect_postgres(settings: ConnectionSettings) -> Database:
    try:
        import psycopg2
    except ImportError:
        raise InvalidArgumentError(
            "psycopg2 is required for the postgres driver. Install with: pip install psycopg2-binary"
        )

    try:
        conn = psycopg2.connect(
            host=settings.host,
            port=settings.port,
            user=settings.user,
            password=settings.password,
            dbname=settings.database,
        )
    except psycopg2.Error as e:
        raise ExecutionError(
            f"Could not connect to postgres at {settings.host}:{settings.port}: {str(e).strip()}"
        ) from e
    conn.autocommit = True
    return Database(conn, POSTGRES, (psycopg2.Error,))


def _connect_duckdb(settings: ConnectionSettings) -> Database:
    try:
        import duckdb
    except ImportError:
        raise InvalidArgumentError("duckdb is required for the duckdb driver. Install with: pip install duckdb")

    try:
        conn = duckdb.connect(settings.duckdb_path)
    except duckdb.Error as e:
        raise ExecutionError(f"Could not open duckdb database {settings.duckdb_path}: {e}") from e
    return Database(conn, DUCKDB, (duckdb.Error,))

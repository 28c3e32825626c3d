"""
Migration engine: the up / down / reset / new actions.

Nothing is kept between invocations. Each action re-reads the applied set
from the ledger and the available set from the script directory, then
executes scripts one by one, updating the ledger after every script. A
failure stops the action; scripts already applied in the same run stay
applied and recorded.
"""

from __future__ import annotations

from pathlib import Path

from migrator.connection import Database
from migrator.errors import (
    ConnectionRequiredError,
    ExecutionError,
    IntegrityError,
    MissingScriptError,
    NoAppliedVersionError,
    ScriptNotFoundError,
    UnsupportedOperationError,
)
from migrator.ledger import Ledger
from migrator.schema import Kind, Script
from migrator.scripts import (
    create_script,
    find_script,
    has_statements,
    list_scripts,
    load_script,
    parse_version,
)
from migrator.util import print_info, print_warning


class MigrationEngine:
    """Runs one action for one kind of script.

    Args:
        database: Open database, may be None when only ``new`` is used
        directory: Script directory for this kind (``db/<driver>/<kind>``)
        kind: Migrations or seeds
    """

    def __init__(self, database: Database | None, directory: Path, kind: Kind) -> None:
        self.database = database
        self.directory = directory
        self.kind = kind

    # =========================================================================
    # ACTIONS
    # =========================================================================

    def up(self) -> list[str]:
        """Apply every script whose version is not in the ledger, oldest first.

        Returns:
            Versions applied by this run, in order
        """
        ledger = self._open_ledger()
        print_info(f"Pushing database {self.kind.value}s...")

        applied = ledger.applied_versions()
        pending = [f for f in list_scripts(self.directory) if parse_version(f) not in applied]

        pushed = []
        for filename in pending:
            script = load_script(self.directory / filename)
            self._execute(script, "UP", script.up_body)
            ledger.record(script.version)
            pushed.append(script.version)
            print_info(f"✓ {self.kind.label} pushed: {filename}")

        print_info(f"All {self.kind.value}s pushed successfully!")
        return pushed

    def down(self) -> str:
        """Revert the most recently applied migration, and only that one.

        Returns:
            The reverted version

        Raises:
            UnsupportedOperationError: For seeds
            NoAppliedVersionError: If the ledger is empty
            ScriptNotFoundError: If the script of the last version is gone
        """
        ledger = self._open_ledger()
        if self.kind is Kind.SEED:
            raise UnsupportedOperationError("Seeder cannot be reverted. use 'reset' instead.")

        print_info(f"Rolling back database {self.kind.value}s...")

        version = ledger.most_recent()
        if version is None:
            raise NoAppliedVersionError(ledger.table)

        path = find_script(self.directory, version)
        if path is None:
            raise ScriptNotFoundError(version)

        script = load_script(path)
        self._execute(script, "DOWN", script.down_body)
        ledger.unrecord(version)
        print_info(f"✓ {self.kind.label} reverted: {script.filename}")
        return version

    def reset(self) -> list[str]:
        """Revert everything and drop the ledger table.

        Seeds only drop their ledger table. Migrations first check that every
        applied version has a script, then run the DOWN sections newest first.

        Returns:
            Versions reverted, newest first (empty for seeds)

        Raises:
            MissingScriptError: If an applied version has no script; nothing
                is executed and the ledger is left as it was
        """
        ledger = self._open_ledger()
        print_info(f"Reverting database {self.kind.value}s...")

        if self.kind is Kind.SEED:
            ledger.drop()
            print_info("✓ Seed cleaned")
            return []

        applied = ledger.applied_versions()
        files = [
            f for f in list_scripts(self.directory, descending=True)
            if parse_version(f) in applied
        ]

        if len(files) != len(applied):
            available = {parse_version(f) for f in files}
            missing = sorted(applied - available)
            if missing:
                raise MissingScriptError(missing)
            raise IntegrityError(f"Duplicate script versions in {self.directory}")

        scripts = [load_script(self.directory / f) for f in files]

        reverted = []
        for script in scripts:
            self._execute(script, "DOWN", script.down_body)
            reverted.append(script.version)
            print_info(f"✓ {self.kind.label} {script.filename} reverted")

        ledger.clear()
        ledger.drop()
        print_info(f"{self.kind.label}s rolled back")
        return reverted

    def new(self, name: str) -> Path:
        """Write an empty script named ``<timestamp>_<name>.sql``."""
        path = create_script(self.directory, name)
        print_info(f"✓ {self.kind.label} created: {path.name}")
        return path

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _open_ledger(self) -> Ledger:
        if self.database is None:
            raise ConnectionRequiredError()
        ledger = Ledger(self.database, self.kind)
        ledger.ensure_table()
        return ledger

    def _execute(self, script: Script, section: str, sql: str) -> None:
        if not has_statements(sql):
            print_warning(f"{script.filename} has no {section} statements")
            return
        try:
            self.database.query(sql)
        except ExecutionError as e:
            raise ExecutionError(f"{script.filename}: {e}") from e

"""
Error types raised by the migrator.

Every failure that should end an invocation with exit code 1 derives from
MigratorError. The CLI catches them once, prints them with the action prefix
and converts them into the process status.

Hierarchy:
    MigratorError
    ├── InvalidArgumentError       bad --type / --action / --driver / --name
    │   └── InvalidNameError       empty script name for `new`
    ├── ConnectionRequiredError    action needs a database, none was opened
    ├── UnsupportedOperationError  e.g. `down` on seeds
    ├── IntegrityError             ledger and script directory disagree
    │   ├── NoAppliedVersionError
    │   ├── ScriptNotFoundError
    │   └── MissingScriptError
    ├── ExecutionError             the database rejected a query
    └── FileSystemError            script directory / file not readable or writable
"""

from __future__ import annotations


class MigratorError(Exception):
    """Base class for all migrator failures."""


# =============================================================================
# ARGUMENT ERRORS
# =============================================================================


class InvalidArgumentError(MigratorError):
    """A command line value or setting is not acceptable."""


class InvalidNameError(InvalidArgumentError):
    """A new script was requested without a name."""

    def __init__(self, message: str = "name argument required") -> None:
        super().__init__(message)


# =============================================================================
# STATE ERRORS
# =============================================================================


class ConnectionRequiredError(MigratorError):
    def __init__(self, message: str = "Database connection is required") -> None:
        super().__init__(message)


class UnsupportedOperationError(MigratorError):
    pass


class IntegrityError(MigratorError):
    """The ledger references versions the script directory cannot satisfy."""


class NoAppliedVersionError(IntegrityError):
    def __init__(self, table: str) -> None:
        self.table = table
        super().__init__(f"No applied version found in {table}")


class ScriptNotFoundError(IntegrityError):
    def __init__(self, version: str) -> None:
        self.version = version
        super().__init__(f"Migration script version {version} not found")


class MissingScriptError(IntegrityError):
    def __init__(self, versions: list[str]) -> None:
        self.versions = versions
        super().__init__(f"Missing version: {', '.join(versions)}")


# =============================================================================
# EXECUTION ERRORS
# =============================================================================


class ExecutionError(MigratorError):
    """A query failed inside the database driver.

    The driver exception is kept as ``__cause__``.
    """


class FileSystemError(MigratorError):
    """Reading or writing script files failed."""

"""
migrator - apply, revert and scaffold versioned SQL scripts.

Usage:
    migrator --action=up
    migrator --action=down
    migrator --action=reset --type=seed
    migrator --action=new --name=create_users
"""

from migrator.engine import MigrationEngine
from migrator.ledger import Ledger
from migrator.schema import Kind, LedgerRecord, Script
from migrator.version import __version__

__all__ = [
    "__version__",
    "Kind",
    "Ledger",
    "LedgerRecord",
    "MigrationEngine",
    "Script",
]

"""
Connection settings from the process environment.

A ``.env`` file in the working directory is loaded first; variables already
set in the environment take precedence over it.

    PG_HOST, PG_PORT, PG_USER, PG_PASS, PG_DB   postgres driver
    DUCKDB_PATH                                 duckdb driver
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from migrator.errors import InvalidArgumentError

DEFAULT_PG_PORT = 5432
DEFAULT_DUCKDB_PATH = "migrator.duckdb"


class ConnectionSettings(BaseModel):
    host: str | None = Field(default=None, description="PG_HOST")
    port: int = Field(default=DEFAULT_PG_PORT, description="PG_PORT")
    user: str | None = Field(default=None, description="PG_USER")
    password: str | None = Field(default=None, description="PG_PASS")
    database: str | None = Field(default=None, description="PG_DB")
    duckdb_path: str = Field(default=DEFAULT_DUCKDB_PATH, description="DUCKDB_PATH")


ENV_FIELDS = {
    "PG_HOST": "host",
    "PG_PORT": "port",
    "PG_USER": "user",
    "PG_PASS": "password",
    "PG_DB": "database",
    "DUCKDB_PATH": "duckdb_path",
}


def settings_from_env(environ: Mapping[str, str]) -> ConnectionSettings:
    """Build settings from environment variables, ignoring empty values.

    Raises:
        InvalidArgumentError: If a value has the wrong type (e.g. PG_PORT=abc)
    """
    values = {field: environ[var] for var, field in ENV_FIELDS.items() if environ.get(var)}
    try:
        return ConnectionSettings(**values)
    except ValidationError as e:
        fields = ", ".join(
            var for var, field in ENV_FIELDS.items()
            if any(err["loc"] and err["loc"][0] == field for err in e.errors())
        )
        raise InvalidArgumentError(f"Invalid connection settings: {fields}") from e


def load_settings(dotenv_path: Path | None = None) -> ConnectionSettings:
    """Load ``.env`` (if present) into the environment and read the settings."""
    load_dotenv(dotenv_path or Path.cwd() / ".env", override=False)
    return settings_from_env(os.environ)

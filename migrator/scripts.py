"""
Script store: versioned ``.sql`` files in ``db/<driver>/<kind>/``.

Parses files of the form:

    -- +migrator UP
    CREATE TABLE t (id int);

    -- +migrator DOWN
    DROP TABLE t;

The markers are matched as plain substrings. Everything before the UP marker
is discarded. Statement BEGIN/END comments written by `new` carry no meaning.
"""

from __future__ import annotations

from datetime import datetime, timezone
from importlib.resources import files
from pathlib import Path

from migrator.errors import FileSystemError, InvalidNameError
from migrator.schema import DOWN_MARKER, SCRIPT_EXTENSION, UP_MARKER, Kind, Script

VERSION_FORMAT = "%Y%m%d%H%M%S"
TEMPLATE_NAME = "script.sql"


def scripts_dir(root: Path, driver: str, kind: Kind) -> Path:
    """Directory holding the scripts of ``kind`` for ``driver`` under ``root``."""
    return root / "db" / driver / kind.directory


# =============================================================================
# LISTING
# =============================================================================


def list_scripts(directory: Path, descending: bool = False) -> list[str]:
    """List script filenames in a directory.

    Args:
        directory: Directory to scan
        descending: Newest first instead of oldest first

    Returns:
        Filenames ending in ``.sql``, sorted by full filename

    Raises:
        FileSystemError: If the directory cannot be read
    """
    try:
        names = [p.name for p in directory.iterdir() if p.name.endswith(SCRIPT_EXTENSION)]
    except OSError as e:
        raise FileSystemError(f"Cannot read scripts directory {directory}: {e}") from e
    return sorted(names, reverse=descending)


def parse_version(filename: str) -> str:
    """Version of a script: everything before the first underscore."""
    return filename.split("_", 1)[0]


def parse_name(filename: str) -> str:
    stem = filename[: -len(SCRIPT_EXTENSION)] if filename.endswith(SCRIPT_EXTENSION) else filename
    _, _, name = stem.partition("_")
    return name


def find_script(directory: Path, version: str) -> Path | None:
    """Return the script file for ``version``, or None if it is not on disk."""
    for filename in list_scripts(directory):
        if filename.startswith(f"{version}_"):
            return directory / filename
    return None


# =============================================================================
# SECTION PARSING
# =============================================================================


def extract_up(contents: str) -> str:
    """SQL between the UP marker and the DOWN marker (or end of file)."""
    _, found, rest = contents.partition(UP_MARKER)
    if not found:
        return ""
    return rest.partition(DOWN_MARKER)[0]


def extract_down(contents: str) -> str:
    """SQL after the DOWN marker, up to an UP marker if one follows it."""
    _, found, rest = contents.partition(DOWN_MARKER)
    if not found:
        return ""
    return rest.partition(UP_MARKER)[0]


def has_statements(sql: str) -> bool:
    """False when ``sql`` holds nothing but blank lines and ``--`` comments."""
    for line in sql.splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith("--"):
            return True
    return False


def load_script(path: Path) -> Script:
    """Read and parse one script file.

    Raises:
        FileSystemError: If the file cannot be read
    """
    try:
        contents = path.read_text(encoding="utf-8")
    except OSError as e:
        raise FileSystemError(f"Cannot read script {path}: {e}") from e

    return Script(
        version=parse_version(path.name),
        name=parse_name(path.name),
        path=path,
        up_body=extract_up(contents),
        down_body=extract_down(contents),
    )


# =============================================================================
# GENERATION
# =============================================================================


def generate_version(now: datetime | None = None) -> str:
    """Sortable version from wall-clock UTC time, e.g. ``20240115143022``."""
    now = now or datetime.now(timezone.utc)
    return now.strftime(VERSION_FORMAT)


def render_template() -> str:
    return (files(__package__) / "templates" / TEMPLATE_NAME).read_text(encoding="utf-8")


def create_script(directory: Path, name: str, version: str | None = None) -> Path:
    """Write a new empty script ``{version}_{name}.sql``.

    Args:
        directory: Target directory, created with parents if missing
        name: Descriptive part of the filename
        version: Explicit version, defaults to the current timestamp

    Returns:
        Path of the created file

    Raises:
        InvalidNameError: If ``name`` is empty or contains a path separator
        FileSystemError: If the file exists already or cannot be written
    """
    if not name:
        raise InvalidNameError()
    if "/" in name or "\\" in name:
        raise InvalidNameError(f"Invalid name {name!r}: path separators are not allowed")

    version = version or generate_version()
    path = directory / f"{version}_{name}{SCRIPT_EXTENSION}"

    try:
        directory.mkdir(parents=True, exist_ok=True)
        with path.open("x", encoding="utf-8") as f:
            f.write(render_template())
    except FileExistsError as e:
        raise FileSystemError(f"Script already exists: {path}") from e
    except OSError as e:
        raise FileSystemError(f"Cannot write script {path}: {e}") from e

    return path

from pathlib import Path

import pytest

from migrator.schema import DOWN_MARKER, UP_MARKER


def write_script(directory, version, name, up='', down=''):
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / '{}_{}.sql'.format(version, name)
    path.write_text('{}\n{}\n\n{}\n{}\n'.format(UP_MARKER, up, DOWN_MARKER, down), encoding='utf-8')
    return path


def memory_database():
    duckdb = pytest.importorskip('duckdb')
    from migrator.connection import DUCKDB, Database

    return Database(duckdb.connect(':memory:'), DUCKDB, (duckdb.Error,))


def table_names(database):
    return [row[0] for row in database.query('SHOW TABLES').rows]

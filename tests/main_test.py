"""Tests for the command line entry point."""

from __future__ import annotations

from pathlib import Path

import pytest

from migrator.main import cli, parse_arguments
from migrator.version import __version__
from tests.util import write_script


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Working directory with a DuckDB database configured via the environment."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DUCKDB_PATH", str(tmp_path / "test.duckdb"))
    return tmp_path


def applied_versions(workdir: Path, table: str = "node_migrator_migrations") -> set[str]:
    duckdb = pytest.importorskip("duckdb")
    conn = duckdb.connect(str(workdir / "test.duckdb"))
    try:
        return {row[0] for row in conn.execute(f"SELECT version FROM {table}").fetchall()}
    finally:
        conn.close()


def test_defaults():
    args = parse_arguments([])
    assert args.action == 'up'
    assert args.driver == 'postgres'
    assert args.type == 'migration'
    assert args.name == ''


def test_invalid_type_exits_one(workdir, capsys):
    assert cli(['--type=fixture']) == 1
    assert 'Invalid type' in capsys.readouterr().err
    assert not (workdir / 'test.duckdb').exists()
    assert not (workdir / 'db').exists()


def test_unknown_flags_are_ignored(workdir):
    assert cli(['--action=new', '--name=x', '--verbose=1']) == 0
    assert len(list((workdir / 'db' / 'postgres' / 'migration').iterdir())) == 1


def test_flag_without_value_exits_one(workdir, capsys):
    assert cli(['--type']) == 1
    assert 'expected one argument' in capsys.readouterr().err
    assert not (workdir / 'test.duckdb').exists()
    assert not (workdir / 'db').exists()


def test_version_flag_exits_zero(workdir, capsys):
    assert cli(['--version']) == 0
    assert __version__ in capsys.readouterr().out


def test_help_flag_exits_zero(workdir, capsys):
    assert cli(['--help']) == 0
    assert '--action' in capsys.readouterr().out


def test_invalid_action_exits_one(workdir, capsys):
    assert cli(['--action=sideways', '--driver=duckdb']) == 1
    assert 'Invalid action' in capsys.readouterr().err
    assert not (workdir / 'test.duckdb').exists()


def test_new_seed_without_name_creates_nothing(workdir, capsys):
    assert cli(['--action=new', '--type=seed']) == 1
    assert 'Invalid name' in capsys.readouterr().err
    assert not (workdir / 'db').exists()


def test_new_migration_without_name_fails(workdir, capsys):
    assert cli(['--action=new']) == 1
    assert 'Migration NEW failed: name argument required' in capsys.readouterr().err


def test_new_creates_script_under_driver_directory(workdir, capsys):
    assert cli(['--action=new', '--type=seed', '--name=users']) == 0

    created = list((workdir / 'db' / 'postgres' / 'seed').iterdir())
    assert len(created) == 1
    assert created[0].name.endswith('_users.sql')
    assert 'Seed created' in capsys.readouterr().out


def test_up_down_reset_round_trip(workdir, capsys):
    directory = workdir / 'db' / 'duckdb' / 'migration'
    write_script(directory, '20240101000000', 'init',
                 up='CREATE TABLE t(id int);', down='DROP TABLE t;')
    write_script(directory, '20240102000000', 'more',
                 up='CREATE TABLE u(id int);', down='DROP TABLE u;')

    assert cli(['--action=up', '--driver=duckdb']) == 0
    assert applied_versions(workdir) == {'20240101000000', '20240102000000'}
    assert '✓ Migration pushed: 20240101000000_init.sql' in capsys.readouterr().out

    assert cli(['--action=down', '--driver=duckdb']) == 0
    assert applied_versions(workdir) == {'20240101000000'}

    assert cli(['--action=reset', '--driver=duckdb']) == 0
    duckdb = pytest.importorskip('duckdb')
    conn = duckdb.connect(str(workdir / 'test.duckdb'))
    tables = [row[0] for row in conn.execute('SHOW TABLES').fetchall()]
    conn.close()
    assert tables == []


def test_failure_is_prefixed_with_action(workdir, capsys):
    directory = workdir / 'db' / 'duckdb' / 'migration'
    write_script(directory, '20240101000000', 'broken', up='CREATE TABLE (;')

    assert cli(['--driver=duckdb']) == 1
    err = capsys.readouterr().err
    assert err.startswith('Migration UP failed: 20240101000000_broken.sql')


def test_seed_down_is_rejected(workdir, capsys):
    assert cli(['--action=down', '--type=seed', '--driver=duckdb']) == 1
    assert "Seed DOWN failed: Seeder cannot be reverted. use 'reset' instead." in capsys.readouterr().err


def test_down_with_empty_ledger_fails(workdir, capsys):
    (workdir / 'db' / 'duckdb' / 'migration').mkdir(parents=True)

    assert cli(['--action=down', '--driver=duckdb']) == 1
    assert 'No applied version' in capsys.readouterr().err


def test_missing_script_directory_fails(workdir, capsys):
    assert cli(['--driver=duckdb']) == 1
    assert 'Cannot read scripts directory' in capsys.readouterr().err


def test_unknown_driver_fails(workdir, capsys):
    assert cli(['--driver=oracle']) == 1
    assert 'Invalid driver "oracle"' in capsys.readouterr().err


def test_root_overrides_working_directory(workdir, tmp_path_factory):
    other = tmp_path_factory.mktemp('project')
    assert cli(['--action=new', '--name=x'], root=other) == 0
    assert len(list((other / 'db' / 'postgres' / 'migration').iterdir())) == 1
    assert not (workdir / 'db').exists()

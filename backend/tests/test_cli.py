import os

import pytest

from trade_journal.cli import main
from trade_journal.database import Database
from trade_journal.repositories import UserRepository


@pytest.fixture()
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'cli.db'}"


@pytest.fixture()
def backup_dir(tmp_path, monkeypatch):
    path = tmp_path / "backups"
    monkeypatch.setenv("TRADE_JOURNAL_BACKUP_DIR", str(path))
    return path


def _cli_user_exists(database_url):
    with Database(database_url) as database:
        return UserRepository(database).find_user_by_username("cli") is not None


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "usage" in capsys.readouterr().out


def test_init_db(database_url, capsys):
    assert main(["--database-url", database_url, "init-db"]) == 0
    assert "Database initialized successfully" in capsys.readouterr().out

    with Database(database_url) as database:
        assert UserRepository(database).find_user_by_id(1) is None


def test_reset_db_clears_data(database_url):
    main(["--database-url", database_url, "init-db"])
    with Database(database_url) as database:
        UserRepository(database).create_user("cli", "cli@example.com", "hash")
    assert _cli_user_exists(database_url)

    assert main(["--database-url", database_url, "reset-db"]) == 0

    assert not _cli_user_exists(database_url)


def test_backup_commands(database_url, backup_dir, capsys):
    main(["--database-url", database_url, "init-db"])

    assert main(["--database-url", database_url, "backup", "create"]) == 0
    assert main(["--database-url", database_url, "backup", "create"]) == 0
    backups = sorted(os.listdir(backup_dir))
    assert len(backups) == 2

    capsys.readouterr()
    assert main(["--database-url", database_url, "backup", "list"]) == 0
    listing = capsys.readouterr().out
    assert "Available backups:" in listing
    assert all(name in listing for name in backups)

    newest = str(backup_dir / backups[-1])
    assert main(["--database-url", database_url, "backup", "info", newest]) == 0
    assert "Users: 0" in capsys.readouterr().out

    assert main(["--database-url", database_url, "backup", "cleanup", "--keep", "1"]) == 0
    assert os.listdir(backup_dir) == [backups[-1]]


def test_backup_restore(database_url, backup_dir, capsys):
    main(["--database-url", database_url, "init-db"])
    main(["--database-url", database_url, "backup", "create"])
    backup_path = str(backup_dir / os.listdir(backup_dir)[0])
    with Database(database_url) as database:
        UserRepository(database).create_user("cli", "cli@example.com", "hash")

    assert main(["--database-url", database_url, "backup", "restore", backup_path]) == 0

    assert "Database restored from backup" in capsys.readouterr().out
    assert not _cli_user_exists(database_url)


def test_backup_list_when_empty(database_url, backup_dir, capsys):
    main(["--database-url", database_url, "init-db"])
    capsys.readouterr()

    main(["--database-url", database_url, "backup", "list"])

    assert "No backups found" in capsys.readouterr().out

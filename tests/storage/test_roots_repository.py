import sqlite3
from pathlib import Path

import psycopg2
import psycopg2.errors
import pytest

from roots_loader.domain.roots import RootRecord
from roots_loader.storage.roots_repository import (
    InsertOutcome,
    PostgresRootsRepository,
    RootsStorageError,
    SqliteRootsRepository,
    _RootsRepository,
    open_repository,
    sqlite_path_from_url,
)


def _rows(db_path: Path, table: str = "roots"):
    connection = sqlite3.connect(db_path)
    try:
        return connection.execute(
            f'SELECT word, root, "index", quality FROM {table} ORDER BY rowid'
        ).fetchall()
    finally:
        connection.close()


def test_sqlite_repository_inserts_and_reports_duplicates(tmp_path: Path, recording_logger):
    db_path = tmp_path / "data" / "roots.sqlite3"
    with SqliteRootsRepository(
        str(db_path), create_table=True, logger_instance=recording_logger
    ) as repo:
        first = repo.insert(RootRecord("cat", "cat", 0), "verified")
        second = repo.insert(RootRecord("cats", "cat", 0), "verified")
        duplicate = repo.insert(RootRecord("cat", "cat", 1), "auto")

    assert first is InsertOutcome.INSERTED
    assert second is InsertOutcome.INSERTED
    assert duplicate is InsertOutcome.DUPLICATE
    assert _rows(db_path) == [
        ("cat", "cat", 0, "verified"),
        ("cats", "cat", 0, "verified"),
    ]
    assert any("UNIQUE" in message for message in recording_logger.messages("debug"))


def test_sqlite_repository_uses_custom_table(tmp_path: Path):
    db_path = tmp_path / "roots.sqlite3"
    with SqliteRootsRepository(str(db_path), table="verified-roots!", create_table=True) as repo:
        assert repo.table == "verifiedroots"
        repo.insert(RootRecord("ran", "run", -1), "psql")

    assert _rows(db_path, "verifiedroots") == [("ran", "run", -1, "psql")]


def test_sqlite_repository_raises_on_missing_table(tmp_path: Path):
    with SqliteRootsRepository(str(tmp_path / "empty.sqlite3")) as repo:
        with pytest.raises(RootsStorageError, match="Failed to insert"):
            repo.insert(RootRecord("cat", "cat", 0), "q")


def test_sqlite_repository_raises_on_other_constraint_failures(tmp_path: Path):
    with SqliteRootsRepository(str(tmp_path / "roots.sqlite3"), create_table=True) as repo:
        with pytest.raises(RootsStorageError):
            repo.insert(RootRecord("cat", "cat", 0), None)


def test_sqlite_repository_rejects_empty_path():
    with pytest.raises(RootsStorageError, match="path is empty"):
        SqliteRootsRepository("")


def test_sqlite_path_from_url():
    assert sqlite_path_from_url("sqlite:///data/roots.db") == "data/roots.db"
    assert sqlite_path_from_url("sqlite:////tmp/roots.db") == "/tmp/roots.db"
    assert sqlite_path_from_url("sqlite:///:memory:") == ":memory:"
    assert sqlite_path_from_url("host=localhost dbname=roots") is None
    assert sqlite_path_from_url("postgresql://user@localhost/roots") is None


def test_open_repository_selects_sqlite(tmp_path: Path):
    db_path = tmp_path / "roots.sqlite3"
    repo = open_repository(f"sqlite:///{db_path}", create_table=True)
    try:
        assert isinstance(repo, SqliteRootsRepository)
        assert repo.db_path == str(db_path)
        assert repo.insert(RootRecord("cat", "cat", 0), "q") is InsertOutcome.INSERTED
    finally:
        repo.close()


def test_open_repository_rejects_empty_connection_string():
    with pytest.raises(RootsStorageError, match="Connection string is empty"):
        open_repository("  ")


class _FakeCursor:
    def __init__(self, connection):
        self.connection = connection

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def execute(self, sql, params=None):
        self.connection.executed.append((sql, params))
        if self.connection.errors:
            raise self.connection.errors.pop(0)


class _FakeConnection:
    def __init__(self, errors=None):
        self.autocommit = False
        self.closed = False
        self.executed = []
        self.errors = list(errors or [])

    def cursor(self):
        return _FakeCursor(self)

    def close(self):
        self.closed = True


def test_postgres_repository_inserts_in_autocommit_mode(recording_logger):
    connection = _FakeConnection()
    dsns = []

    def connect(dsn):
        dsns.append(dsn)
        return connection

    with PostgresRootsRepository(
        "dbname=roots", connect=connect, logger_instance=recording_logger
    ) as repo:
        outcome = repo.insert(RootRecord("cat", "cat", 0), "verified")

    assert dsns == ["dbname=roots"]
    assert outcome is InsertOutcome.INSERTED
    assert connection.autocommit is True
    assert connection.closed is True
    assert connection.executed == [
        (
            'INSERT INTO roots (word, root, "index", quality) VALUES (%s, %s, %s, %s)',
            ("cat", "cat", 0, "verified"),
        )
    ]


def test_postgres_repository_reports_unique_violation(recording_logger):
    connection = _FakeConnection(
        errors=[psycopg2.errors.UniqueViolation("duplicate key value violates unique constraint")]
    )
    repo = PostgresRootsRepository(
        "dbname=roots", connect=lambda _dsn: connection, logger_instance=recording_logger
    )

    assert repo.insert(RootRecord("cat", "cat", 0), "q") is InsertOutcome.DUPLICATE
    assert repo.insert(RootRecord("cat", "kat", 0), "q") is InsertOutcome.INSERTED
    assert recording_logger.messages("debug") == [
        "Unique violation: duplicate key value violates unique constraint"
    ]


def test_postgres_repository_raises_other_failures():
    connection = _FakeConnection(errors=[psycopg2.errors.NotNullViolation("null value")])
    repo = PostgresRootsRepository("dbname=roots", connect=lambda _dsn: connection)

    with pytest.raises(RootsStorageError, match="null value"):
        repo.insert(RootRecord("cat", "cat", 0), "q")


def test_postgres_repository_wraps_connection_errors():
    def connect(_dsn):
        raise psycopg2.OperationalError("could not connect to server")

    with pytest.raises(RootsStorageError, match="Cannot connect"):
        PostgresRootsRepository("dbname=roots", connect=connect)


def test_postgres_repository_creates_table_when_asked():
    connection = _FakeConnection()
    PostgresRootsRepository(
        "dbname=roots", table="roots_v2", create_table=True, connect=lambda _dsn: connection
    )

    sql, _params = connection.executed[0]
    assert sql.startswith("CREATE TABLE IF NOT EXISTS roots_v2 (")
    assert "UNIQUE (word, root)" in sql


def test_open_repository_rejects_sqlite_url_without_path():
    with pytest.raises(RootsStorageError, match="path is empty"):
        open_repository("sqlite:///")


def test_sqlite_repository_wraps_create_table_failure(tmp_path: Path, monkeypatch):
    not_a_db = tmp_path / "garbage.sqlite3"
    not_a_db.write_bytes(b"this is plainly not an sqlite database file" * 4)
    closed = []
    original_close = SqliteRootsRepository.close

    def tracking_close(self):
        closed.append(self.db_path)
        original_close(self)

    monkeypatch.setattr(SqliteRootsRepository, "close", tracking_close)

    with pytest.raises(RootsStorageError, match="Cannot create table roots"):
        SqliteRootsRepository(str(not_a_db), create_table=True)
    assert closed == [str(not_a_db)]


def test_postgres_repository_wraps_create_table_failure():
    connection = _FakeConnection(errors=[psycopg2.errors.InsufficientPrivilege("permission denied")])

    with pytest.raises(RootsStorageError, match="Cannot create table roots: permission denied"):
        PostgresRootsRepository("dbname=roots", create_table=True, connect=lambda _dsn: connection)
    assert connection.closed is True


def test_repository_base_cannot_be_instantiated():
    with pytest.raises(TypeError):
        _RootsRepository()

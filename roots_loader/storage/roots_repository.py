"""Persistence of word/root records in SQLite or PostgreSQL."""
from __future__ import annotations

import logging
import os
import sqlite3
from abc import ABC, abstractmethod
from typing import Any, Callable

import psycopg2
import psycopg2.errorcodes
import psycopg2.errors

from ..config import DEFAULT_TABLE, normalize_table_name
from ..domain.roots import InsertOutcome, RootRecord

logger = logging.getLogger(__name__)

SQLITE_URL_PREFIX = "sqlite://"


class RootsStorageError(RuntimeError):
    """Raised when the store cannot be opened or a record fails for a reason other than a duplicate key."""


class _RootsRepository(ABC):
    def __init__(self, *, table: str = DEFAULT_TABLE, logger_instance=None) -> None:
        self.table = normalize_table_name(table)
        self.logger = logger_instance or logger

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @abstractmethod
    def close(self) -> None: ...

    @abstractmethod
    def insert(self, record: RootRecord, quality: str) -> InsertOutcome: ...

    @abstractmethod
    def ensure_schema(self) -> None: ...

    def _ensure_schema_or_close(self) -> None:
        try:
            self.ensure_schema()
        except RootsStorageError:
            self.close()
            raise

    def _sql_insert(self, placeholder: str) -> str:
        values = ", ".join([placeholder] * 4)
        return f'INSERT INTO {self.table} (word, root, "index", quality) VALUES ({values})'

    def _sql_create_table(self) -> str:
        return (
            f"CREATE TABLE IF NOT EXISTS {self.table} ("
            "word TEXT NOT NULL, "
            "root TEXT NOT NULL, "
            '"index" INTEGER NOT NULL, '
            "quality TEXT NOT NULL, "
            "UNIQUE (word, root)"
            ")"
        )


class SqliteRootsRepository(_RootsRepository):
    def __init__(
        self,
        db_path: str,
        *,
        table: str = DEFAULT_TABLE,
        create_table: bool = False,
        logger_instance=None,
    ) -> None:
        super().__init__(table=table, logger_instance=logger_instance)
        self.db_path = db_path
        if not self.db_path:
            raise RootsStorageError("SQLite database path is empty.")
        self._ensure_parent_dir()
        try:
            self._connection = sqlite3.connect(self.db_path)
        except sqlite3.Error as exc:
            raise RootsStorageError(f"Cannot open SQLite database {self.db_path}: {exc}") from exc
        if create_table:
            self._ensure_schema_or_close()

    def ensure_schema(self) -> None:
        """Create the roots table when missing."""
        try:
            with self._connection:
                self._connection.execute(self._sql_create_table())
        except sqlite3.Error as exc:
            raise RootsStorageError(f"Cannot create table {self.table}: {exc}") from exc

    def insert(self, record: RootRecord, quality: str) -> InsertOutcome:
        try:
            with self._connection:
                self._connection.execute(
                    self._sql_insert("?"),
                    (record.word, record.root, record.index, quality),
                )
        except sqlite3.IntegrityError as exc:
            if _is_sqlite_unique_violation(exc):
                self.logger.debug("Unique violation: %s", exc)
                return InsertOutcome.DUPLICATE
            raise RootsStorageError(f"Failed to insert {record!r}: {exc}") from exc
        except sqlite3.Error as exc:
            raise RootsStorageError(f"Failed to insert {record!r}: {exc}") from exc
        return InsertOutcome.INSERTED

    def close(self) -> None:
        self._connection.close()

    def _ensure_parent_dir(self) -> None:
        if self.db_path == ":memory:":
            return
        parent = os.path.dirname(os.path.abspath(self.db_path))
        if parent:
            os.makedirs(parent, exist_ok=True)


class PostgresRootsRepository(_RootsRepository):
    def __init__(
        self,
        dsn: str,
        *,
        table: str = DEFAULT_TABLE,
        create_table: bool = False,
        logger_instance=None,
        connect: Callable[[str], Any] | None = None,
    ) -> None:
        super().__init__(table=table, logger_instance=logger_instance)
        connect = connect or psycopg2.connect
        try:
            self._connection = connect(dsn)
        except psycopg2.Error as exc:
            raise RootsStorageError(f"Cannot connect to the database: {exc}") from exc
        # Each record is committed on its own.
        self._connection.autocommit = True
        self._insert_sql = self._sql_insert("%s")
        if create_table:
            self._ensure_schema_or_close()

    def ensure_schema(self) -> None:
        """Create the roots table when missing."""
        try:
            with self._connection.cursor() as cur:
                cur.execute(self._sql_create_table())
        except psycopg2.Error as exc:
            raise RootsStorageError(f"Cannot create table {self.table}: {exc}") from exc

    def insert(self, record: RootRecord, quality: str) -> InsertOutcome:
        try:
            with self._connection.cursor() as cur:
                cur.execute(
                    self._insert_sql,
                    (record.word, record.root, record.index, quality),
                )
        except psycopg2.Error as exc:
            if _is_postgres_unique_violation(exc):
                self.logger.debug("Unique violation: %s", exc)
                return InsertOutcome.DUPLICATE
            raise RootsStorageError(f"Failed to insert {record!r}: {exc}") from exc
        return InsertOutcome.INSERTED

    def close(self) -> None:
        self._connection.close()


def sqlite_path_from_url(connection_string: str) -> str | None:
    """Return the database path of a sqlite:/// URL, or None for other strings.

    ``sqlite:///data/roots.db`` is relative, ``sqlite:////tmp/roots.db`` is
    absolute and ``sqlite:///:memory:`` is an in-memory database.
    """
    if not connection_string.startswith(SQLITE_URL_PREFIX):
        return None
    path = connection_string[len(SQLITE_URL_PREFIX):]
    if path.startswith("/"):
        path = path[1:]
    return path


def open_repository(
    connection_string: str,
    *,
    table: str = DEFAULT_TABLE,
    create_table: bool = False,
    logger_instance=None,
) -> _RootsRepository:
    target = (connection_string or "").strip()
    if not target:
        raise RootsStorageError("Connection string is empty.")
    sqlite_path = sqlite_path_from_url(target)
    if sqlite_path is not None:
        return SqliteRootsRepository(
            sqlite_path,
            table=table,
            create_table=create_table,
            logger_instance=logger_instance,
        )
    return PostgresRootsRepository(
        target,
        table=table,
        create_table=create_table,
        logger_instance=logger_instance,
    )


def _is_sqlite_unique_violation(exc: sqlite3.IntegrityError) -> bool:
    error_name = getattr(exc, "sqlite_errorname", "")
    if error_name:
        return error_name in ("SQLITE_CONSTRAINT_UNIQUE", "SQLITE_CONSTRAINT_PRIMARYKEY")
    return "UNIQUE constraint failed" in str(exc)


def _is_postgres_unique_violation(exc: psycopg2.Error) -> bool:
    if isinstance(exc, psycopg2.errors.UniqueViolation):
        return True
    return getattr(exc, "pgcode", None) == psycopg2.errorcodes.UNIQUE_VIOLATION

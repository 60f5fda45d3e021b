"""Storage layer for word/root records."""

from .roots_repository import (
    InsertOutcome,
    PostgresRootsRepository,
    RootsStorageError,
    SqliteRootsRepository,
    open_repository,
    sqlite_path_from_url,
)

__all__ = [
    "InsertOutcome",
    "PostgresRootsRepository",
    "RootsStorageError",
    "SqliteRootsRepository",
    "open_repository",
    "sqlite_path_from_url",
]

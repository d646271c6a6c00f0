"""SQLite database engine."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any

from .sql import SQLDatabase
from .types import DatabaseConfig, DatabaseType


class SQLiteDatabase(SQLDatabase):
    """
    SQLite database engine.

    Uses the built-in sqlite3 module. The parent directory of the database
    file is created on connect. Foreign key enforcement is switched on, so
    a row whose foreign field points at a missing parent row is rejected
    (and, like any execution failure, disables the engine).
    """

    def __init__(self, path: str = ":memory:", *, timeout: float = 5.0, **kwargs: Any):
        config = DatabaseConfig(
            db_type=DatabaseType.SQLITE,
            path=str(path),
            options=kwargs,
        )
        super().__init__(config)
        self._timeout = timeout

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> SQLiteDatabase:
        return cls(config.path or ":memory:", **config.options)

    def _driver_errors(self) -> tuple[type[BaseException], ...]:
        return (sqlite3.Error, OSError, OverflowError)

    def _open(self) -> None:
        path = self._config.path or ":memory:"
        uri = path.startswith("file:")
        if path != ":memory:" and not uri:
            Path(path).parent.mkdir(parents=True, exist_ok=True)

        self._conn = sqlite3.connect(
            path,
            timeout=self._timeout,
            check_same_thread=False,
            uri=uri,
        )
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON")


__all__ = [
    "SQLiteDatabase",
]

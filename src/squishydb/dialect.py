"""SQL dialect abstraction for the SQL-backed engines.

Provides a ``Dialect`` protocol and one implementation per SQL backend.
The statement builder uses dialect methods for placeholders, column types
and schema introspection, so it never references a specific driver.

Manifesto:
    The same record declaration must produce valid DDL and DML on SQLite
    and MySQL. Everything backend-specific lives here.

    - **One interface:** Dialect protocol for all SQL fragments
    - **Type mapping:** ``map_type`` returns ``None`` for unsupported types
    - **Bound values:** placeholders only, never literal values

Architecture::

    ┌──────────────────────────────┐   ┌──────────────────────────────┐
    │ SQLiteDialect                │   │ MySQLDialect                 │
    │  ?, ?, ?                     │   │  %s, %s, %s                  │
    │  str   -> VARCHAR(255)       │   │  str   -> VARCHAR(255)       │
    │  int   -> INTEGER            │   │  int   -> INTEGER            │
    │  bool  -> BOOLEAN            │   │  bool  -> BOOLEAN            │
    │  float -> REAL               │   │  float -> DOUBLE             │
    └──────────────────────────────┘   └──────────────────────────────┘

Examples:
    >>> d = get_dialect("sqlite")
    >>> d.placeholders(3)
    '?, ?, ?'
    >>> d.map_type(str)
    'VARCHAR(255)'
    >>> d.map_type(list) is None
    True

Guardrails:
    ❌ DON'T: Interpolate values into SQL text
    ✅ DO: Use ``placeholder`` / ``placeholders`` and bind params

    ❌ DON'T: Pass end-user input as a table or column name
    ✅ DO: Keep identifiers to developer-declared schema metadata

Tags:
    dialect, sql, type-mapping, squishydb, multi-backend

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import re
import typing
from typing import Any, Protocol, runtime_checkable

from squishydb.errors import SchemaError

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def validate_identifier(name: str, kind: str = "identifier") -> str:
    """Return ``name`` unchanged if it is a plain SQL identifier.

    Identifier positions cannot be bound as parameters, so they are
    restricted to ``[A-Za-z_][A-Za-z0-9_]*``.

    Raises:
        SchemaError: if ``name`` is not a plain identifier.
    """
    if not isinstance(name, str) or not _IDENTIFIER_RE.match(name):
        raise SchemaError(f"Invalid {kind} name: {name!r}", identifier=name)
    return name


@runtime_checkable
class Dialect(Protocol):
    """SQL dialect contract."""

    @property
    def name(self) -> str:
        """Human-readable dialect name (e.g. ``'sqlite'``)."""
        ...

    def placeholder(self, index: int) -> str:
        """Single positional placeholder (0-based index)."""
        ...

    def placeholders(self, count: int) -> str:
        """Comma-separated placeholder list."""
        ...

    def map_type(self, value_type: Any) -> str | None:
        """Column type for a Python value type, ``None`` when unsupported."""
        ...

    def table_exists_query(self) -> str:
        """Query taking one table-name parameter; returns rows if it exists."""
        ...

    def column_names_query(self) -> str:
        """Query taking one table-name parameter; returns a ``name`` column."""
        ...


# =========================================================================
# Concrete Dialect Implementations
# =========================================================================


class _BaseSQLDialect:
    """Shared type mapping; subclasses supply the column type table."""

    _types: dict[type, str] = {}

    def map_type(self, value_type: Any) -> str | None:
        if not isinstance(value_type, type) or typing.get_origin(value_type) is not None:
            return None
        # bool is a subclass of int, so an exact match is tried first
        if value_type in self._types:
            return self._types[value_type]
        for python_type, column_type in self._types.items():
            if python_type is not bool and issubclass(value_type, python_type):
                return column_type
        return None


class SQLiteDialect(_BaseSQLDialect):
    """SQLite dialect — ``?`` placeholders."""

    _types = {
        bool: "BOOLEAN",
        int: "INTEGER",
        float: "REAL",
        str: "VARCHAR(255)",
    }

    @property
    def name(self) -> str:
        return "sqlite"

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "?"

    def placeholders(self, count: int) -> str:
        return ", ".join("?" for _ in range(count))

    def table_exists_query(self) -> str:
        return "SELECT name FROM sqlite_master WHERE type='table' AND name = ? COLLATE NOCASE"

    def column_names_query(self) -> str:
        return "SELECT name FROM pragma_table_info(?)"


class MySQLDialect(_BaseSQLDialect):
    """MySQL dialect — ``%s`` placeholders.

    Compatible with ``mysql.connector`` (format paramstyle).
    """

    _types = {
        bool: "BOOLEAN",
        int: "INTEGER",
        float: "DOUBLE",
        str: "VARCHAR(255)",
    }

    @property
    def name(self) -> str:
        return "mysql"

    def placeholder(self, index: int) -> str:  # noqa: ARG002
        return "%s"

    def placeholders(self, count: int) -> str:
        return ", ".join("%s" for _ in range(count))

    def table_exists_query(self) -> str:
        return (
            "SELECT TABLE_NAME FROM INFORMATION_SCHEMA.TABLES "
            "WHERE TABLE_SCHEMA = DATABASE() AND TABLE_NAME = %s"
        )

    def column_names_query(self) -> str:
        return (
            "SELECT COLUMN_NAME AS name FROM INFORMATION_SCHEMA.COLUMNS "
            "WHERE TABLE_SCHEMA = DATABASE() AND TABLE_NAME = %s "
            "ORDER BY ORDINAL_POSITION"
        )


# =========================================================================
# Registry / Factory
# =========================================================================

# Dialects are stateless
_DIALECTS: dict[str, Dialect] = {
    "sqlite": SQLiteDialect(),
    "mysql": MySQLDialect(),
}


def get_dialect(db_type: str) -> Dialect:
    """Get a dialect by database type name.

    Raises:
        ValueError: If ``db_type`` is not recognised.
    """
    key = db_type.lower()
    if key not in _DIALECTS:
        raise ValueError(f"Unknown dialect '{db_type}'. Supported: {sorted(_DIALECTS)}")
    return _DIALECTS[key]


def register_dialect(name: str, dialect: Dialect) -> None:
    """Register a custom dialect implementation."""
    _DIALECTS[name.lower()] = dialect


__all__ = [
    "Dialect",
    "SQLiteDialect",
    "MySQLDialect",
    "get_dialect",
    "register_dialect",
    "validate_identifier",
]

"""Shared engine for DB-API 2.0 SQL backends.

Executes :class:`~squishydb.statements.Statement` values produced by the
:class:`~squishydb.statements.StatementBuilder` for the engine's dialect.
Concrete subclasses only open/close the driver connection.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from squishydb.dialect import Dialect, get_dialect
from squishydb.query import Query
from squishydb.record.fields import FieldDescriptor
from squishydb.statements import Statement, StatementBuilder, TableDefinition

from .base import DatabaseEngine
from .types import DatabaseConfig


class SQLDatabase(DatabaseEngine):
    """Engine for SQL backends that speak DB-API 2.0."""

    def __init__(self, config: DatabaseConfig, dialect: Dialect | None = None):
        super().__init__(config)
        if dialect is None:
            dialect = get_dialect(config.db_type)
        self._dialect = dialect
        self._builder = StatementBuilder(dialect)
        self._conn: Any = None

    @property
    def dialect(self) -> Dialect:
        return self._dialect

    @property
    def builder(self) -> StatementBuilder:
        return self._builder

    # -- Raw execution (driver errors propagate) ---------------------------

    def _execute(self, statement: Statement) -> int:
        """Run a write statement, commit, and return the affected row count."""
        self._trace("execute", sql=statement.sql, params=statement.params)
        cursor = self._conn.cursor()
        try:
            if statement.params:
                cursor.execute(statement.sql, statement.params)
            else:
                cursor.execute(statement.sql)
            self._conn.commit()
            return cursor.rowcount
        finally:
            cursor.close()

    def _query(self, statement: Statement) -> list[dict[str, Any]]:
        """Run a read statement and return rows as dicts."""
        self._trace("query", sql=statement.sql, params=statement.params)
        cursor = self._conn.cursor()
        try:
            if statement.params:
                cursor.execute(statement.sql, statement.params)
            else:
                cursor.execute(statement.sql)
            columns = [desc[0] for desc in cursor.description or ()]
            return [dict(zip(columns, row, strict=False)) for row in cursor.fetchall()]
        finally:
            cursor.close()

    # -- Public raw execution ----------------------------------------------

    def execute_statement(self, sql: str, params: Sequence[Any] = ()) -> bool:
        """Execute arbitrary SQL under the disable-on-failure policy."""

        def action() -> bool:
            self._execute(Statement(sql, tuple(params)))
            return True

        return self._run("execute_statement", action, False)

    def execute_query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]] | None:
        """Run arbitrary SQL and return its rows, or ``None`` on failure."""
        return self._run("execute_query", lambda: self._query(Statement(sql, tuple(params))), None)

    # -- DatabaseEngine primitives -----------------------------------------

    def _close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _table_exists(self, name: str) -> bool:
        return bool(self._query(Statement(self._dialect.table_exists_query(), (name,))))

    def _column_names(self, name: str) -> list[str]:
        rows = self._query(Statement(self._dialect.column_names_query(), (name,)))
        return [row["name"] for row in rows]

    def _ensure(self, definition: TableDefinition) -> None:
        if not self._table_exists(definition.name):
            self._execute(self._builder.create_table(definition))
            self._log.info("table_created", table=definition.name)
            return

        existing = {column.lower() for column in self._column_names(definition.name)}
        for descriptor in self._builder.persisted_fields(definition):
            if descriptor.name.lower() in existing:
                continue
            self._execute(self._builder.add_column(definition.name, descriptor))
            self._log.info("column_added", table=definition.name, column=descriptor.name)

    def _validate(self, definition: TableDefinition) -> None:
        self._builder.validate(definition)

    def _payload(self, definition: TableDefinition, record: Any) -> dict[str, Any]:
        columns = {d.name for d in self._builder.persisted_fields(definition)}
        return {k: v for k, v in super()._payload(definition, record).items() if k in columns}

    def _read_fields(self, definition: TableDefinition) -> list[FieldDescriptor]:
        return self._builder.persisted_fields(definition)

    def _write_row(self, definition: TableDefinition, payload: Mapping[str, Any]) -> None:
        key = definition.primary_key.name
        if self._count_rows(definition, Query().match(key, payload[key])):
            self._execute(self._builder.update(definition.name, payload, key))
        else:
            self._execute(self._builder.insert(definition.name, payload))

    def _update_row(self, definition: TableDefinition, payload: Mapping[str, Any]) -> None:
        self._execute(self._builder.update(definition.name, payload, definition.primary_key.name))

    def _select_rows(
        self, definition: TableDefinition, query: Query | None, limit: int | None
    ) -> list[dict[str, Any]]:
        return self._query(self._builder.select(definition.name, query, limit))

    def _delete_rows(self, definition: TableDefinition, query: Query | None) -> int:
        return max(self._execute(self._builder.delete(definition.name, query)), 0)

    def _count_rows(self, definition: TableDefinition, query: Query | None) -> int:
        rows = self._query(self._builder.count(definition.name, query))
        return int(rows[0]["total"]) if rows else 0


__all__ = [
    "SQLDatabase",
]

"""Statement builder for the SQL engines.

Turns a :class:`TableDefinition` plus a :class:`~squishydb.query.Query` into
parameterized :class:`Statement` values for one :class:`~squishydb.dialect.Dialect`.

Architecture::

    TableDefinition(name, record_type, fields)
            │
            ▼
    StatementBuilder(dialect)
      create_table()  CREATE TABLE IF NOT EXISTS t (pk .. PRIMARY KEY, f .., fk .. REFERENCES r(c));
      add_column()    ALTER TABLE t ADD COLUMN c <type>;
      insert()        INSERT INTO t (a, b) VALUES (?, ?);
      update()        UPDATE t SET b = ? WHERE a = ?;
      delete()        DELETE FROM t WHERE ...;
      select()        SELECT * FROM t WHERE ... [LIMIT n];
      count()         SELECT COUNT(*) AS total FROM t WHERE ...;

Column order in DDL is always: primary key, ordinary fields, foreign keys.
Fields whose type the dialect cannot map are left out of the DDL.

Tags:
    sql, ddl, dml, statement-builder, squishydb
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from squishydb.dialect import Dialect, validate_identifier
from squishydb.errors import SchemaError
from squishydb.query import Query
from squishydb.record.fields import (
    FieldDescriptor,
    FieldRole,
    classify,
    filter_by_role,
    primary_key,
)


@dataclass(frozen=True)
class Statement:
    """SQL text plus the values bound to its placeholders."""

    sql: str
    params: tuple[Any, ...] = ()


@dataclass(frozen=True)
class TableDefinition:
    """A table name bound to a record type and its field descriptors."""

    name: str
    record_type: type
    fields: tuple[FieldDescriptor, ...]

    @classmethod
    def of(cls, name: str, record_type: type) -> TableDefinition:
        return cls(
            name=validate_identifier(name, "table"),
            record_type=record_type,
            fields=tuple(classify(record_type)),
        )

    @property
    def primary_key(self) -> FieldDescriptor:
        return primary_key(list(self.fields), table=self.name)

    def by_role(self, role: FieldRole) -> list[FieldDescriptor]:
        return filter_by_role(list(self.fields), role)

    def validate(self) -> None:
        """Check the declaration is usable before any table is touched.

        Raises:
            SchemaError: no / several primary keys, a foreign field without a
                reference, or a field name that is not a plain identifier.
        """
        primary_key(list(self.fields), table=self.name)
        for descriptor in self.fields:
            validate_identifier(descriptor.name, "column")
        for descriptor in self.by_role(FieldRole.FOREIGN):
            if descriptor.reference is None:
                raise SchemaError(
                    f"Foreign key field '{descriptor.name}' in table '{self.name}' "
                    "has no reference table and field",
                    table=self.name,
                    field=descriptor.name,
                )
            validate_identifier(descriptor.reference.table, "reference table")
            validate_identifier(descriptor.reference.field, "reference field")


class StatementBuilder:
    """Builds dialect-specific statements from table definitions."""

    def __init__(self, dialect: Dialect) -> None:
        self.dialect = dialect

    # -- DDL ---------------------------------------------------------------

    def persisted_fields(self, definition: TableDefinition) -> list[FieldDescriptor]:
        """Fields that get a column: DDL order, unsupported types dropped."""
        ordered = (
            definition.by_role(FieldRole.PRIMARY)
            + definition.by_role(FieldRole.FIELD)
            + definition.by_role(FieldRole.FOREIGN)
        )
        return [d for d in ordered if self.dialect.map_type(d.value_type) is not None]

    def _column(self, descriptor: FieldDescriptor) -> str:
        column_type = self.dialect.map_type(descriptor.value_type)
        column = f"{descriptor.name} {column_type}"
        if descriptor.role is FieldRole.PRIMARY:
            return f"{column} PRIMARY KEY"
        if descriptor.role is FieldRole.FOREIGN and descriptor.reference is not None:
            reference = descriptor.reference
            return f"{column} REFERENCES {reference.table}({reference.field})"
        return column

    def validate(self, definition: TableDefinition) -> None:
        """Validate the declaration and check the primary key has a column type.

        Raises:
            SchemaError: the declaration is unusable, or the primary key's
                type has no column type in this dialect.
        """
        definition.validate()
        key = definition.primary_key
        if self.dialect.map_type(key.value_type) is None:
            raise SchemaError(
                f"Primary key '{key.name}' in table '{definition.name}' has no "
                f"column type in {self.dialect.name}",
                table=definition.name,
                field=key.name,
            )

    def create_table(self, definition: TableDefinition) -> Statement:
        self.validate(definition)
        columns = ", ".join(self._column(d) for d in self.persisted_fields(definition))
        return Statement(f"CREATE TABLE IF NOT EXISTS {definition.name} ({columns});")

    def add_column(self, table: str, descriptor: FieldDescriptor) -> Statement:
        column_type = self.dialect.map_type(descriptor.value_type)
        if column_type is None:
            raise SchemaError(
                f"Field '{descriptor.name}' has no column type in {self.dialect.name}",
                table=table,
                field=descriptor.name,
            )
        name = validate_identifier(descriptor.name, "column")
        return Statement(f"ALTER TABLE {validate_identifier(table, 'table')} ADD COLUMN {name} {column_type};")

    # -- DML ---------------------------------------------------------------

    def _where(self, query: Query | None) -> tuple[str, tuple[Any, ...]]:
        if query is None or query.is_empty():
            return "", ()
        clause, params = query.to_sql(self.dialect)
        return f" WHERE {clause}", params

    def insert(self, table: str, payload: Mapping[str, Any]) -> Statement:
        columns = [validate_identifier(c, "column") for c in payload]
        placeholders = self.dialect.placeholders(len(columns))
        return Statement(
            f"INSERT INTO {validate_identifier(table, 'table')} ({', '.join(columns)}) VALUES ({placeholders});",
            tuple(payload.values()),
        )

    def update(self, table: str, payload: Mapping[str, Any], key: str) -> Statement:
        """``UPDATE`` every non-key column of the row whose ``key`` matches."""
        assignments = {c: v for c, v in payload.items() if c != key} or {key: payload[key]}
        set_clause = ", ".join(
            f"{validate_identifier(column, 'column')} = {self.dialect.placeholder(index)}"
            for index, column in enumerate(assignments)
        )
        key_placeholder = self.dialect.placeholder(len(assignments))
        return Statement(
            f"UPDATE {validate_identifier(table, 'table')} SET {set_clause} "
            f"WHERE {validate_identifier(key, 'column')} = {key_placeholder};",
            (*assignments.values(), payload[key]),
        )

    def delete(self, table: str, query: Query | None = None) -> Statement:
        where, params = self._where(query)
        return Statement(f"DELETE FROM {validate_identifier(table, 'table')}{where};", params)

    def select(self, table: str, query: Query | None = None, limit: int | None = None) -> Statement:
        where, params = self._where(query)
        sql = f"SELECT * FROM {validate_identifier(table, 'table')}{where}"
        if limit is not None:
            sql += f" LIMIT {int(limit)}"
        return Statement(f"{sql};", params)

    def count(self, table: str, query: Query | None = None) -> Statement:
        where, params = self._where(query)
        return Statement(f"SELECT COUNT(*) AS total FROM {validate_identifier(table, 'table')}{where};", params)


__all__ = [
    "Statement",
    "TableDefinition",
    "StatementBuilder",
]

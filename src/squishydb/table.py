"""Table adapters.

A :class:`TableAdapter` binds a table name to a record type and to the
engine that stores it, so application code works with typed records::

    @dataclass
    class Customer(Record):
        identifier: str = primary()
        name: str = field()

    customers = TableAdapter("customer", Customer)
    db.create_table(customers)

    customers.insert_record(Customer("u1", "Smudge"))
    customers.get_first_record(Query().match("identifier", "u1"))

The adapter depends only on the :class:`~squishydb.protocols.Database`
protocol. Every call delegates to the engine, so a disabled engine turns
every call into its failure result (``False``, ``None``, ``[]`` or ``0``).
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from squishydb.errors import ConfigurationError
from squishydb.protocols import Database
from squishydb.query import Query
from squishydb.statements import TableDefinition

R = TypeVar("R")


class TableAdapter(Generic[R]):
    """Typed access to one table (or collection)."""

    def __init__(self, name: str, record_type: type[R], database: Database | None = None):
        self._definition = TableDefinition.of(name, record_type)
        self._database = database

    @property
    def name(self) -> str:
        return self._definition.name

    @property
    def record_type(self) -> type[R]:
        return self._definition.record_type

    @property
    def definition(self) -> TableDefinition:
        return self._definition

    @property
    def database(self) -> Database | None:
        return self._database

    def link(self, database: Database) -> TableAdapter[R]:
        """Attach this adapter to an engine. Returns ``self``."""
        self._database = database
        return self

    def _require_database(self) -> Database:
        if self._database is None:
            raise ConfigurationError(
                f"Table '{self.name}' is not linked to a database; "
                "pass it to Database.create_table() first",
                table=self.name,
            )
        return self._database

    def create_record(self, **values: Any) -> R:
        """Instantiate a new, unsaved record of this table's type."""
        return self.record_type(**values)

    def ensure(self) -> bool:
        """Create the table, or add missing columns, on the linked engine."""
        return self._require_database().ensure_table(self._definition)

    # -- CRUD --------------------------------------------------------------

    def insert_record(self, record: R) -> bool:
        return self._require_database().insert_record(self._definition, record)

    def update_record(self, record: R) -> bool:
        return self._require_database().update_record(self._definition, record)

    def get_first_record(self, query: Query | None = None) -> R | None:
        return self._require_database().get_first_record(self._definition, query)

    def get_record_list(self, query: Query | None = None) -> list[R]:
        return self._require_database().get_record_list(self._definition, query)

    def remove_record(self, query: Query | None = None) -> int:
        return self._require_database().remove_record(self._definition, query)

    def count_records(self, query: Query | None = None) -> int:
        return self._require_database().count_records(self._definition, query)

    def __repr__(self) -> str:
        return f"TableAdapter(name={self.name!r}, record_type={self.record_type.__name__})"


__all__ = [
    "TableAdapter",
]

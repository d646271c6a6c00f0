"""squishydb -- declarative record mapping for SQLite, MySQL and MongoDB.

Manifesto:
    Persisting a small set of record types should not require an ORM
    session, a migration tool and hand-written SQL for every backend.
    Declare a dataclass once, point a builder at a database and get
    typed CRUD with additive schema migration.

    - **Declarative records:** ``primary()`` / ``field()`` / ``foreign()`` /
      ``ignored()`` describe the schema inside the class body
    - **Bound values only:** every equality value is a statement parameter
    - **Contained failures:** a backend error disables the engine and is
      logged; CRUD calls report failure instead of raising
    - **Import-guarded drivers:** MySQL and MongoDB drivers load at connect

Architecture::

    Layer 1 -- Types & Errors
        errors.py          Structured error hierarchy (SquishyError)
        logging.py         structlog configuration
        settings.py        pydantic-settings DatabaseSettings

    Layer 2 -- Record Mapping
        record/            Field helpers, classifier, marshalling, Record
        query.py           Equality-only Query model
        dialect.py         SQLite / MySQL dialects
        statements.py      TableDefinition + StatementBuilder

    Layer 3 -- Engines
        protocols.py       Database protocol
        adapters/          SQLite, MySQL, MongoDB engines + DatabaseBuilder
        table.py           TableAdapter

Examples:
    >>> from dataclasses import dataclass
    >>> from squishydb import DatabaseBuilder, Query, Record, TableAdapter, field, primary
    >>> @dataclass
    ... class Customer(Record):
    ...     identifier: str = primary()
    ...     name: str = field()
    >>> db = DatabaseBuilder().set_sqlite(":memory:").build()
    >>> customers = TableAdapter("customer", Customer)
    >>> db.create_table(customers)
    True
    >>> customers.insert_record(Customer("u1", "Smudge"))
    True
    >>> customers.get_first_record(Query().match("identifier", "u1"))
    Customer(identifier='u1', name='Smudge')

Tags:
    squishydb, orm, record-mapping, sqlite, mysql, mongodb

Doc-Types:
    package-overview, architecture-map
"""

from squishydb.adapters import (
    DatabaseBuilder,
    DatabaseConfig,
    DatabaseEngine,
    DatabaseType,
    EngineState,
    MongoDatabase,
    MySQLDatabase,
    SQLiteDatabase,
)
from squishydb.errors import (
    ConfigurationError,
    DatabaseConnectionError,
    ErrorCategory,
    ExecutionError,
    InvalidConfigError,
    MarshalError,
    MissingConfigError,
    SchemaError,
    SquishyError,
)
from squishydb.protocols import Database
from squishydb.query import Query
from squishydb.record import (
    FieldDescriptor,
    FieldRole,
    Record,
    field,
    foreign,
    ignored,
    primary,
)
from squishydb.settings import DatabaseSettings
from squishydb.statements import TableDefinition
from squishydb.table import TableAdapter

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Records
    "Record",
    "FieldDescriptor",
    "FieldRole",
    "primary",
    "field",
    "foreign",
    "ignored",
    "Query",
    "TableDefinition",
    "TableAdapter",
    # Engines
    "Database",
    "DatabaseBuilder",
    "DatabaseConfig",
    "DatabaseEngine",
    "DatabaseSettings",
    "DatabaseType",
    "EngineState",
    "SQLiteDatabase",
    "MySQLDatabase",
    "MongoDatabase",
    # Errors
    "SquishyError",
    "ErrorCategory",
    "ConfigurationError",
    "MissingConfigError",
    "InvalidConfigError",
    "SchemaError",
    "DatabaseConnectionError",
    "ExecutionError",
    "MarshalError",
]

"""Database engines: one record-mapping interface for three backends.

Manifesto:
    A record declared once must be storable in SQLite during development
    and in MySQL or MongoDB in production without touching application
    code. Choosing the backend is a builder or settings change.

    Each engine is **import-guarded**: its driver is only required at
    ``connect()`` time, not at import time::

        pip install squishydb[mysql]   # mysql-connector-python
        pip install squishydb[mongo]   # pymongo

Architecture::

    DatabaseEngine (base.py)         Lifecycle + disable-on-failure policy
        |-- SQLDatabase (sql.py)     DB-API 2.0 execution via StatementBuilder
        |     |-- SQLiteDatabase     stdlib sqlite3 (always available)
        |     |-- MySQLDatabase      mysql.connector
        |-- MongoDatabase            pymongo

    DatabaseBuilder (builder.py)     Validated construction + EngineRegistry
    DatabaseConfig (types.py)        Connection description
    DatabaseType / EngineState       Enums

Modules
-------
base            Abstract DatabaseEngine base class
types           DatabaseType, EngineState, DatabaseConfig, parse_mysql_url
sql             Shared SQL engine
sqlite          SQLite engine
mysql           MySQL / MariaDB engine (requires mysql-connector-python)
mongo           MongoDB engine (requires pymongo)
builder         DatabaseBuilder + engine registry

Tags:
    squishydb, database, engines, multi-backend, import-guarded

Doc-Types:
    package-overview, module-index
"""

from .base import DatabaseEngine
from .builder import DatabaseBuilder, EngineRegistry, engine_registry
from .mongo import MongoDatabase
from .mysql import MySQLDatabase
from .sql import SQLDatabase
from .sqlite import SQLiteDatabase
from .types import DatabaseConfig, DatabaseType, EngineState, parse_mysql_url

__all__ = [
    # Types
    "DatabaseType",
    "DatabaseConfig",
    "EngineState",
    "parse_mysql_url",
    # Base classes
    "DatabaseEngine",
    "SQLDatabase",
    # Engines
    "SQLiteDatabase",
    "MySQLDatabase",
    "MongoDatabase",
    # Construction
    "DatabaseBuilder",
    "EngineRegistry",
    "engine_registry",
]

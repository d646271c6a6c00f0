"""Database builder and engine registry.

Manifesto:
    Application code should describe *which* database it wants and never
    hard-code engine classes. The builder collects the connection fields,
    validates them per backend and asks the registry for the engine.

Features:
    - Fluent setters plus ``set_sqlite`` / ``set_mysql`` / ``set_mongo``
    - Per-backend validation with ``MissingConfigError`` naming the field
    - Construction from a configuration section or from ``DatabaseSettings``
    - ``EngineRegistry`` for custom engines

Examples:
    >>> db = DatabaseBuilder().set_sqlite("data/app.db").build()
    >>> db.is_enabled()
    True

Tags:
    squishydb, database, builder, registry, factory

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from squishydb.errors import ConfigurationError, MissingConfigError
from squishydb.logging import configure_logging, get_logger

from .base import DatabaseEngine
from .mongo import MongoDatabase
from .mysql import MySQLDatabase
from .sqlite import SQLiteDatabase
from .types import DatabaseConfig, DatabaseType

if TYPE_CHECKING:
    from squishydb.settings import DatabaseSettings

logger = get_logger(__name__)


class EngineRegistry:
    """Maps database type names to engine classes."""

    def __init__(self):
        self._engines: dict[str, type[DatabaseEngine]] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        self._engines["sqlite"] = SQLiteDatabase
        self._engines["mysql"] = MySQLDatabase
        self._engines["mongo"] = MongoDatabase

    def register(self, name: str, engine_class: type[DatabaseEngine]) -> None:
        """Register an engine class. It must provide ``from_config``."""
        self._engines[name.lower()] = engine_class

    def create(self, config: DatabaseConfig) -> DatabaseEngine:
        name = config.db_type.value
        if name not in self._engines:
            raise ConfigurationError(f"Unknown database type: {name}")
        return self._engines[name].from_config(config)

    def list_engines(self) -> list[str]:
        return sorted(self._engines)


# Global registry
engine_registry = EngineRegistry()

_ALIASES = {
    "mariadb": DatabaseType.MYSQL,
    "mongodb": DatabaseType.MONGO,
}


def _parse_type(value: DatabaseType | str | None) -> DatabaseType:
    if value is None:
        raise MissingConfigError("type")
    if isinstance(value, DatabaseType):
        return value
    name = str(value).strip().lower()
    if name in _ALIASES:
        return _ALIASES[name]
    try:
        return DatabaseType(name)
    except ValueError:
        raise ConfigurationError(f"Unknown database type: {value}", key="type") from None


class DatabaseBuilder:
    """
    Fluent builder for database engines.

    Required fields per type:

    ======  ==================================================
    sqlite  ``path``
    mysql   ``connection_string``; ``username`` and ``password``
            must be given together
    mongo   ``connection_string`` and ``database_name``
    ======  ==================================================
    """

    def __init__(self) -> None:
        self.type: str | DatabaseType | None = None
        self.path: str | None = None
        self.connection_string: str | None = None
        self.database_name: str | None = None
        self.username: str | None = None
        self.password: str | None = None
        self.debug = False
        self.options: dict[str, Any] = {}

    # -- Alternate constructors ----------------------------------------

    @classmethod
    def from_config(cls, section: Mapping[str, Any], path: str | None = None) -> DatabaseBuilder:
        """Build from a configuration section plus the SQLite file path.

        Keys may be written in snake_case or camelCase
        (``connection_string`` / ``connectionString``).
        """

        def value(*keys: str) -> Any:
            for key in keys:
                if section.get(key) is not None:
                    return section[key]
            return None

        builder = cls()
        builder.type = value("type")
        builder.path = path if path is not None else value("path")
        builder.connection_string = value("connection_string", "connectionString")
        builder.database_name = value("database_name", "databaseName")
        builder.username = value("username")
        builder.password = value("password")
        return builder

    @classmethod
    def from_settings(cls, settings: DatabaseSettings) -> DatabaseBuilder:
        """Build from environment settings and apply ``settings.log_level``."""
        configure_logging(level=settings.log_level)
        builder = cls()
        builder.type = settings.type
        builder.path = settings.path
        builder.connection_string = settings.connection_string
        builder.database_name = settings.database_name
        builder.username = settings.username
        builder.password = settings.password_value()
        builder.debug = settings.debug
        return builder

    # -- Setters -------------------------------------------------------

    def set_type(self, db_type: DatabaseType | str) -> DatabaseBuilder:
        self.type = db_type
        return self

    def set_path(self, path: str) -> DatabaseBuilder:
        self.path = str(path)
        return self

    def set_connection_string(self, connection_string: str) -> DatabaseBuilder:
        self.connection_string = connection_string
        return self

    def set_database_name(self, database_name: str) -> DatabaseBuilder:
        self.database_name = database_name
        return self

    def set_username(self, username: str) -> DatabaseBuilder:
        self.username = username
        return self

    def set_password(self, password: str) -> DatabaseBuilder:
        self.password = password
        return self

    def set_debug_mode(self, enabled: bool = True) -> DatabaseBuilder:
        self.debug = enabled
        return self

    def set_option(self, key: str, value: Any) -> DatabaseBuilder:
        """Pass a driver-specific option through to the engine."""
        self.options[key] = value
        return self

    # -- Shortcuts -----------------------------------------------------

    def set_sqlite(self, path: str) -> DatabaseBuilder:
        return self.set_type(DatabaseType.SQLITE).set_path(path)

    def set_mysql(
        self, connection_string: str, username: str | None = None, password: str | None = None
    ) -> DatabaseBuilder:
        self.set_type(DatabaseType.MYSQL).set_connection_string(connection_string)
        self.username = username
        self.password = password
        return self

    def set_mongo(self, connection_string: str, database_name: str) -> DatabaseBuilder:
        return (
            self.set_type(DatabaseType.MONGO)
            .set_connection_string(connection_string)
            .set_database_name(database_name)
        )

    # -- Build ---------------------------------------------------------

    def validate(self) -> DatabaseConfig:
        """Check the fields required by the selected type.

        Raises:
            MissingConfigError: a required field is not set.
            ConfigurationError: the type is unknown.
        """
        db_type = _parse_type(self.type)

        if db_type is DatabaseType.SQLITE:
            if not self.path:
                raise MissingConfigError("path", "You must specify a path for a SQLite database")

        elif db_type is DatabaseType.MYSQL:
            if not self.connection_string:
                raise MissingConfigError(
                    "connection_string", "You must specify a connection string for a MySQL database"
                )
            if self.username is not None and self.password is None:
                raise MissingConfigError(
                    "password", "You must specify a password for a MySQL database if you provide a username"
                )
            if self.password is not None and self.username is None:
                raise MissingConfigError(
                    "username", "You must specify a username for a MySQL database if you provide a password"
                )

        elif db_type is DatabaseType.MONGO:
            if not self.connection_string:
                raise MissingConfigError(
                    "connection_string", "You must specify a connection string for a Mongo database"
                )
            if not self.database_name:
                raise MissingConfigError(
                    "database_name", "You must specify a database name for a Mongo database"
                )

        return DatabaseConfig(
            db_type=db_type,
            path=self.path,
            connection_string=self.connection_string,
            database_name=self.database_name,
            username=self.username,
            password=self.password,
            options=dict(self.options),
        )

    def build(self, connect: bool = True) -> DatabaseEngine:
        """Create the engine and, by default, connect it.

        A failed connection does not raise: the returned engine reports
        ``is_enabled() == False``.
        """
        config = self.validate()
        engine = engine_registry.create(config)
        engine.set_debug_mode(self.debug)
        logger.debug("database_built", database=config.db_type.value)
        if connect:
            engine.connect()
        return engine


__all__ = [
    "DatabaseBuilder",
    "EngineRegistry",
    "engine_registry",
]

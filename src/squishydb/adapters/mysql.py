"""MySQL database engine.

Uses ``mysql.connector`` from the ``mysql-connector-python`` package.
MySQL uses **format** (``%s``) placeholder style.

This engine is import-guarded: if ``mysql.connector`` is not installed a
clear :class:`~squishydb.errors.ConfigurationError` is raised at
``connect()`` time.
"""

from __future__ import annotations

from typing import Any

from squishydb.errors import ConfigurationError

from .sql import SQLDatabase
from .types import DatabaseConfig, DatabaseType, parse_mysql_url


def _import_connector() -> Any:
    try:
        import mysql.connector
    except ImportError:
        raise ConfigurationError(
            "mysql-connector-python is required for MySQL. "
            "Install with: pip install mysql-connector-python"
        ) from None
    return mysql.connector


class MySQLDatabase(SQLDatabase):
    """MySQL / MariaDB database engine over a single connection."""

    def __init__(
        self,
        connection_string: str,
        username: str | None = None,
        password: str | None = None,
        *,
        connect_timeout: int = 10,
        charset: str = "utf8mb4",
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=DatabaseType.MYSQL,
            connection_string=connection_string,
            username=username,
            password=password,
            connect_timeout=connect_timeout,
            options={**kwargs, "charset": charset},
        )
        super().__init__(config)

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> MySQLDatabase:
        return cls(
            config.connection_string or "",
            config.username,
            config.password,
            connect_timeout=config.connect_timeout,
            **config.options,
        )

    def _driver_errors(self) -> tuple[type[BaseException], ...]:
        return (_import_connector().Error,)

    def _open(self) -> None:
        connector = _import_connector()
        target = parse_mysql_url(self._config.connection_string or "")
        options = dict(self._config.options)

        self._conn = connector.connect(
            host=target["host"],
            port=target["port"],
            database=target["database"],
            user=self._config.username or target["user"],
            password=self._config.password or target["password"],
            charset=options.pop("charset", "utf8mb4"),
            connect_timeout=self._config.connect_timeout,
            autocommit=False,
            **options,
        )


__all__ = [
    "MySQLDatabase",
]

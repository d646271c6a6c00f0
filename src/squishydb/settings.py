"""Environment-driven database settings.

``DatabaseSettings`` reads the connection description from ``SQUISHY_*``
environment variables (and an optional ``.env`` file) so applications can
build an engine without hard-coding credentials.

Examples:
    >>> import os
    >>> os.environ["SQUISHY_TYPE"] = "sqlite"
    >>> os.environ["SQUISHY_PATH"] = "data/app.db"
    >>> from squishydb.adapters.builder import DatabaseBuilder
    >>> db = DatabaseBuilder.from_settings(DatabaseSettings()).build()

Environment variables
─────────────────────
SQUISHY_TYPE               sqlite | mysql | mongo
SQUISHY_PATH               SQLite database file
SQUISHY_CONNECTION_STRING  MySQL / Mongo URL
SQUISHY_DATABASE_NAME      Mongo database
SQUISHY_USERNAME           MySQL user
SQUISHY_PASSWORD           MySQL password
SQUISHY_DEBUG              log every statement
SQUISHY_LOG_LEVEL          structlog level

Tags:
    settings, configuration, pydantic, environment, squishydb
"""

from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from squishydb.adapters.types import DatabaseType


class DatabaseSettings(BaseSettings):
    """Connection settings for one engine."""

    model_config = SettingsConfigDict(
        env_prefix="SQUISHY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Backend ──────────────────────────────────────────────────
    type: DatabaseType = DatabaseType.SQLITE
    path: str | None = None
    connection_string: str | None = None
    database_name: str | None = None

    # ── Credentials ──────────────────────────────────────────────
    username: str | None = None
    password: SecretStr | None = None

    # ── Observability ────────────────────────────────────────────
    debug: bool = False
    log_level: str = Field(default="INFO", description="Structlog log level")

    def password_value(self) -> str | None:
        return self.password.get_secret_value() if self.password is not None else None


__all__ = [
    "DatabaseSettings",
]

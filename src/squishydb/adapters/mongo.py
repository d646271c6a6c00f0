"""MongoDB document-store engine.

Uses ``pymongo``. Each table is a collection and each record a document
keyed by its declared field names; queries become filter documents.

The engine is import-guarded like the SQL drivers: without ``pymongo`` a
:class:`~squishydb.errors.ConfigurationError` is raised at ``connect()``.

Tags:
    mongodb, document-store, pymongo, squishydb
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from squishydb.errors import ConfigurationError
from squishydb.query import Query
from squishydb.statements import TableDefinition

from .base import DatabaseEngine
from .types import DatabaseConfig, DatabaseType


def _import_pymongo() -> Any:
    try:
        import bson.errors
        import pymongo
        import pymongo.errors
    except ImportError:
        raise ConfigurationError(
            "pymongo is required for MongoDB. Install with: pip install pymongo"
        ) from None
    return pymongo


def _filter(query: Query | None) -> dict[str, Any]:
    return query.to_document_filter() if query is not None else {}


class MongoDatabase(DatabaseEngine):
    """
    MongoDB engine.

    ``ensure_table`` creates the collection when it is missing and keeps a
    unique index on the primary-key field. Documents are read back without
    Mongo's ``_id``; a declared field absent from a stored document reads
    back as ``None``.
    """

    def __init__(
        self,
        connection_string: str,
        database_name: str,
        *,
        connect_timeout: int = 10,
        **kwargs: Any,
    ):
        config = DatabaseConfig(
            db_type=DatabaseType.MONGO,
            connection_string=connection_string,
            database_name=database_name,
            connect_timeout=connect_timeout,
            options=kwargs,
        )
        super().__init__(config)
        self._client: Any = None
        self._db: Any = None

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> MongoDatabase:
        options = dict(config.options)
        if config.username is not None:
            options.setdefault("username", config.username)
        if config.password is not None:
            options.setdefault("password", config.password)
        return cls(
            config.connection_string or "",
            config.database_name or "",
            connect_timeout=config.connect_timeout,
            **options,
        )

    def _driver_errors(self) -> tuple[type[BaseException], ...]:
        pymongo = _import_pymongo()
        import bson.errors

        return (pymongo.errors.PyMongoError, bson.errors.BSONError, OverflowError)

    def _open(self) -> None:
        pymongo = _import_pymongo()
        client = pymongo.MongoClient(
            self._config.connection_string,
            serverSelectionTimeoutMS=self._config.connect_timeout * 1000,
            **self._config.options,
        )
        try:
            client.admin.command("ping")
        except pymongo.errors.PyMongoError:
            client.close()
            raise
        self._client = client
        self._db = client[self._config.database_name]

    def _close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
            self._db = None

    def _collection(self, name: str) -> Any:
        return self._db[name]

    # -- DatabaseEngine primitives -----------------------------------------

    def _table_exists(self, name: str) -> bool:
        return name in self._db.list_collection_names()

    def _column_names(self, name: str) -> list[str]:
        document = self._collection(name).find_one({}, {"_id": False})
        return list(document) if document else []

    def _ensure(self, definition: TableDefinition) -> None:
        if not self._table_exists(definition.name):
            self._trace("create_collection", collection=definition.name)
            self._db.create_collection(definition.name)
            self._log.info("table_created", table=definition.name)

        key = definition.primary_key.name
        self._trace("create_index", collection=definition.name, key=key)
        self._collection(definition.name).create_index(key, unique=True)

    def _write_row(self, definition: TableDefinition, payload: Mapping[str, Any]) -> None:
        key = definition.primary_key.name
        selector = {key: payload[key]}
        self._trace("replace_one", collection=definition.name, filter=selector, document=dict(payload))
        self._collection(definition.name).replace_one(selector, dict(payload), upsert=True)

    def _update_row(self, definition: TableDefinition, payload: Mapping[str, Any]) -> None:
        key = definition.primary_key.name
        selector = {key: payload[key]}
        changes = {k: v for k, v in payload.items() if k != key}
        self._trace("update_one", collection=definition.name, filter=selector, update=changes)
        if changes:
            self._collection(definition.name).update_one(selector, {"$set": changes})

    def _select_rows(
        self, definition: TableDefinition, query: Query | None, limit: int | None
    ) -> list[dict[str, Any]]:
        selector = _filter(query)
        self._trace("find", collection=definition.name, filter=selector, limit=limit)
        cursor = self._collection(definition.name).find(selector, {"_id": False})
        if limit is not None:
            cursor = cursor.limit(limit)
        # documents written before a field was declared simply lack it
        names = [d.name for d in definition.fields]
        return [{name: document.get(name) for name in names} for document in cursor]

    def _delete_rows(self, definition: TableDefinition, query: Query | None) -> int:
        selector = _filter(query)
        self._trace("delete_many", collection=definition.name, filter=selector)
        return self._collection(definition.name).delete_many(selector).deleted_count

    def _count_rows(self, definition: TableDefinition, query: Query | None) -> int:
        selector = _filter(query)
        self._trace("count_documents", collection=definition.name, filter=selector)
        return self._collection(definition.name).count_documents(selector)


__all__ = [
    "MongoDatabase",
]

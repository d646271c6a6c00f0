"""Tests for ``squishydb.adapters.mongo`` — MongoDB engine over a mocked client."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from unittest.mock import MagicMock, patch

import bson.errors
import pymongo.errors
import pytest
from structlog.testing import capture_logs

from squishydb.adapters.mongo import MongoDatabase
from squishydb.adapters.types import DatabaseConfig, DatabaseType, EngineState
from squishydb.errors import ConfigurationError, SchemaError
from squishydb.query import Query
from squishydb.record import Record, field, ignored, primary
from squishydb.statements import TableDefinition


@dataclass
class Customer(Record):
    identifier: str = primary()
    name: str = field()
    tags: list = field()
    session: str = ignored()


@dataclass
class Keyless(Record):
    name: str = field()


@dataclass
class Event(Record):
    identifier: str = primary()
    happened: date = field()


CUSTOMER = TableDefinition.of("customer", Customer)


@pytest.fixture
def mongo():
    """Patched ``MongoClient`` yielding ``(client, database, collection)`` mocks."""
    with patch("pymongo.MongoClient") as mock_client_cls:
        client = MagicMock()
        database = MagicMock()
        collection = MagicMock()
        mock_client_cls.return_value = client
        client.__getitem__.return_value = database
        database.__getitem__.return_value = collection
        yield mock_client_cls, client, database, collection


@pytest.fixture
def db(mongo):
    engine = MongoDatabase("mongodb://localhost:27017", "shop")
    engine.connect()
    yield engine
    engine.disconnect()


class TestMongoConnect:
    def test_connect(self, mongo):
        mock_client_cls, client, _, _ = mongo
        engine = MongoDatabase("mongodb://localhost:27017", "shop", connect_timeout=2)
        assert engine.connect() is True

        mock_client_cls.assert_called_once_with("mongodb://localhost:27017", serverSelectionTimeoutMS=2000)
        client.admin.command.assert_called_once_with("ping")
        client.__getitem__.assert_called_once_with("shop")
        assert engine.db_type is DatabaseType.MONGO

    def test_ping_failure_disables(self, mongo):
        _, client, _, _ = mongo
        client.admin.command.side_effect = pymongo.errors.ServerSelectionTimeoutError("no servers")
        engine = MongoDatabase("mongodb://nowhere:27017", "shop")
        with capture_logs() as logs:
            assert engine.connect() is False
        assert engine.state is EngineState.DISABLED
        client.close.assert_called_once()
        assert logs[0]["event"] == "database_connect_failed"
        assert logs[0]["database"] == "mongo"

    def test_missing_driver(self):
        engine = MongoDatabase("mongodb://localhost", "shop")
        with patch.dict("sys.modules", {"pymongo": None, "pymongo.errors": None}):
            with pytest.raises(ConfigurationError, match="pip install pymongo"):
                engine.connect()

    def test_from_config_passes_credentials(self, mongo):
        mock_client_cls, _, _, _ = mongo
        config = DatabaseConfig(
            db_type=DatabaseType.MONGO,
            connection_string="mongodb://localhost",
            database_name="shop",
            username="smudge",
            password="secret",
        )
        MongoDatabase.from_config(config).connect()
        kwargs = mock_client_cls.call_args.kwargs
        assert kwargs["username"] == "smudge"
        assert kwargs["password"] == "secret"

    def test_disconnect_closes_client(self, mongo):
        _, client, _, _ = mongo
        engine = MongoDatabase("mongodb://localhost", "shop")
        engine.connect()
        engine.disconnect()
        client.close.assert_called_once()
        assert engine.is_enabled() is False


class TestMongoEnsure:
    def test_creates_collection_and_index(self, db, mongo):
        _, _, database, collection = mongo
        database.list_collection_names.return_value = []

        with capture_logs() as logs:
            assert db.ensure_table(CUSTOMER) is True

        database.create_collection.assert_called_once_with("customer")
        collection.create_index.assert_called_once_with("identifier", unique=True)
        assert any(e["event"] == "table_created" for e in logs)

    def test_existing_collection(self, db, mongo):
        _, _, database, collection = mongo
        database.list_collection_names.return_value = ["customer"]

        assert db.ensure_table(CUSTOMER) is True
        database.create_collection.assert_not_called()
        collection.create_index.assert_called_once_with("identifier", unique=True)

    def test_no_primary_key(self, db):
        with pytest.raises(SchemaError):
            db.ensure_table(TableDefinition.of("keyless", Keyless))

    def test_table_exists(self, db, mongo):
        _, _, database, _ = mongo
        database.list_collection_names.return_value = ["customer"]
        assert db.table_exists("customer") is True
        assert db.table_exists("orders") is False

    def test_column_names(self, db, mongo):
        _, _, _, collection = mongo
        collection.find_one.return_value = {"identifier": "u1", "name": "Smudge"}
        assert db.column_names("customer") == ["identifier", "name"]
        collection.find_one.assert_called_once_with({}, {"_id": False})


class TestMongoRecords:
    def test_insert_is_upsert(self, db, mongo):
        _, _, _, collection = mongo
        assert db.insert_record(CUSTOMER, Customer("u1", "Smudge", ["vip"], session="x")) is True
        collection.replace_one.assert_called_once_with(
            {"identifier": "u1"},
            {"identifier": "u1", "name": "Smudge", "tags": ["vip"]},
            upsert=True,
        )

    def test_update_sets_non_key_fields(self, db, mongo):
        _, _, _, collection = mongo
        assert db.update_record(CUSTOMER, Customer("u1", "Whiskers")) is True
        collection.update_one.assert_called_once_with(
            {"identifier": "u1"}, {"$set": {"name": "Whiskers", "tags": None}}
        )

    def test_get_first_record(self, db, mongo):
        _, _, _, collection = mongo
        cursor = MagicMock()
        cursor.limit.return_value = iter([{"identifier": "u1", "name": "Smudge", "tags": []}])
        collection.find.return_value = cursor

        record = db.get_first_record(CUSTOMER, Query().match("identifier", "u1"))

        assert record == Customer("u1", "Smudge", [])
        collection.find.assert_called_once_with({"identifier": "u1"}, {"_id": False})
        cursor.limit.assert_called_once_with(1)

    def test_get_record_list_in_iteration_order(self, db, mongo):
        _, _, _, collection = mongo
        collection.find.return_value = iter(
            [
                {"identifier": "u1", "name": "Smudge", "tags": None},
                {"identifier": "u2", "name": "Smudge", "tags": None},
            ]
        )
        records = db.get_record_list(CUSTOMER, Query().match("name", "Smudge"))
        assert [r.identifier for r in records] == ["u1", "u2"]

    def test_missing_document_field_reads_none(self, db, mongo):
        _, _, _, collection = mongo
        collection.find.return_value = iter([{"identifier": "u1", "name": "Smudge"}])
        assert db.get_record_list(CUSTOMER) == [Customer("u1", "Smudge", None)]
        collection.find.assert_called_once_with({}, {"_id": False})

    def test_remove_record(self, db, mongo):
        _, _, _, collection = mongo
        collection.delete_many.return_value.deleted_count = 2
        assert db.remove_record(CUSTOMER, Query().match("name", "Smudge")) == 2
        collection.delete_many.assert_called_once_with({"name": "Smudge"})

    def test_count_records(self, db, mongo):
        _, _, _, collection = mongo
        collection.count_documents.return_value = 5
        assert db.count_records(CUSTOMER) == 5
        collection.count_documents.assert_called_once_with({})

    def test_driver_error_disables(self, db, mongo):
        _, _, _, collection = mongo
        collection.replace_one.side_effect = pymongo.errors.OperationFailure("not authorized")

        with capture_logs() as logs:
            assert db.insert_record(CUSTOMER, Customer("u1", "Smudge")) is False

        assert db.is_enabled() is False
        assert [e["event"] for e in logs] == ["statement_failed", "database_disabled"]
        assert db.count_records(CUSTOMER) == 0
        collection.count_documents.assert_not_called()

    def test_unencodable_value_disables(self, db, mongo):
        _, _, _, collection = mongo
        collection.replace_one.side_effect = bson.errors.InvalidDocument(
            "cannot encode object: datetime.date(2024, 1, 1)"
        )
        event = TableDefinition.of("event", Event)

        with capture_logs() as logs:
            assert db.insert_record(event, Event("e1", date(2024, 1, 1))) is False

        assert db.is_enabled() is False
        assert logs[0]["event"] == "statement_failed"
        assert logs[0]["context"]["operation"] == "insert_record"

    def test_oversized_integer_disables(self, db, mongo):
        _, _, _, collection = mongo
        collection.update_one.side_effect = OverflowError("MongoDB can only handle up to 8-byte ints")
        assert db.update_record(CUSTOMER, Customer("u1", "Smudge", [2**64])) is False
        assert db.is_enabled() is False

    def test_debug_logs_structured_filter(self, db):
        db.set_debug_mode(True)
        with capture_logs() as logs:
            db.remove_record(CUSTOMER, Query().match("name", "Smudge"))
        traced = next(e for e in logs if e["event"] == "statement_execute")
        assert traced["operation"] == "delete_many"
        assert traced["filter"] == {"name": "Smudge"}
        assert traced["collection"] == "customer"

"""Database engine base class.

Manifesto:
    Every backend shares the same lifecycle and the same failure policy.
    The abstract base owns both, so a concrete engine only supplies the
    backend-specific primitives (open a connection, ensure a table, read
    and write rows).

Features:
    - ``EngineState`` lifecycle: CREATED -> CONNECTING -> ENABLED | DISABLED
    - Contained failures: a driver error disables the engine, is logged as
      a structured ``ExecutionError`` and becomes a failure result
    - Programmer errors (``SchemaError``) and read-side ``MarshalError``
      still propagate to the caller
    - Debug mode surfaces every statement before it runs
    - Context-manager protocol for connection lifecycle

Tags:
    squishydb, database, abstract-base, adapter-pattern, state-machine

Doc-Types:
    api-reference
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, TypeVar

from squishydb.errors import (
    ConfigurationError,
    DatabaseConnectionError,
    ExecutionError,
    SquishyError,
)
from squishydb.logging import get_logger
from squishydb.query import Query
from squishydb.record.fields import FieldDescriptor
from squishydb.record.marshal import from_read_row, to_write_payload
from squishydb.statements import TableDefinition

from .types import DatabaseConfig, DatabaseType, EngineState

if TYPE_CHECKING:
    from squishydb.table import TableAdapter

T = TypeVar("T")


class DatabaseEngine(ABC):
    """
    Abstract base class for database engines.

    The engine exclusively owns its connection/session handle. It is not
    thread-safe: callers sharing an engine must serialize access.
    """

    def __init__(self, config: DatabaseConfig):
        self._config = config
        self._state = EngineState.CREATED
        self._debug = False

    # -- Introspection -----------------------------------------------------

    @property
    def _log(self) -> Any:
        return get_logger(__name__).bind(database=self._config.db_type.value)

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    @property
    def db_type(self) -> DatabaseType:
        return self._config.db_type

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def debug_mode(self) -> bool:
        return self._debug

    def is_enabled(self) -> bool:
        """Whether statements can still be executed on this engine."""
        return self._state is EngineState.ENABLED

    def set_debug_mode(self, enabled: bool = True) -> DatabaseEngine:
        """Log every statement before it runs. Returns ``self`` for chaining."""
        self._debug = enabled
        return self

    # -- Backend primitives ------------------------------------------------

    @abstractmethod
    def _driver_errors(self) -> tuple[type[BaseException], ...]:
        """Exception types the driver raises for I/O and statement failures."""
        ...

    @abstractmethod
    def _open(self) -> None:
        """Open the connection/session handle."""
        ...

    @abstractmethod
    def _close(self) -> None:
        """Close the connection/session handle."""
        ...

    @abstractmethod
    def _table_exists(self, name: str) -> bool:
        ...

    @abstractmethod
    def _column_names(self, name: str) -> list[str]:
        ...

    @abstractmethod
    def _ensure(self, definition: TableDefinition) -> None:
        """Create the table, or add any columns it is missing."""
        ...

    @abstractmethod
    def _write_row(self, definition: TableDefinition, payload: Mapping[str, Any]) -> None:
        """Insert the row, replacing one with the same primary key."""
        ...

    @abstractmethod
    def _update_row(self, definition: TableDefinition, payload: Mapping[str, Any]) -> None:
        ...

    @abstractmethod
    def _select_rows(
        self, definition: TableDefinition, query: Query | None, limit: int | None
    ) -> list[Mapping[str, Any]]:
        ...

    @abstractmethod
    def _delete_rows(self, definition: TableDefinition, query: Query | None) -> int:
        ...

    @abstractmethod
    def _count_rows(self, definition: TableDefinition, query: Query | None) -> int:
        ...

    # -- Lifecycle ---------------------------------------------------------

    def connect(self) -> bool:
        """Open the connection once.

        A failed connect leaves the engine disabled; there is no retry.
        A missing driver is a configuration problem and is raised.
        """
        if self._state is not EngineState.CREATED:
            return self.is_enabled()

        self._state = EngineState.CONNECTING
        try:
            self._open()
        except ConfigurationError:
            self._state = EngineState.DISABLED
            raise
        except self._driver_errors() as e:
            error = DatabaseConnectionError(
                f"Failed to connect to {self.db_type.value}: {e}",
                cause=e,
            )
            self._log.error("database_connect_failed", **error.to_dict())
            self._state = EngineState.DISABLED
            return False

        self._state = EngineState.ENABLED
        self._log.info("database_connected")
        return True

    def disconnect(self) -> None:
        """Close the connection. The engine cannot be reused afterwards."""
        if self._state is EngineState.ENABLED:
            self._close()
            self._log.info("database_disconnected")
        self._state = EngineState.DISABLED

    def _disable(self, error: SquishyError) -> None:
        self._log.error("statement_failed", **error.to_dict())
        if self._state is not EngineState.DISABLED:
            self._state = EngineState.DISABLED
            self._log.warning("database_disabled", reason=error.message)

    def _run(self, operation: str, action: Callable[[], T], failure: T, **context: Any) -> T:
        """Run ``action`` under the disable-on-failure policy."""
        if not self.is_enabled():
            if self._debug:
                self._log.info("operation_skipped", operation=operation, state=self._state.value, **context)
            return failure
        try:
            return action()
        except self._driver_errors() as e:
            self._disable(
                ExecutionError(f"{operation} failed: {e}", cause=e, operation=operation, **context)
            )
            return failure

    def _trace(self, operation: str, **details: Any) -> None:
        if self._debug:
            self._log.info("statement_execute", operation=operation, **details)

    # -- Schema ------------------------------------------------------------

    def table_exists(self, name: str) -> bool:
        return self._run("table_exists", lambda: self._table_exists(name), False, table=name)

    def column_names(self, name: str) -> list[str]:
        return self._run("column_names", lambda: self._column_names(name), [], table=name)

    def _validate(self, definition: TableDefinition) -> None:
        definition.validate()

    def ensure_table(self, definition: TableDefinition) -> bool:
        """Create the table if absent, else add missing columns (additive only).

        Raises:
            SchemaError: the record declaration is unusable; raised even when
                the engine is disabled.
        """
        self._validate(definition)

        def action() -> bool:
            self._ensure(definition)
            return True

        return self._run("ensure_table", action, False, table=definition.name)

    def create_table(self, table: TableAdapter[Any]) -> bool:
        """Link ``table`` to this engine and ensure its table exists."""
        table.link(self)
        return self.ensure_table(table.definition)

    # -- Records -----------------------------------------------------------

    def _payload(self, definition: TableDefinition, record: Any) -> dict[str, Any]:
        return to_write_payload(record)

    def _read_fields(self, definition: TableDefinition) -> list[FieldDescriptor]:
        """Fields every returned row must carry."""
        return list(definition.fields)

    def insert_record(self, definition: TableDefinition, record: Any) -> bool:
        self._validate(definition)
        payload = self._payload(definition, record)

        def action() -> bool:
            self._write_row(definition, payload)
            return True

        return self._run("insert_record", action, False, table=definition.name)

    def update_record(self, definition: TableDefinition, record: Any) -> bool:
        """Overwrite the stored row that shares ``record``'s primary key."""
        self._validate(definition)
        payload = self._payload(definition, record)

        def action() -> bool:
            self._update_row(definition, payload)
            return True

        return self._run("update_record", action, False, table=definition.name)

    def get_first_record(self, definition: TableDefinition, query: Query | None = None) -> Any | None:
        rows = self._run(
            "get_first_record",
            lambda: self._select_rows(definition, query, 1),
            [],
            table=definition.name,
        )
        if not rows:
            return None
        return from_read_row(rows[0], definition.record_type, self._read_fields(definition))

    def get_record_list(self, definition: TableDefinition, query: Query | None = None) -> list[Any]:
        rows = self._run(
            "get_record_list",
            lambda: self._select_rows(definition, query, None),
            [],
            table=definition.name,
        )
        fields = self._read_fields(definition)
        return [from_read_row(row, definition.record_type, fields) for row in rows]

    def remove_record(self, definition: TableDefinition, query: Query | None = None) -> int:
        """Delete matching rows and return how many were removed."""
        return self._run(
            "remove_record",
            lambda: self._delete_rows(definition, query),
            0,
            table=definition.name,
        )

    def count_records(self, definition: TableDefinition, query: Query | None = None) -> int:
        return self._run(
            "count_records",
            lambda: self._count_rows(definition, query),
            0,
            table=definition.name,
        )

    # -- Context manager ---------------------------------------------------

    def __enter__(self) -> DatabaseEngine:
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(state={self._state.value})"


__all__ = [
    "DatabaseEngine",
]

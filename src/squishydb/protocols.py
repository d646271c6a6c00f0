"""
Canonical protocol definitions for squishydb.

``Database`` is the capability contract every engine satisfies. Table
adapters and application code depend on this shape only, never on a
concrete backend class.

Architecture:
    ::

        Database Protocol:
        ┌──────────────────────────────────────────────────────────────┐
        │ connect() / disconnect()          → lifecycle                │
        │ is_enabled() / set_debug_mode()   → state & observability    │
        │ ensure_table(definition)          → create / migrate         │
        │ create_table(table_adapter)       → link + ensure            │
        │ insert_record / update_record     → bool                     │
        │ get_first_record                  → record | None            │
        │ get_record_list                   → list[record]             │
        │ remove_record / count_records     → int                      │
        └──────────────────────────────────────────────────────────────┘

        Implementations:
        ┌──────────────────────────────────────────────────────────────┐
        │ SQLiteDatabase  → sqlite3 (stdlib)                           │
        │ MySQLDatabase   → mysql.connector                            │
        │ MongoDatabase   → pymongo                                    │
        └──────────────────────────────────────────────────────────────┘

Guardrails:
    ❌ DON'T: Type-hint against SQLiteDatabase in application code
    ✅ DO: Accept a ``Database`` and let the builder pick the backend

    ❌ DON'T: Expect thread-safety; one in-flight statement per engine
    ✅ DO: Serialize access to a shared engine externally
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from squishydb.query import Query
    from squishydb.statements import TableDefinition


@runtime_checkable
class Database(Protocol):
    """Backend-independent engine contract."""

    def connect(self) -> bool:
        ...

    def disconnect(self) -> None:
        ...

    def is_enabled(self) -> bool:
        ...

    def set_debug_mode(self, enabled: bool = True) -> Database:
        ...

    def ensure_table(self, definition: TableDefinition) -> bool:
        ...

    def create_table(self, table: Any) -> bool:
        ...

    def insert_record(self, definition: TableDefinition, record: Any) -> bool:
        ...

    def update_record(self, definition: TableDefinition, record: Any) -> bool:
        ...

    def get_first_record(self, definition: TableDefinition, query: Query | None = None) -> Any | None:
        ...

    def get_record_list(self, definition: TableDefinition, query: Query | None = None) -> list[Any]:
        ...

    def remove_record(self, definition: TableDefinition, query: Query | None = None) -> int:
        ...

    def count_records(self, definition: TableDefinition, query: Query | None = None) -> int:
        ...


__all__ = [
    "Database",
]

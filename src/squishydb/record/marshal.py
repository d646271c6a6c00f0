"""Conversion between record instances and backend payloads / rows."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

from squishydb.errors import MarshalError
from squishydb.query import Query

from .fields import FieldDescriptor, classify

R = TypeVar("R")


def to_write_payload(record: Any) -> dict[str, Any]:
    """Map every persisted field name to its value, ``None`` included."""
    return {d.name: getattr(record, d.name) for d in classify(record)}


def as_query(record: Any) -> Query:
    """Build a query matching the record's non-``None`` persisted fields.

    A ``None`` value is never translated into ``column IS NULL``; the field
    is left out of the filter instead.
    """
    query = Query()
    for name, value in to_write_payload(record).items():
        if value is None:
            continue
        query.match(name, value)
    return query


def _coerce(value: Any, descriptor: FieldDescriptor) -> Any:
    if value is None:
        return None
    value_type = descriptor.value_type
    # SQLite and MySQL hand booleans back as 0/1
    if value_type is bool and not isinstance(value, bool):
        return bool(value)
    if value_type is float and isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    return value


def _as_mapping(row: Any) -> Mapping[str, Any]:
    if isinstance(row, Mapping):
        return row
    # sqlite3.Row and similar keyed rows
    if hasattr(row, "keys"):
        return {key: row[key] for key in row.keys()}
    raise MarshalError(f"Unsupported row type: {type(row).__name__}")


def from_read_row(
    row: Any, record_type: type[R], descriptors: Sequence[FieldDescriptor] | None = None
) -> R:
    """Build a new ``record_type`` instance from a row or document.

    ``descriptors`` limits the fields read from the row (for example to the
    ones a SQL table has columns for); the remaining fields keep their
    declared defaults.

    Raises:
        MarshalError: if a declared, non-ignored field is missing from the row.
    """
    mapping = _as_mapping(row)
    values: dict[str, Any] = {}
    for descriptor in descriptors if descriptors is not None else classify(record_type):
        if descriptor.name not in mapping:
            raise MarshalError(
                f"Field '{descriptor.name}' missing from row for {record_type.__name__}",
                field=descriptor.name,
                record_type=record_type.__name__,
                columns=sorted(mapping),
            )
        values[descriptor.name] = _coerce(mapping[descriptor.name], descriptor)
    return record_type(**values)


__all__ = [
    "to_write_payload",
    "as_query",
    "from_read_row",
]

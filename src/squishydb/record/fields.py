"""Field declaration helpers and the field classifier.

A record type is a dataclass whose fields are declared through the helpers
in this module. Each helper is a thin wrapper around
:func:`dataclasses.field` that stores the persistence role in the field
metadata, so the schema is spelled out explicitly in the class body::

    @dataclass
    class Customer(Record):
        identifier: str = primary()
        name: str = field()
        account: str = foreign("account", "identifier")
        cache_hint: str = ignored()

A field declared without a helper is an ordinary field.

:func:`classify` turns a record type (or instance) into an ordered list of
:class:`FieldDescriptor` values. Descriptors are derived on every call and
are never cached, so they always reflect the current class declaration.
"""

from __future__ import annotations

import dataclasses
import types
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from squishydb.errors import SchemaError

_ROLE_KEY = "squishydb.role"
_REFERENCE_KEY = "squishydb.reference"
_IGNORED_KEY = "squishydb.ignored"


class FieldRole(str, Enum):
    """Persistence role of a record field."""

    PRIMARY = "primary"
    FIELD = "field"
    FOREIGN = "foreign"


@dataclass(frozen=True)
class ForeignReference:
    """The (table, field) pair a foreign field points at."""

    table: str
    field: str


@dataclass(frozen=True)
class FieldDescriptor:
    """Derived metadata describing one field of a record type."""

    name: str
    value_type: Any
    role: FieldRole = FieldRole.FIELD
    ignored: bool = False
    reference: ForeignReference | None = None

    @property
    def is_primary(self) -> bool:
        return self.role is FieldRole.PRIMARY


# -- Declaration helpers ---------------------------------------------------


def _declare(default: Any, metadata: dict[str, Any]) -> Any:
    return dataclasses.field(default=default, metadata=metadata)


def primary(*, default: Any = None) -> Any:
    """Declare the primary-key field of a record type."""
    return _declare(default, {_ROLE_KEY: FieldRole.PRIMARY})


def field(*, default: Any = None) -> Any:
    """Declare an ordinary persisted field."""
    return _declare(default, {_ROLE_KEY: FieldRole.FIELD})


def foreign(table: str | None = None, field: str | None = None, *, default: Any = None) -> Any:
    """Declare a foreign-key field referencing ``table(field)``.

    Both parts of the reference are required for the table to be created;
    a foreign field missing either one is reported as a :class:`SchemaError`
    when the table is ensured, not here.
    """
    metadata: dict[str, Any] = {_ROLE_KEY: FieldRole.FOREIGN}
    if table is not None and field is not None:
        metadata[_REFERENCE_KEY] = ForeignReference(table, field)
    return _declare(default, metadata)


def ignored(*, default: Any = None) -> Any:
    """Declare a field that is never persisted."""
    return _declare(default, {_IGNORED_KEY: True})


# -- Classification --------------------------------------------------------


def _unwrap_optional(annotation: Any) -> Any:
    """``Optional[X]`` / ``X | None`` -> ``X``; anything else unchanged."""
    origin = typing.get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _record_type(record_or_type: Any) -> type:
    record_type = record_or_type if isinstance(record_or_type, type) else type(record_or_type)
    if not dataclasses.is_dataclass(record_type):
        raise SchemaError(
            f"Record type {record_type.__name__} must be declared as a dataclass",
            record_type=record_type.__name__,
        )
    return record_type


def describe_fields(record_or_type: Any) -> list[FieldDescriptor]:
    """Return descriptors for every declared field, ignored ones included."""
    record_type = _record_type(record_or_type)
    hints = typing.get_type_hints(record_type)

    descriptors = []
    for dc_field in dataclasses.fields(record_type):
        metadata = dc_field.metadata
        descriptors.append(
            FieldDescriptor(
                name=dc_field.name,
                value_type=_unwrap_optional(hints.get(dc_field.name, Any)),
                role=metadata.get(_ROLE_KEY, FieldRole.FIELD),
                ignored=bool(metadata.get(_IGNORED_KEY, False)),
                reference=metadata.get(_REFERENCE_KEY),
            )
        )
    return descriptors


def classify(record_or_type: Any) -> list[FieldDescriptor]:
    """Return the persisted field descriptors in declaration order."""
    return [d for d in describe_fields(record_or_type) if not d.ignored]


def filter_by_role(descriptors: list[FieldDescriptor], role: FieldRole) -> list[FieldDescriptor]:
    """Subsequence of ``descriptors`` with the given role, order preserved."""
    return [d for d in descriptors if d.role is role]


def primary_key(descriptors: list[FieldDescriptor], *, table: str | None = None) -> FieldDescriptor:
    """Return the single primary-key descriptor.

    Raises:
        SchemaError: if there is no primary field or more than one.
    """
    keys = filter_by_role(descriptors, FieldRole.PRIMARY)
    if not keys:
        raise SchemaError("Record type declares no primary key field", table=table)
    if len(keys) > 1:
        raise SchemaError(
            "Record type declares more than one primary key field",
            table=table,
            fields=[k.name for k in keys],
        )
    return keys[0]


__all__ = [
    "FieldRole",
    "ForeignReference",
    "FieldDescriptor",
    "primary",
    "field",
    "foreign",
    "ignored",
    "describe_fields",
    "classify",
    "filter_by_role",
    "primary_key",
]

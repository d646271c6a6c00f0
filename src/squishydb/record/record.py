"""Record base class."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from squishydb.query import Query

from . import marshal
from .fields import FieldDescriptor, FieldRole, classify, filter_by_role, primary_key


@dataclass
class Record:
    """Base class for persisted record types.

    Subclasses are dataclasses whose fields are declared with
    :func:`~squishydb.record.fields.primary`, :func:`~squishydb.record.fields.field`,
    :func:`~squishydb.record.fields.foreign` and
    :func:`~squishydb.record.fields.ignored`.

    Example::

        @dataclass
        class Customer(Record):
            identifier: str = primary()
            name: str = field()
    """

    def field_list(self, role: FieldRole | None = None) -> list[FieldDescriptor]:
        """Persisted field descriptors, optionally restricted to one role."""
        descriptors = classify(self)
        if role is None:
            return descriptors
        return filter_by_role(descriptors, role)

    def field_names(self) -> list[str]:
        return [d.name for d in classify(self)]

    def get_field(self, name: str) -> FieldDescriptor | None:
        for descriptor in classify(self):
            if descriptor.name == name:
                return descriptor
        return None

    def primary_key(self) -> FieldDescriptor:
        return primary_key(classify(self))

    def primary_value(self) -> Any:
        return getattr(self, self.primary_key().name)

    def to_payload(self) -> dict[str, Any]:
        return marshal.to_write_payload(self)

    def as_query(self) -> Query:
        """Query matching this record's non-``None`` persisted fields."""
        return marshal.as_query(self)

    @classmethod
    def from_row(cls, row: Any) -> Record:
        return marshal.from_read_row(row, cls)


__all__ = [
    "Record",
]

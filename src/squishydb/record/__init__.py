"""Record declaration, field classification and marshalling.

Modules
-------
fields      Declaration helpers, FieldDescriptor and the field classifier
marshal     Record <-> payload / row conversion
record      Record base class
"""

from .fields import (
    FieldDescriptor,
    FieldRole,
    ForeignReference,
    classify,
    describe_fields,
    field,
    filter_by_role,
    foreign,
    ignored,
    primary,
    primary_key,
)
from .marshal import as_query, from_read_row, to_write_payload
from .record import Record

__all__ = [
    "FieldDescriptor",
    "FieldRole",
    "ForeignReference",
    "Record",
    "as_query",
    "classify",
    "describe_fields",
    "field",
    "filter_by_role",
    "foreign",
    "from_read_row",
    "ignored",
    "primary",
    "primary_key",
    "to_write_payload",
]

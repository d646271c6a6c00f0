"""Tests for ``squishydb.record.fields`` — declaration helpers and classifier."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import pytest

from squishydb.errors import SchemaError
from squishydb.record import (
    FieldDescriptor,
    FieldRole,
    ForeignReference,
    Record,
    classify,
    describe_fields,
    field,
    filter_by_role,
    foreign,
    ignored,
    primary,
    primary_key,
)


@dataclass
class Order(Record):
    identifier: str = primary()
    amount: float = field()
    note: Optional[str] = field()
    customer: str = foreign("customer", "identifier")
    cached_total: int = ignored()
    plain: int = None


class TestDescribeFields:
    def test_declaration_order(self):
        names = [d.name for d in describe_fields(Order)]
        assert names == ["identifier", "amount", "note", "customer", "cached_total", "plain"]

    def test_roles(self):
        roles = {d.name: d.role for d in describe_fields(Order)}
        assert roles["identifier"] is FieldRole.PRIMARY
        assert roles["amount"] is FieldRole.FIELD
        assert roles["customer"] is FieldRole.FOREIGN

    def test_undeclared_field_is_ordinary(self):
        plain = next(d for d in describe_fields(Order) if d.name == "plain")
        assert plain.role is FieldRole.FIELD
        assert plain.ignored is False

    def test_optional_is_unwrapped(self):
        note = next(d for d in describe_fields(Order) if d.name == "note")
        assert note.value_type is str

    def test_foreign_reference(self):
        customer = next(d for d in describe_fields(Order) if d.name == "customer")
        assert customer.reference == ForeignReference("customer", "identifier")

    def test_foreign_without_both_parts_has_no_reference(self):
        @dataclass
        class Loose(Record):
            identifier: str = primary()
            parent: str = foreign("parent")

        parent = next(d for d in describe_fields(Loose) if d.name == "parent")
        assert parent.role is FieldRole.FOREIGN
        assert parent.reference is None

    def test_accepts_instance(self):
        assert describe_fields(Order()) == describe_fields(Order)

    def test_rejects_non_dataclass(self):
        class NotARecord:
            identifier = "x"

        with pytest.raises(SchemaError, match="dataclass"):
            describe_fields(NotARecord)


class TestClassify:
    def test_excludes_ignored(self):
        names = [d.name for d in classify(Order)]
        assert "cached_total" not in names
        assert names == ["identifier", "amount", "note", "customer", "plain"]

    def test_reflects_subclass_declaration(self):
        @dataclass
        class OrderV2(Order):
            shipped: bool = field()

        assert [d.name for d in classify(OrderV2)][-1] == "shipped"
        assert "shipped" not in [d.name for d in classify(Order)]

    def test_filter_by_role_keeps_order(self):
        @dataclass
        class Wide(Record):
            b: str = field()
            key: str = primary()
            a: str = field()

        fields = filter_by_role(classify(Wide), FieldRole.FIELD)
        assert [d.name for d in fields] == ["b", "a"]


class TestPrimaryKey:
    def test_single_primary(self):
        assert primary_key(classify(Order)).name == "identifier"

    def test_no_primary(self):
        @dataclass
        class Keyless(Record):
            name: str = field()

        with pytest.raises(SchemaError, match="no primary key"):
            primary_key(classify(Keyless), table="keyless")

    def test_two_primaries(self):
        @dataclass
        class DoubleKey(Record):
            a: str = primary()
            b: str = primary()

        with pytest.raises(SchemaError, match="more than one") as exc_info:
            primary_key(classify(DoubleKey))
        assert exc_info.value.context["fields"] == ["a", "b"]


class TestFieldDescriptor:
    def test_is_primary(self):
        assert FieldDescriptor("id", str, FieldRole.PRIMARY).is_primary is True
        assert FieldDescriptor("name", str).is_primary is False

    def test_defaults(self):
        d = FieldDescriptor("name", str)
        assert d.role is FieldRole.FIELD
        assert d.ignored is False
        assert d.reference is None


class TestRecordBase:
    def test_field_names(self):
        assert Order().field_names() == ["identifier", "amount", "note", "customer", "plain"]

    def test_field_list_by_role(self):
        assert [d.name for d in Order().field_list(FieldRole.FOREIGN)] == ["customer"]

    def test_get_field(self):
        assert Order().get_field("amount").value_type is float
        assert Order().get_field("cached_total") is None
        assert Order().get_field("missing") is None

    def test_primary_value(self):
        assert Order(identifier="o1").primary_value() == "o1"

    def test_helpers_default_to_none(self):
        order = Order()
        assert order.identifier is None
        assert order.amount is None
        assert order.cached_total is None

    def test_explicit_default(self):
        @dataclass
        class Flagged(Record):
            identifier: str = primary()
            active: bool = field(default=True)

        assert Flagged("f1").active is True

"""Equality-only query model.

A :class:`Query` is an ordered collection of ``(field name, value)``
constraints that are combined with AND. It translates into a parameterized
SQL ``WHERE`` clause for the SQL engines and into a filter document for the
document store.

Usage:
    >>> from squishydb.dialect import SQLiteDialect
    >>> q = Query().match("name", "Smudge").match("age", 3)
    >>> q.to_sql(SQLiteDialect())
    ('name = ? AND age = ?', ('Smudge', 3))
    >>> q.to_document_filter()
    {'name': 'Smudge', 'age': 3}
    >>> Query().to_sql(SQLiteDialect())
    ('', ())

Guardrails:
    ❌ ``f"WHERE name = '{value}'"``
    ✅ ``Query().match("name", value)`` - values are always bound
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from squishydb.dialect import Dialect, validate_identifier


class Query:
    """Conjunction of ``field = value`` constraints.

    Field names are not required to be unique; when a name is matched more
    than once the last value wins on translation.
    """

    def __init__(self) -> None:
        self._matches: list[tuple[str, Any]] = []

    def match(self, name: str, value: Any) -> Query:
        """Add a ``name = value`` constraint and return ``self`` for chaining."""
        self._matches.append((name, value))
        return self

    @property
    def constraints(self) -> dict[str, Any]:
        """Effective constraints: duplicate names collapse to the last value."""
        result: dict[str, Any] = {}
        for name, value in self._matches:
            result[name] = value
        return result

    def is_empty(self) -> bool:
        return not self._matches

    # -- Backend translation -----------------------------------------------

    def to_sql(self, dialect: Dialect) -> tuple[str, tuple[Any, ...]]:
        """Translate into ``(where_clause, params)``.

        The clause has no ``WHERE`` keyword; an empty query yields
        ``("", ())`` which callers treat as "no filter".
        """
        constraints = self.constraints
        predicates = [
            f"{validate_identifier(name, 'column')} = {dialect.placeholder(index)}"
            for index, name in enumerate(constraints)
        ]
        return " AND ".join(predicates), tuple(constraints.values())

    def to_document_filter(self) -> dict[str, Any]:
        """Translate into a document-store filter (implicit AND)."""
        return self.constraints

    # -- Dunder helpers ----------------------------------------------------

    def __iter__(self) -> Iterator[tuple[str, Any]]:
        return iter(self.constraints.items())

    def __len__(self) -> int:
        return len(self.constraints)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Query):
            return NotImplemented
        return self.constraints == other.constraints

    def __repr__(self) -> str:
        body = ", ".join(f"{name}={value!r}" for name, value in self.constraints.items())
        return f"Query({body})"


__all__ = [
    "Query",
]

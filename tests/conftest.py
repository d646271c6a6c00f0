"""
Shared pytest fixtures and configuration for squishydb tests.

This module provides:
- Temporary SQLite database paths
- Connected SQLite engines (closed after each test)
- Unit-test auto-marking

Usage:
    Fixtures are auto-discovered by pytest; request them as arguments.

    def test_something(sqlite_db):
        assert sqlite_db.is_enabled()
"""

from __future__ import annotations

from collections.abc import Generator
from pathlib import Path

import pytest

from squishydb.adapters.sqlite import SQLiteDatabase
from squishydb.logging import clear_context


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark every test without an explicit marker as a unit test."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if "unit" not in markers:
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def clean_log_context() -> Generator[None, None, None]:
    """Keep structlog context variables from leaking between tests."""
    clear_context()
    yield
    clear_context()


@pytest.fixture
def sqlite_path(tmp_path: Path) -> Path:
    """Database file inside a directory that does not exist yet."""
    return tmp_path / "data" / "squishy.db"


@pytest.fixture
def sqlite_db(sqlite_path: Path) -> Generator[SQLiteDatabase, None, None]:
    """Connected SQLite engine on a temporary file."""
    db = SQLiteDatabase(str(sqlite_path))
    db.connect()
    yield db
    db.disconnect()


@pytest.fixture
def memory_db() -> Generator[SQLiteDatabase, None, None]:
    """Connected in-memory SQLite engine."""
    db = SQLiteDatabase(":memory:")
    db.connect()
    yield db
    db.disconnect()

"""
Shared test fixtures for the ats-grid test suite.

Sets environment variables before any ats_grid imports so settings never
touch real log files or view stores, then provides factory fixtures for
columns, rows and grids.
"""

import os

# === Set environment BEFORE any ats_grid imports ===
os.environ.setdefault("APP_ENVIRONMENT", "testing")
os.environ.setdefault("LOG_FILE_OUTPUT", "false")
os.environ.setdefault("LOG_CONSOLE_OUTPUT", "false")
os.environ.setdefault("VIEWS_BACKEND", "memory")
os.environ.setdefault("DB_NAME", "ats_grid_test")

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import pytest
from loguru import logger

from ats_grid.core import Column, DataGrid
from ats_grid.data.repositories import InMemoryViewRepository
from ats_grid.utils.config import GridSettings
from ats_grid.utils.constants import FieldType

STATUSES = ("new", "interview", "hired")


# ---------------------------------------------------------------------------
# Log capture
# ---------------------------------------------------------------------------


@pytest.fixture
def log_messages():
    """Collect loguru messages emitted during a test."""
    messages: list[str] = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


# ---------------------------------------------------------------------------
# Factory fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_rows():
    """Factory building synthetic rows with round-robin statuses."""

    def _factory(count: int = 10, **overrides: Any) -> list[dict[str, Any]]:
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        rows = []
        for i in range(count):
            row = {
                "id": i,
                "name": f"Candidate {i:04d}",
                "status": STATUSES[i % 3],
                "score": (i * 7) % 100,
                "applied_at": base + timedelta(days=i),
            }
            row.update(overrides)
            rows.append(row)
        return rows

    return _factory


@pytest.fixture
def make_columns():
    """Factory building the standard test column set."""

    def _factory(filterable: Optional[set[str]] = None) -> list[Column]:
        filterable = filterable if filterable is not None else {"name", "status"}
        return [
            Column(id="name", label="Name", filterable="name" in filterable),
            Column(id="status", label="Status", field_type=FieldType.SELECT, filterable="status" in filterable),
            Column(id="score", label="Score", field_type=FieldType.NUMBER, filterable="score" in filterable),
            Column(id="applied_at", label="Applied", field_type=FieldType.DATETIME, filterable=False),
        ]

    return _factory


@pytest.fixture
def grid_settings():
    return GridSettings(row_height=10, overscan=2)


@pytest.fixture
def make_grid(make_rows, make_columns, grid_settings):
    """Factory building a DataGrid over synthetic rows."""

    def _factory(count: int = 10, rows: Optional[list[dict[str, Any]]] = None, **kwargs: Any) -> DataGrid:
        return DataGrid(
            kwargs.pop("columns", None) or make_columns(),
            get_row_id=lambda row: row["id"],
            rows=rows if rows is not None else make_rows(count),
            settings=kwargs.pop("settings", grid_settings),
            **kwargs,
        )

    return _factory


@pytest.fixture
def columns(make_columns):
    return make_columns()


@pytest.fixture
def rows(make_rows):
    return make_rows(10)


@pytest.fixture
def grid(make_grid):
    return make_grid(10)


@pytest.fixture
def view_repository():
    return InMemoryViewRepository()

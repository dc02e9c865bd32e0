"""Pytest configuration for dbtransfer tests."""

import datetime
from typing import Any, Dict, List

import pytest
from sqlalchemy import create_engine, text

from dbtransfer.connectors.buffer import ColumnDescriptor, RuntimeType, TabularBuffer
from dbtransfer.core.events import TransferEvents

REFERENCE_TIME = datetime.datetime(2024, 3, 15, 9, 30, 0)


class RecordingEvents(TransferEvents):
    """TransferEvents that keeps every event it forwards."""

    def __init__(self):
        self.progress_events: List[Any] = []
        self.task_events: List[Any] = []
        self.log_events: List[Any] = []
        super().__init__(
            on_progress=self.progress_events.append,
            on_task_progress=self.task_events.append,
            on_log=self.log_events.append,
        )

    def messages(self, level: int = None) -> List[str]:
        return [
            str(event)
            for event in self.log_events
            if level is None or event.level == level
        ]


@pytest.fixture
def reference_time() -> datetime.datetime:
    return REFERENCE_TIME


@pytest.fixture
def sqlite_url(tmp_path) -> str:
    """URL of an empty SQLite database file used as a destination."""
    return f"sqlite:///{tmp_path / 'destination.db'}"


@pytest.fixture
def source_sqlite_url(tmp_path) -> str:
    """URL of a SQLite database holding a small ``people`` table."""
    url = f"sqlite:///{tmp_path / 'source.db'}"
    engine = create_engine(url)
    with engine.begin() as connection:
        connection.execute(
            text("CREATE TABLE people (id INTEGER, name TEXT, score REAL)")
        )
        connection.execute(
            text("INSERT INTO people VALUES (:id, :name, :score)"),
            [
                {"id": 1, "name": "Alice", "score": 9.5},
                {"id": 2, "name": "Bob", "score": None},
                {"id": 3, "name": "Charlie", "score": 7.25},
            ],
        )
    engine.dispose()
    return url


@pytest.fixture
def sample_buffer() -> TabularBuffer:
    columns = [
        ColumnDescriptor("ID", RuntimeType.INT),
        ColumnDescriptor("NAME", RuntimeType.TEXT),
        ColumnDescriptor("CREATED_AT", RuntimeType.TIMESTAMP),
    ]
    rows = [
        (i, f"row {i}", REFERENCE_TIME + datetime.timedelta(hours=i))
        for i in range(1, 6)
    ]
    return TabularBuffer(columns, rows)


@pytest.fixture
def recording_events() -> RecordingEvents:
    return RecordingEvents()


def fetch_all(url: str, sql: str, params: Dict[str, Any] = None) -> List[tuple]:
    """Run a query against a SQLite URL and return every row."""
    engine = create_engine(url)
    try:
        with engine.connect() as connection:
            return [tuple(row) for row in connection.execute(text(sql), params or {})]
    finally:
        engine.dispose()


def table_count(url: str, table: str) -> int:
    return fetch_all(url, f'SELECT COUNT(*) FROM "{table}"')[0][0]


@pytest.fixture
def query_rows():
    return fetch_all


@pytest.fixture
def count_rows():
    return table_count

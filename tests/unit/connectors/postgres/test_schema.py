"""Tests for destination table creation."""

from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError

from dbtransfer.connectors.buffer import ColumnDescriptor, RuntimeType, TabularBuffer
from dbtransfer.connectors.postgres import build_create_table_sql, ensure_table
from dbtransfer.exceptions import SchemaError


def test_build_create_table_sql(sample_buffer):
    sql = build_create_table_sql(sample_buffer, "daily_stats")

    assert sql == (
        'CREATE TABLE IF NOT EXISTS "daily_stats" (\n'
        '    "ID" INTEGER,\n'
        '    "NAME" TEXT,\n'
        '    "CREATED_AT" TIMESTAMP\n'
        ")"
    )


def test_build_create_table_sql_quotes_identifiers():
    """Reserved words and embedded quotes survive quoting."""
    buffer = TabularBuffer(
        [
            ColumnDescriptor("LEVEL", RuntimeType.SMALLINT),
            ColumnDescriptor('odd"name', RuntimeType.TEXT),
        ]
    )
    sql = build_create_table_sql(buffer, "perms")

    assert '"LEVEL" SMALLINT' in sql
    assert '"odd""name" TEXT' in sql


def test_build_create_table_sql_requires_columns():
    with pytest.raises(SchemaError):
        build_create_table_sql(TabularBuffer([]), "empty")


def test_ensure_table_is_idempotent(sample_buffer, sqlite_url, count_rows):
    """A second call leaves the existing table and its rows untouched."""
    engine = create_engine(sqlite_url)
    try:
        with engine.connect() as connection:
            ensure_table(sample_buffer, "daily_stats", connection)
            connection.execute(
                text('INSERT INTO "daily_stats" ("ID", "NAME") VALUES (1, \'x\')')
            )
            connection.commit()
            ensure_table(sample_buffer, "daily_stats", connection)
    finally:
        engine.dispose()

    assert count_rows(sqlite_url, "daily_stats") == 1


def test_ensure_table_wraps_database_errors(sample_buffer):
    connection = MagicMock()
    connection.execute.side_effect = OperationalError("CREATE", {}, Exception("denied"))

    with pytest.raises(SchemaError, match="denied") as exc_info:
        ensure_table(sample_buffer, "daily_stats", connection)

    assert exc_info.value.context == {"table": "daily_stats"}
    connection.rollback.assert_called_once()

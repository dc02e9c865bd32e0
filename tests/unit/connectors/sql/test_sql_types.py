"""Tests for column types read from cursor metadata."""

import pytest

from dbtransfer.connectors.buffer import RuntimeType
from dbtransfer.connectors.sql.types import (
    column_types_from_description,
    runtime_type_from_description,
)


class DBAPITypeObject:
    """Type object as described by PEP 249: equal to any of its type codes."""

    def __init__(self, *values):
        self.values = frozenset(values)

    def __eq__(self, other):
        return other in self.values

    def __hash__(self):
        return hash(self.values)


class FakeOracleDriver:
    STRING = DBAPITypeObject("VARCHAR2", "CHAR", "CLOB")
    BINARY = DBAPITypeObject("RAW", "BLOB")
    NUMBER = DBAPITypeObject("NUMBER", "BINARY_DOUBLE")
    DATETIME = DBAPITypeObject("DATE", "TIMESTAMP")


def _column(name, type_code, precision=None, scale=None):
    return (name, type_code, None, None, precision, scale, True)


@pytest.mark.parametrize(
    "type_code,expected",
    [
        (16, RuntimeType.BOOL),
        (17, RuntimeType.BINARY),
        (20, RuntimeType.BIGINT),
        (21, RuntimeType.SMALLINT),
        (23, RuntimeType.INT),
        (700, RuntimeType.REAL),
        (701, RuntimeType.DOUBLE),
        (1043, RuntimeType.TEXT),
        (1082, RuntimeType.TIMESTAMP),
        (1114, RuntimeType.TIMESTAMP),
        (1700, RuntimeType.DECIMAL),
    ],
)
def test_postgres_type_oids(type_code, expected):
    assert runtime_type_from_description(_column("c", type_code), None, "postgresql") == (
        expected
    )


@pytest.mark.parametrize(
    "column,expected",
    [
        (_column("ID", "NUMBER", 9, 0), RuntimeType.INT),
        (_column("ID", "NUMBER", 15, 0), RuntimeType.BIGINT),
        (_column("AMOUNT", "NUMBER", 12, 2), RuntimeType.DECIMAL),
        (_column("BIG", "NUMBER", 38, 0), RuntimeType.DECIMAL),
        (_column("RATIO", "BINARY_DOUBLE", None, -127), RuntimeType.DOUBLE),
        (_column("CREATED_AT", "DATE"), RuntimeType.TIMESTAMP),
        (_column("NAME", "VARCHAR2"), RuntimeType.TEXT),
        (_column("PHOTO", "BLOB"), RuntimeType.BINARY),
        (_column("ODD", "INTERVAL"), None),
    ],
)
def test_dbapi_type_objects(column, expected):
    assert runtime_type_from_description(column, FakeOracleDriver, "oracle") == expected


def test_missing_type_code_is_unknown():
    """SQLite reports no type codes."""
    assert runtime_type_from_description(_column("id", None), None, "sqlite") is None


def test_column_types_from_description():
    description = [_column("ID", "NUMBER", 5, 0), _column("X", None)]
    assert column_types_from_description(description, FakeOracleDriver, "oracle") == [
        RuntimeType.INT,
        None,
    ]
    assert column_types_from_description(None, FakeOracleDriver, "oracle") is None

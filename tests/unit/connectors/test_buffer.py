"""Tests for the tabular buffer."""

import datetime
import decimal

import pandas as pd
import pytest

from dbtransfer.connectors.buffer import (
    ColumnDescriptor,
    RuntimeType,
    TabularBuffer,
    infer_runtime_type,
    value_matches,
)


@pytest.mark.parametrize(
    "values,expected",
    [
        ([1, 2, 3], RuntimeType.BIGINT),
        ([1.5, None], RuntimeType.DOUBLE),
        (["a", "b"], RuntimeType.TEXT),
        ([True, False], RuntimeType.BOOL),
        ([datetime.datetime(2024, 1, 1)], RuntimeType.TIMESTAMP),
        ([decimal.Decimal("1.50")], RuntimeType.DECIMAL),
        ([b"\x00\x01"], RuntimeType.BINARY),
        ([None, None], RuntimeType.TEXT),
        ([1, "a"], RuntimeType.TEXT),
        ([], RuntimeType.TEXT),
    ],
)
def test_infer_runtime_type(values, expected):
    """Column types are inferred from values, TEXT when ambiguous."""
    assert infer_runtime_type(values) == expected


def test_from_records_types_and_rows():
    """from_records infers each column and keeps row order."""
    created = datetime.datetime(2024, 1, 1, 12, 0)
    buffer = TabularBuffer.from_records(
        ["ID", "NAME", "CREATED_AT"],
        [(1, "Alice", created), (2, "Bob", created)],
    )

    assert buffer.column_names == ["ID", "NAME", "CREATED_AT"]
    assert [c.runtime_type for c in buffer.columns] == [
        RuntimeType.BIGINT,
        RuntimeType.TEXT,
        RuntimeType.TIMESTAMP,
    ]
    assert buffer.rows == [(1, "Alice", created), (2, "Bob", created)]
    buffer.validate()


def test_from_records_mixed_column_is_stringified():
    """Values of a column inferred as TEXT become strings; NULLs stay NULL."""
    buffer = TabularBuffer.from_records(["V"], [(1,), ("x",), (None,)])

    assert buffer.columns == [ColumnDescriptor("V", RuntimeType.TEXT)]
    assert buffer.rows == [("1",), ("x",), (None,)]
    buffer.validate()


def test_from_records_rejects_ragged_rows():
    with pytest.raises(ValueError, match="expected 2"):
        TabularBuffer.from_records(["A", "B"], [(1, 2), (3,)])


def test_append_row_enforces_arity(sample_buffer):
    with pytest.raises(ValueError):
        sample_buffer.append_row((1, "too short"))
    assert len(sample_buffer) == 5


def test_validate_reports_mismatching_cell():
    buffer = TabularBuffer(
        [ColumnDescriptor("ID", RuntimeType.INT)], [(1,), ("two",)]
    )
    with pytest.raises(ValueError, match="Row 1, column 'ID'"):
        buffer.validate()


def test_value_matches_treats_none_as_valid_for_every_type():
    for runtime_type in RuntimeType:
        assert value_matches(None, runtime_type)
    assert not value_matches(True, RuntimeType.INT)
    assert value_matches(3, RuntimeType.DOUBLE)


def test_from_dataframe():
    """DataFrames are typed through pyarrow."""
    df = pd.DataFrame({"id": [1, 2], "name": ["a", "b"], "ratio": [0.5, 1.5]})
    buffer = TabularBuffer.from_dataframe(df)

    assert buffer.columns == [
        ColumnDescriptor("id", RuntimeType.BIGINT),
        ColumnDescriptor("name", RuntimeType.TEXT),
        ColumnDescriptor("ratio", RuntimeType.DOUBLE),
    ]
    assert buffer.rows == [(1, "a", 0.5), (2, "b", 1.5)]


def test_apply_dataframe_transform(sample_buffer):
    """A pandas transform yields a new buffer and leaves the original alone."""
    result = sample_buffer.apply_dataframe_transform(
        lambda df: df[df["ID"] % 2 == 1].reset_index(drop=True)
    )

    assert [row[0] for row in result] == [1, 3, 5]
    assert result.column_names == ["ID", "NAME", "CREATED_AT"]
    assert len(sample_buffer) == 5


def test_equality_and_repr(sample_buffer):
    copy = TabularBuffer(sample_buffer.columns, sample_buffer.rows)
    assert copy == sample_buffer
    assert copy != "not a buffer"
    assert repr(sample_buffer) == (
        "TabularBuffer([ID:Int, NAME:Text, CREATED_AT:Timestamp], rows=5)"
    )


def test_rows_cannot_bypass_arity_check(sample_buffer):
    """Changing the returned row list leaves the buffer untouched."""
    rows = sample_buffer.rows
    rows.append(("short",))
    rows.clear()

    assert len(sample_buffer) == 5
    assert len(sample_buffer.rows) == 5


def test_from_records_keeps_reported_types():
    """Reported types win when the values fit them, even with no rows."""
    empty = TabularBuffer.from_records(
        ["ID", "AMOUNT"], [], column_types=[RuntimeType.INT, RuntimeType.DECIMAL]
    )
    assert [c.runtime_type for c in empty.columns] == [
        RuntimeType.INT,
        RuntimeType.DECIMAL,
    ]

    mixed = TabularBuffer.from_records(
        ["ID", "CODE"], [(1, "A"), (2, None)], column_types=[None, RuntimeType.INT]
    )
    assert [c.runtime_type for c in mixed.columns] == [
        RuntimeType.BIGINT,
        RuntimeType.TEXT,
    ]


def test_from_records_rejects_wrong_number_of_types():
    with pytest.raises(ValueError, match="column types"):
        TabularBuffer.from_records(["A", "B"], [], column_types=[RuntimeType.INT])

"""Tabular buffer exchanged between source reads and destination writes."""

import datetime
import decimal
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Iterator, List, Optional, Sequence, Tuple

import pandas as pd
import pyarrow as pa

Row = Tuple[Any, ...]


class RuntimeType(str, Enum):
    """Runtime type of a buffer column."""

    SMALLINT = "SmallInt"
    INT = "Int"
    BIGINT = "BigInt"
    DECIMAL = "Decimal"
    DOUBLE = "Double"
    REAL = "Real"
    BOOL = "Bool"
    TIMESTAMP = "Timestamp"
    TEXT = "Text"
    BINARY = "Binary"


@dataclass(frozen=True)
class ColumnDescriptor:
    name: str
    runtime_type: RuntimeType


_INTEGER_TYPES = (RuntimeType.SMALLINT, RuntimeType.INT, RuntimeType.BIGINT)
_FLOAT_TYPES = (RuntimeType.DOUBLE, RuntimeType.REAL)


def value_matches(value: Any, runtime_type: RuntimeType) -> bool:
    """Return True if ``value`` may be stored in a column of ``runtime_type``."""
    if value is None:
        return True
    if runtime_type in _INTEGER_TYPES:
        return isinstance(value, int) and not isinstance(value, bool)
    if runtime_type == RuntimeType.DECIMAL:
        return isinstance(value, (decimal.Decimal, int)) and not isinstance(
            value, bool
        )
    if runtime_type in _FLOAT_TYPES:
        return isinstance(value, (float, int)) and not isinstance(value, bool)
    if runtime_type == RuntimeType.BOOL:
        return isinstance(value, bool)
    if runtime_type == RuntimeType.TIMESTAMP:
        return isinstance(value, (datetime.datetime, datetime.date))
    if runtime_type == RuntimeType.TEXT:
        return isinstance(value, str)
    if runtime_type == RuntimeType.BINARY:
        return isinstance(value, (bytes, bytearray, memoryview))
    return False


def runtime_type_from_arrow(arrow_type: pa.DataType) -> RuntimeType:
    """Map a pyarrow type to the closest runtime type, TEXT when unknown."""
    if pa.types.is_boolean(arrow_type):
        return RuntimeType.BOOL
    if pa.types.is_int8(arrow_type) or pa.types.is_int16(arrow_type):
        return RuntimeType.SMALLINT
    if pa.types.is_uint8(arrow_type):
        return RuntimeType.SMALLINT
    if pa.types.is_int32(arrow_type) or pa.types.is_uint16(arrow_type):
        return RuntimeType.INT
    if pa.types.is_integer(arrow_type):
        return RuntimeType.BIGINT
    if pa.types.is_decimal(arrow_type):
        return RuntimeType.DECIMAL
    if pa.types.is_float32(arrow_type) or pa.types.is_float16(arrow_type):
        return RuntimeType.REAL
    if pa.types.is_float64(arrow_type):
        return RuntimeType.DOUBLE
    if pa.types.is_timestamp(arrow_type) or pa.types.is_date(arrow_type):
        return RuntimeType.TIMESTAMP
    if pa.types.is_binary(arrow_type) or pa.types.is_large_binary(arrow_type):
        return RuntimeType.BINARY
    if pa.types.is_fixed_size_binary(arrow_type):
        return RuntimeType.BINARY
    return RuntimeType.TEXT


def infer_runtime_type(values: Sequence[Any]) -> RuntimeType:
    """Infer the runtime type of a column from its Python values.

    Columns pyarrow cannot type (mixed values, all nulls, nested objects)
    are treated as TEXT.
    """
    try:
        arrow_type = pa.array(values, from_pandas=True).type
    except (
        pa.ArrowInvalid,
        pa.ArrowTypeError,
        pa.ArrowNotImplementedError,
        OverflowError,
    ):
        return RuntimeType.TEXT
    return runtime_type_from_arrow(arrow_type)


def _from_arrow_value(value: Any) -> Any:
    # nanosecond timestamps come back as pandas Timestamps
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    return value


def _coerce_text(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


class TabularBuffer:
    """Typed, in-memory table: ordered columns plus rows aligned to them.

    A buffer is produced by a source read, optionally transformed, and then
    written in batches. Every row holds exactly one value per column.
    """

    __slots__ = ("_columns", "_rows")

    def __init__(
        self,
        columns: Sequence[ColumnDescriptor],
        rows: Optional[Iterable[Sequence[Any]]] = None,
    ):
        self._columns: List[ColumnDescriptor] = list(columns)
        self._rows: List[Row] = []
        for row in rows or ():
            self.append_row(row)

    @classmethod
    def from_records(
        cls,
        column_names: Sequence[str],
        rows: Iterable[Sequence[Any]],
        column_types: Optional[Sequence[Optional[RuntimeType]]] = None,
    ) -> "TabularBuffer":
        """Build a buffer from rows, typing columns from metadata or values.

        Args:
            column_names: Column names in result order
            rows: Row values aligned to ``column_names``
            column_types: Types reported by the source for each column, or
                ``None`` where it reported nothing usable. A reported type
                is kept when every value fits it; otherwise, and for
                unreported columns, the type is inferred from the values.

        Values of columns that end up as TEXT are converted to strings.
        """
        names = list(column_names)
        reported = list(column_types) if column_types is not None else []
        if reported and len(reported) != len(names):
            raise ValueError(
                f"Got {len(reported)} column types for {len(names)} columns"
            )
        materialized = [tuple(row) for row in rows]
        for index, row in enumerate(materialized):
            if len(row) != len(names):
                raise ValueError(
                    f"Row {index} has {len(row)} values, expected {len(names)}"
                )

        columns = []
        for position, name in enumerate(names):
            values = [row[position] for row in materialized]
            runtime_type = reported[position] if reported else None
            if runtime_type is None or not all(
                value_matches(value, runtime_type) for value in values
            ):
                runtime_type = infer_runtime_type(values)
            columns.append(ColumnDescriptor(name, runtime_type))

        text_positions = [
            i for i, col in enumerate(columns) if col.runtime_type == RuntimeType.TEXT
        ]
        if text_positions:
            materialized = [
                tuple(
                    _coerce_text(value) if i in text_positions else value
                    for i, value in enumerate(row)
                )
                for row in materialized
            ]
        return cls(columns, materialized)

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame) -> "TabularBuffer":
        """Build a buffer from a pandas DataFrame, typed through pyarrow."""
        table = pa.Table.from_pandas(df, preserve_index=False)
        columns = [
            ColumnDescriptor(str(field.name), runtime_type_from_arrow(field.type))
            for field in table.schema
        ]
        values_by_column = [
            [_from_arrow_value(value) for value in table.column(i).to_pylist()]
            for i in range(table.num_columns)
        ]
        rows = list(zip(*values_by_column)) if values_by_column else []
        return cls(columns, rows)

    @property
    def columns(self) -> List[ColumnDescriptor]:
        return list(self._columns)

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self._columns]

    @property
    def rows(self) -> List[Row]:
        return list(self._rows)

    def append_row(self, row: Sequence[Any]) -> None:
        values = tuple(row)
        if len(values) != len(self._columns):
            raise ValueError(
                f"Row has {len(values)} values, expected {len(self._columns)}"
            )
        self._rows.append(values)

    def validate(self) -> None:
        """Check that every value matches its column's runtime type.

        Raises:
            ValueError: On the first mismatching cell
        """
        for row_index, row in enumerate(self._rows):
            for column, value in zip(self._columns, row):
                if not value_matches(value, column.runtime_type):
                    raise ValueError(
                        f"Row {row_index}, column '{column.name}': "
                        f"{value!r} is not a {column.runtime_type.value}"
                    )

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame.from_records(self._rows, columns=self.column_names)

    def apply_dataframe_transform(
        self, transform_func: Callable[[pd.DataFrame], pd.DataFrame]
    ) -> "TabularBuffer":
        """Apply a pandas transformation and return a new buffer.

        Args:
            transform_func: A function that takes a pandas DataFrame and
                returns a transformed DataFrame

        Returns:
            A new TabularBuffer with the transformed data
        """
        result_df = transform_func(self.to_dataframe())
        return TabularBuffer.from_dataframe(result_df)

    def __iter__(self) -> Iterator[Row]:
        return iter(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, TabularBuffer):
            return False
        return self._columns == other._columns and self._rows == other._rows

    def __repr__(self) -> str:
        cols = ", ".join(f"{c.name}:{c.runtime_type.value}" for c in self._columns)
        return f"TabularBuffer([{cols}], rows={len(self._rows)})"

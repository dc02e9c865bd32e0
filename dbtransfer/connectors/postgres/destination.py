from __future__ import annotations

from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from dbtransfer.connectors.buffer import Row, TabularBuffer
from dbtransfer.connectors.postgres.utils import text_identifier
from dbtransfer.exceptions import WriteError
from dbtransfer.logging import get_logger

logger = get_logger(__name__)

DEFAULT_BATCH_SIZE = 1000


def iter_batches(rows: Sequence[Row], batch_size: int) -> Iterator[Sequence[Row]]:
    """Yield consecutive slices of at most ``batch_size`` rows, in order.

    The last slice may be shorter. No rows means no slices.
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")
    for start in range(0, len(rows), batch_size):
        yield rows[start : start + batch_size]


def build_insert_statement(
    table_name: str, column_names: Sequence[str], batch: Sequence[Row]
) -> Tuple[str, Dict[str, Any]]:
    """Build one multi-row INSERT for ``batch`` and its bound parameters.

    Each cell gets its own named parameter ``p<row>_<column>``; ``None``
    binds as SQL NULL.
    """
    column_list = ", ".join(text_identifier(name) for name in column_names)
    value_groups: List[str] = []
    params: Dict[str, Any] = {}
    for i, row in enumerate(batch):
        placeholders = []
        for j, value in enumerate(row):
            param_name = f"p{i}_{j}"
            placeholders.append(f":{param_name}")
            params[param_name] = value
        value_groups.append(f"({', '.join(placeholders)})")

    insert_sql = (
        f"INSERT INTO {text_identifier(table_name)} ({column_list})\n"
        f"VALUES {', '.join(value_groups)}"
    )
    return insert_sql, params


def write_batches(
    buffer: TabularBuffer,
    table_name: str,
    connection: Connection,
    batch_size: int = DEFAULT_BATCH_SIZE,
    on_batch: Optional[Callable[[int], None]] = None,
) -> int:
    """Insert the buffer's rows in batches, committing after each batch.

    Args:
        buffer: Rows to write; its columns define the INSERT column list
        table_name: Destination table
        connection: Open destination connection
        batch_size: Maximum rows per INSERT statement
        on_batch: Called with the running row total after each commit

    Returns:
        Number of rows written

    Raises:
        WriteError: If a batch fails. Earlier batches stay committed.
    """
    column_names = buffer.column_names
    total_rows = len(buffer)
    processed = 0

    for batch_index, batch in enumerate(iter_batches(buffer.rows, batch_size)):
        insert_sql, params = build_insert_statement(table_name, column_names, batch)
        try:
            connection.execute(text(insert_sql), params)
            connection.commit()
        except SQLAlchemyError as e:
            connection.rollback()
            logger.error(
                f"Batch {batch_index + 1} into '{table_name}' failed after "
                f"{processed}/{total_rows} rows: {e}"
            )
            raise WriteError(
                f"Failed to write batch {batch_index + 1} to '{table_name}': {e}",
                batch_index=batch_index,
                rows_committed=processed,
                context={"table": table_name},
            ) from e

        processed += len(batch)
        logger.debug(
            f"Wrote batch {batch_index + 1} to '{table_name}': "
            f"{processed}/{total_rows} rows"
        )
        if on_batch is not None:
            on_batch(processed)

    return processed

from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from dbtransfer.connectors.buffer import TabularBuffer
from dbtransfer.connectors.postgres.types import map_type
from dbtransfer.connectors.postgres.utils import text_identifier
from dbtransfer.exceptions import SchemaError
from dbtransfer.logging import get_logger

logger = get_logger(__name__)


def build_create_table_sql(buffer: TabularBuffer, table_name: str) -> str:
    """Build the CREATE TABLE IF NOT EXISTS statement for a buffer's columns."""
    if not buffer.columns:
        raise SchemaError(
            "Cannot create a table without columns", context={"table": table_name}
        )
    column_definitions = ",\n    ".join(
        f"{text_identifier(column.name)} {map_type(column.runtime_type)}"
        for column in buffer.columns
    )
    return (
        f"CREATE TABLE IF NOT EXISTS {text_identifier(table_name)} (\n"
        f"    {column_definitions}\n)"
    )


def ensure_table(buffer: TabularBuffer, table_name: str, connection: Connection) -> None:
    """Create the destination table when it does not exist yet.

    An existing table is left untouched, whatever its shape.

    Raises:
        SchemaError: If the buffer has no columns or the statement is rejected
    """
    create_sql = build_create_table_sql(buffer, table_name)
    try:
        connection.execute(text(create_sql))
        connection.commit()
    except SQLAlchemyError as e:
        connection.rollback()
        logger.error(f"Failed to create table '{table_name}': {e}")
        raise SchemaError(
            f"Could not create table '{table_name}': {e}",
            context={"table": table_name},
        ) from e
    logger.debug(f"Ensured table '{table_name}' ({len(buffer.columns)} columns)")

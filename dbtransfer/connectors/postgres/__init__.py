from dbtransfer.connectors.postgres.destination import (
    DEFAULT_BATCH_SIZE,
    build_insert_statement,
    iter_batches,
    write_batches,
)
from dbtransfer.connectors.postgres.schema import build_create_table_sql, ensure_table
from dbtransfer.connectors.postgres.types import map_type

__all__ = [
    "DEFAULT_BATCH_SIZE",
    "build_create_table_sql",
    "build_insert_statement",
    "ensure_table",
    "iter_batches",
    "map_type",
    "write_batches",
]

"""Mapping from buffer runtime types to PostgreSQL column types."""

from typing import Any, Dict

from dbtransfer.connectors.buffer import RuntimeType

DEFAULT_POSTGRES_TYPE = "TEXT"

POSTGRES_TYPES: Dict[RuntimeType, str] = {
    RuntimeType.SMALLINT: "SMALLINT",
    RuntimeType.INT: "INTEGER",
    RuntimeType.BIGINT: "BIGINT",
    RuntimeType.DECIMAL: "NUMERIC",
    RuntimeType.DOUBLE: "DOUBLE PRECISION",
    RuntimeType.REAL: "REAL",
    RuntimeType.BOOL: "BOOLEAN",
    RuntimeType.TIMESTAMP: "TIMESTAMP",
    RuntimeType.TEXT: "TEXT",
    RuntimeType.BINARY: "BYTEA",
}


def map_type(runtime_type: Any) -> str:
    """Return the PostgreSQL type for a runtime type; TEXT when unrecognized.

    Accepts ``RuntimeType`` members or their string values ("BigInt").
    """
    try:
        key = RuntimeType(runtime_type)
    except ValueError:
        return DEFAULT_POSTGRES_TYPE
    return POSTGRES_TYPES.get(key, DEFAULT_POSTGRES_TYPE)

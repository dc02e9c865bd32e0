"""Column types from DBAPI cursor metadata.

A cursor's ``description`` is typed even when the result has no rows, so
destination tables get their real column types on the first run. Drivers
that report nothing usable (SQLite reports ``None``) leave the column to
value inference.
"""

from typing import Any, List, Optional, Sequence

from dbtransfer.connectors.buffer import RuntimeType

# PostgreSQL type OIDs as reported by psycopg2
POSTGRES_TYPE_OIDS = {
    16: RuntimeType.BOOL,
    17: RuntimeType.BINARY,
    20: RuntimeType.BIGINT,
    21: RuntimeType.SMALLINT,
    23: RuntimeType.INT,
    25: RuntimeType.TEXT,
    700: RuntimeType.REAL,
    701: RuntimeType.DOUBLE,
    1042: RuntimeType.TEXT,
    1043: RuntimeType.TEXT,
    1082: RuntimeType.TIMESTAMP,
    1114: RuntimeType.TIMESTAMP,
    1184: RuntimeType.TIMESTAMP,
    1700: RuntimeType.DECIMAL,
}

# Oracle reports FLOAT / BINARY_DOUBLE numbers with this scale
_FLOATING_SCALE = -127


def _number_type(precision: Optional[int], scale: Optional[int]) -> RuntimeType:
    if scale == _FLOATING_SCALE:
        return RuntimeType.DOUBLE
    if scale == 0 and precision:
        if precision <= 9:
            return RuntimeType.INT
        if precision <= 18:
            return RuntimeType.BIGINT
    return RuntimeType.DECIMAL


def _matches(dbapi: Any, type_object_name: str, type_code: Any) -> bool:
    type_object = getattr(dbapi, type_object_name, None)
    return type_object is not None and type_code == type_object


def runtime_type_from_description(
    column: Sequence[Any], dbapi: Any, backend: str
) -> Optional[RuntimeType]:
    """Map one ``cursor.description`` entry to a runtime type.

    Args:
        column: ``(name, type_code, display_size, internal_size, precision,
            scale, null_ok)``
        dbapi: The driver module, whose ``NUMBER``/``DATETIME``/``STRING``/
            ``BINARY`` type objects compare equal to matching type codes
        backend: SQLAlchemy backend name, e.g. ``"postgresql"``

    Returns:
        The runtime type, or None when the driver gave nothing usable
    """
    type_code = column[1] if len(column) > 1 else None
    if type_code is None:
        return None

    if backend == "postgresql" and type_code in POSTGRES_TYPE_OIDS:
        return POSTGRES_TYPE_OIDS[type_code]

    if _matches(dbapi, "DATETIME", type_code):
        return RuntimeType.TIMESTAMP
    if _matches(dbapi, "BINARY", type_code):
        return RuntimeType.BINARY
    if _matches(dbapi, "STRING", type_code):
        return RuntimeType.TEXT
    if _matches(dbapi, "NUMBER", type_code):
        precision = column[4] if len(column) > 4 else None
        scale = column[5] if len(column) > 5 else None
        return _number_type(precision, scale)
    return None


def column_types_from_description(
    description: Optional[Sequence[Sequence[Any]]], dbapi: Any, backend: str
) -> Optional[List[Optional[RuntimeType]]]:
    if not description:
        return None
    return [
        runtime_type_from_description(column, dbapi, backend)
        for column in description
    ]

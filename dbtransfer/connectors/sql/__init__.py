from dbtransfer.connectors.sql.source import (
    DEFAULT_QUERY_TIMEOUT_SECONDS,
    SqlSourceConnector,
)

__all__ = [
    "SqlSourceConnector",
    "DEFAULT_QUERY_TIMEOUT_SECONDS",
]

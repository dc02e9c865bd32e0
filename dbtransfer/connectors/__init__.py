"""Source and destination connectors for dbtransfer."""

from typing import Optional

from dbtransfer.connectors.base import SourceConnector
from dbtransfer.connectors.buffer import ColumnDescriptor, RuntimeType, TabularBuffer
from dbtransfer.connectors.connection import mask_connection_string
from dbtransfer.connectors.mock import DEFAULT_MOCK_DELAY_SECONDS, MockSourceConnector
from dbtransfer.connectors.sql import DEFAULT_QUERY_TIMEOUT_SECONDS, SqlSourceConnector
from dbtransfer.logging import get_logger

logger = get_logger(__name__)


def create_source_connector(
    use_mock: bool,
    connection_string: Optional[str] = None,
    query_timeout: Optional[int] = DEFAULT_QUERY_TIMEOUT_SECONDS,
    mock_delay: float = DEFAULT_MOCK_DELAY_SECONDS,
) -> SourceConnector:
    """Select the source connector named by configuration."""
    if use_mock:
        logger.info("Using mock source connector")
        return MockSourceConnector(delay=mock_delay)
    if not connection_string:
        raise ValueError("A source connection string is required for the live connector")
    logger.info(
        f"Using live source connector: {mask_connection_string(connection_string)}"
    )
    return SqlSourceConnector(connection_string, query_timeout=query_timeout)


__all__ = [
    "ColumnDescriptor",
    "MockSourceConnector",
    "RuntimeType",
    "SourceConnector",
    "SqlSourceConnector",
    "TabularBuffer",
    "create_source_connector",
]

from __future__ import annotations

from typing import Callable, Optional

from sqlalchemy.engine import URL, Connection, Engine
from sqlalchemy.exc import ArgumentError, SQLAlchemyError

from dbtransfer.connectors.base.source_connector import SourceConnector
from dbtransfer.connectors.buffer import TabularBuffer
from dbtransfer.connectors.connection import (
    build_url,
    create_transfer_engine,
    mask_connection_string,
)
from dbtransfer.connectors.sql.types import column_types_from_description
from dbtransfer.exceptions import SourceConnectionError, SourceQueryError
from dbtransfer.logging import get_logger

logger = get_logger(__name__)

DEFAULT_QUERY_TIMEOUT_SECONDS = 300


class SqlSourceConnector(SourceConnector):
    """
    Reads query results from a live relational database through SQLAlchemy.

    Each read opens its own connection, fetches the entire result set into
    memory and closes the connection again. There is no cursor streaming:
    the whole result must fit in memory.
    """

    def __init__(
        self,
        connection_string: str,
        query_timeout: Optional[int] = DEFAULT_QUERY_TIMEOUT_SECONDS,
        engine_factory: Callable[[URL], Engine] = create_transfer_engine,
    ):
        self.connection_string = connection_string
        self.query_timeout = query_timeout
        self._engine_factory = engine_factory

    def _build_engine(self) -> Engine:
        try:
            url = build_url(self.connection_string)
        except (ValueError, ArgumentError) as e:
            raise SourceConnectionError(
                f"Invalid source connection string: {e}",
                context={"connection": mask_connection_string(self.connection_string)},
            ) from e
        return self._engine_factory(url)

    def _apply_query_timeout(self, connection: Connection) -> None:
        """Bound the query runtime where the dialect lets us do so."""
        if not self.query_timeout:
            return
        timeout_ms = int(self.query_timeout * 1000)
        backend = connection.engine.url.get_backend_name()
        if backend == "postgresql":
            connection.exec_driver_sql(f"SET statement_timeout = {timeout_ms}")
        elif backend == "oracle":
            connection.connection.driver_connection.call_timeout = timeout_ms
        else:
            logger.debug(
                f"Query timeout is not enforced for the '{backend}' dialect"
            )

    def read_query(self, query: str, label: str) -> TabularBuffer:
        engine = self._build_engine()
        try:
            try:
                connection = engine.connect()
            except SQLAlchemyError as e:
                logger.error(f"[{label}] Source connection failed: {e}")
                raise SourceConnectionError(
                    f"Could not connect to source database: {e}",
                    context={"task": label},
                ) from e

            with connection:
                logger.info(f"[{label}] Connected to source database")
                logger.debug(f"[{label}] Query: {query}")
                try:
                    self._apply_query_timeout(connection)
                    result = connection.execution_options(
                        no_parameters=True
                    ).exec_driver_sql(query)
                    column_names = list(result.keys())
                    column_types = column_types_from_description(
                        result.cursor.description,
                        connection.dialect.dbapi,
                        connection.engine.url.get_backend_name(),
                    )
                    rows = result.fetchall()
                except SQLAlchemyError as e:
                    logger.error(f"[{label}] Source query failed: {e}")
                    raise SourceQueryError(
                        f"Source query failed: {e}", context={"task": label}
                    ) from e
        finally:
            engine.dispose()

        buffer = TabularBuffer.from_records(column_names, rows, column_types)
        logger.info(f"[{label}] Read {len(buffer)} rows from source")
        return buffer

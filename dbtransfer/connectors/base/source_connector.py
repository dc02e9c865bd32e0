from abc import ABC, abstractmethod

from dbtransfer.connectors.buffer import TabularBuffer


class SourceConnector(ABC):
    """Abstract base class for all source connectors."""

    @abstractmethod
    def read_query(self, query: str, label: str) -> TabularBuffer:
        """
        Run a query against the source and materialize its result.

        Args:
            query: The SQL text to execute.
            label: Name of the task on whose behalf the read runs (for logs).

        Returns:
            A TabularBuffer holding the complete result set.

        Raises:
            SourceConnectionError: If the source cannot be reached.
            SourceQueryError: If the query fails or times out.
        """
        raise NotImplementedError

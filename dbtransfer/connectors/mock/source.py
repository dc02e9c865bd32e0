from __future__ import annotations

import datetime
import time
from typing import Optional

from dbtransfer.connectors.base.source_connector import SourceConnector
from dbtransfer.connectors.buffer import TabularBuffer
from dbtransfer.connectors.mock.datasets import match_dataset
from dbtransfer.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MOCK_DELAY_SECONDS = 0.5


class MockSourceConnector(SourceConnector):
    """
    Source connector that serves synthetic data, for running without a database.

    The dataset is picked from the query text (see ``datasets.DATASETS``).
    Every read sleeps for ``delay`` seconds to imitate a database round trip.
    """

    def __init__(
        self,
        delay: float = DEFAULT_MOCK_DELAY_SECONDS,
        reference_time: Optional[datetime.datetime] = None,
    ):
        self.delay = delay
        self.reference_time = reference_time or datetime.datetime.now().replace(
            microsecond=0
        )

    def read_query(self, query: str, label: str) -> TabularBuffer:
        logger.info(f"[MOCK] {label}: executing query (returning mock data)")
        logger.debug(f"[MOCK] Query: {query}")

        if self.delay > 0:
            time.sleep(self.delay)

        dataset_name, factory = match_dataset(query)
        buffer = factory(self.reference_time)
        logger.info(f"[MOCK] {dataset_name}: generated {len(buffer)} rows")
        return buffer

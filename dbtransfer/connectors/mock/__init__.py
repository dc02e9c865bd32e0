from dbtransfer.connectors.mock.datasets import DATASETS, match_dataset
from dbtransfer.connectors.mock.source import (
    DEFAULT_MOCK_DELAY_SECONDS,
    MockSourceConnector,
)

__all__ = [
    "MockSourceConnector",
    "DEFAULT_MOCK_DELAY_SECONDS",
    "DATASETS",
    "match_dataset",
]

"""dbtransfer - copy query results between relational databases."""

__version__ = "0.1.0"
__package_name__ = "dbtransfer"

from .exceptions import (
    ConfigResolutionError,
    ConfigurationError,
    DestinationConnectionError,
    RunFatalError,
    SchemaError,
    SourceConnectionError,
    SourceQueryError,
    TransferError,
    TransformError,
    WriteError,
)

__all__ = [
    "ConfigResolutionError",
    "ConfigurationError",
    "DestinationConnectionError",
    "RunFatalError",
    "SchemaError",
    "SourceConnectionError",
    "SourceQueryError",
    "TransferError",
    "TransformError",
    "WriteError",
]

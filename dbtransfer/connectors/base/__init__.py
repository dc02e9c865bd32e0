from .source_connector import SourceConnector

__all__ = [
    "SourceConnector",
]

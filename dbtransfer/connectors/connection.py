"""Connection string handling shared by source and destination connectors.

Connection strings are accepted in two forms:

- SQLAlchemy URLs, e.g. ``oracle+oracledb://scott:tiger@db:1521/?service_name=ORCL``
- ``Key=Value;`` strings, e.g. ``Host=pg;Port=5432;Database=dw;Username=etl;Password=x``,
  which are translated to ``postgresql+psycopg2`` URLs.
"""

import re
from typing import Any, Dict, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import URL, Engine, make_url
from sqlalchemy.pool import NullPool

from dbtransfer.logging import get_logger

logger = get_logger(__name__)

DEFAULT_DRIVERNAME = "postgresql+psycopg2"
DEFAULT_POSTGRES_PORT = 5432
APPLICATION_NAME = "dbtransfer"

_KEY_VALUE_PASSWORD = re.compile(r"((?:password|pwd)\s*=\s*)[^;]+", re.IGNORECASE)
_URL_PASSWORD = re.compile(r"(://[^:/@\s]+:)([^@\s/]+)(@)")

# Key aliases -> canonical name
_PARAMETER_ALIASES = {
    "host": "host",
    "server": "host",
    "data source": "host",
    "port": "port",
    "database": "database",
    "initial catalog": "database",
    "dbname": "database",
    "username": "username",
    "user id": "username",
    "userid": "username",
    "user": "username",
    "uid": "username",
    "password": "password",
    "pwd": "password",
    "ssl mode": "sslmode",
    "sslmode": "sslmode",
    "timeout": "connect_timeout",
    "connect timeout": "connect_timeout",
    "connect_timeout": "connect_timeout",
}


def mask_connection_string(connection_string: str) -> str:
    """Hide passwords before a connection string is logged.

    The value of every key ending in ``password`` or ``pwd`` (any case, up to
    the next ``;``, so ``sslpassword=`` and ``DbPassword=`` are covered too) is
    replaced with ``****``, as is the password part of a URL. Applying the
    mask twice gives the same result as applying it once.
    """
    if not connection_string:
        return connection_string
    masked = _KEY_VALUE_PASSWORD.sub(r"\1****", connection_string)
    return _URL_PASSWORD.sub(r"\1****\3", masked)


def is_url(connection_string: str) -> bool:
    return "://" in connection_string


def parse_connection_string(connection_string: str) -> Dict[str, str]:
    """Split a ``Key=Value;`` string into a dictionary with lowercase keys."""
    params: Dict[str, str] = {}
    for segment in connection_string.split(";"):
        if not segment.strip():
            continue
        if "=" not in segment:
            raise ValueError(
                f"Invalid connection string segment '{mask_connection_string(segment)}'"
            )
        key, value = segment.split("=", 1)
        params[key.strip().lower()] = value.strip()
    return params


def translate_connection_parameters(params: Dict[str, str]) -> Dict[str, Any]:
    """Translate connection string keys to canonical parameter names.

    Keys with no PostgreSQL equivalent are dropped.

    Args:
        params: Parsed ``Key=Value`` pairs with lowercase keys

    Returns:
        Dictionary with host, port, database, username and password entries
    """
    translated: Dict[str, Any] = {}
    for key, value in params.items():
        canonical = _PARAMETER_ALIASES.get(key)
        if canonical is None:
            logger.debug(f"Ignoring unsupported connection parameter '{key}'")
            continue
        translated[canonical] = value
        if canonical != key:
            logger.debug(f"Translated connection parameter '{key}' -> '{canonical}'")

    if "port" in translated:
        try:
            translated["port"] = int(translated["port"])
        except ValueError as e:
            raise ValueError(f"Invalid port '{translated['port']}'") from e
    return translated


def build_url(connection_string: str, drivername: str = DEFAULT_DRIVERNAME) -> URL:
    """Turn a connection string of either supported form into a SQLAlchemy URL."""
    if not connection_string or not connection_string.strip():
        raise ValueError("Connection string is empty")
    if is_url(connection_string):
        return make_url(connection_string)

    params = translate_connection_parameters(parse_connection_string(connection_string))
    query: Dict[str, str] = {}
    if "sslmode" in params:
        query["sslmode"] = str(params.pop("sslmode")).lower()
    if "connect_timeout" in params:
        query["connect_timeout"] = str(params.pop("connect_timeout"))

    return URL.create(
        drivername,
        username=params.get("username"),
        password=params.get("password"),
        host=params.get("host"),
        port=params.get("port", DEFAULT_POSTGRES_PORT),
        database=params.get("database"),
        query=query,
    )


def build_profile_url(
    host: str,
    port: int,
    database: str,
    username: str,
    password: Optional[str],
    ssl_mode: Optional[str] = None,
    connect_timeout: Optional[int] = None,
    drivername: str = DEFAULT_DRIVERNAME,
) -> URL:
    """Build a PostgreSQL URL from the fields of a destination profile."""
    query: Dict[str, str] = {}
    if ssl_mode:
        query["sslmode"] = ssl_mode.lower()
    if connect_timeout is not None:
        query["connect_timeout"] = str(connect_timeout)
    return URL.create(
        drivername,
        username=username,
        password=password or None,
        host=host,
        port=port,
        database=database,
        query=query,
    )


def _get_connect_args(url: URL) -> Dict[str, Any]:
    """Driver arguments for the dialect behind ``url``."""
    if url.get_backend_name() == "postgresql":
        return {"application_name": APPLICATION_NAME}
    return {}


def create_transfer_engine(url: URL) -> Engine:
    """Create an engine whose connections live only as long as one task.

    Pooling is disabled: a task opens its connections, uses them, and the
    caller disposes the engine when the task ends.
    """
    engine = create_engine(
        url,
        poolclass=NullPool,
        connect_args=_get_connect_args(url),
        echo=False,
    )
    logger.debug(
        f"Created engine for {url.render_as_string(hide_password=True)}"
    )
    return engine

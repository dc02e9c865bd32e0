"""YAML configuration for transfer runs.

The configuration file lists the tasks, the default source and destination
connection strings, named destination profiles, the batch size and the
logging setup. ``${VAR}`` and ``${VAR|default}`` references are replaced
with environment variables so passwords can stay out of the file.
"""

import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

from dbtransfer.connectors.mock import DEFAULT_MOCK_DELAY_SECONDS
from dbtransfer.connectors.postgres import DEFAULT_BATCH_SIZE
from dbtransfer.connectors.sql import DEFAULT_QUERY_TIMEOUT_SECONDS
from dbtransfer.core.models import DataTransferTask, DestinationProfile, parse_bool
from dbtransfer.exceptions import ConfigurationError
from dbtransfer.logging import get_logger

logger = get_logger(__name__)

_VARIABLE_PATTERN = re.compile(r"\$\{([^}|]+)(?:\|([^}]*))?\}")


@dataclass
class TransferSettings:
    """Everything a run needs, as loaded from the configuration file."""

    destination_connection_string: str
    tasks: List[DataTransferTask] = field(default_factory=list)
    source_connection_string: Optional[str] = None
    destinations: Dict[str, DestinationProfile] = field(default_factory=dict)
    batch_size: int = DEFAULT_BATCH_SIZE
    use_mock_source: bool = False
    mock_delay_seconds: float = DEFAULT_MOCK_DELAY_SECONDS
    query_timeout_seconds: int = DEFAULT_QUERY_TIMEOUT_SECONDS
    transform: Optional[str] = None
    log_level: str = "info"
    log_file: Optional[str] = None


def substitute_environment(data: Any, environ: Optional[Dict[str, str]] = None) -> Any:
    """Replace ``${VAR}`` / ``${VAR|default}`` in every string of ``data``.

    Raises:
        ConfigurationError: If a variable without default is not set
    """
    env = os.environ if environ is None else environ

    if isinstance(data, dict):
        return {key: substitute_environment(value, env) for key, value in data.items()}
    if isinstance(data, list):
        return [substitute_environment(item, env) for item in data]
    if not isinstance(data, str):
        return data

    def replace(match: "re.Match[str]") -> str:
        name = match.group(1).strip()
        default = match.group(2)
        if name in env:
            return env[name]
        if default is not None:
            return default.strip()
        raise ConfigurationError(f"Environment variable '{name}' is not set")

    return _VARIABLE_PATTERN.sub(replace, data)


def _positive_int(value: Any, name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"'{name}' must be an integer, got {value!r}") from e
    if number < 1:
        raise ConfigurationError(f"'{name}' must be a positive integer, got {number}")
    return number


def _parse_bool(value: Any, name: str) -> bool:
    try:
        return parse_bool(value, name)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(f"'{name}' section must be a mapping")
    return section


def _parse_tasks(raw_tasks: Any) -> List[DataTransferTask]:
    if raw_tasks is None:
        return []
    if not isinstance(raw_tasks, list):
        raise ConfigurationError("'tasks' must be a list")

    tasks = []
    seen = set()
    for index, raw_task in enumerate(raw_tasks):
        try:
            task = DataTransferTask.from_dict(raw_task)
        except ValueError as e:
            raise ConfigurationError(f"Invalid task #{index + 1}: {e}") from e
        if task.name in seen:
            raise ConfigurationError(f"Duplicate task name '{task.name}'")
        seen.add(task.name)
        tasks.append(task)
    return tasks


def _parse_destinations(raw: Dict[str, Any]) -> Dict[str, DestinationProfile]:
    destinations = {}
    for key, config in raw.items():
        try:
            destinations[str(key)] = DestinationProfile.from_dict(str(key), config)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
    return destinations


def parse_settings(data: Dict[str, Any]) -> TransferSettings:
    """Build and validate settings from an already-loaded mapping."""
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration root must be a mapping")

    data = substitute_environment(data)
    database = _section(data, "database")
    logging_section = _section(data, "logging")

    destination = database.get("destination_connection_string")
    if not destination:
        raise ConfigurationError(
            "'database.destination_connection_string' is required"
        )

    use_mock = _parse_bool(database.get("use_mock_source"), "use_mock_source")
    source = database.get("source_connection_string")
    if not use_mock and not source:
        raise ConfigurationError(
            "'database.source_connection_string' is required unless "
            "'use_mock_source' is true"
        )

    try:
        mock_delay = float(
            database.get("mock_delay_seconds", DEFAULT_MOCK_DELAY_SECONDS)
        )
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"'mock_delay_seconds' must be a number: {e}") from e

    settings = TransferSettings(
        destination_connection_string=str(destination),
        tasks=_parse_tasks(data.get("tasks")),
        source_connection_string=str(source) if source else None,
        destinations=_parse_destinations(_section(data, "destinations")),
        batch_size=_positive_int(
            database.get("batch_size", DEFAULT_BATCH_SIZE), "batch_size"
        ),
        use_mock_source=use_mock,
        mock_delay_seconds=mock_delay,
        query_timeout_seconds=_positive_int(
            database.get("query_timeout_seconds", DEFAULT_QUERY_TIMEOUT_SECONDS),
            "query_timeout_seconds",
        ),
        transform=data.get("transform") or None,
        log_level=str(logging_section.get("level", "info")),
        log_file=logging_section.get("log_file") or None,
    )

    for task in settings.tasks:
        key = task.destination_server_key
        if key and key not in settings.destinations:
            logger.warning(
                f"Task '{task.name}' names unknown destination '{key}'; "
                "it will use the default destination"
            )
    return settings


def load_settings(path: str) -> TransferSettings:
    """Load settings from a YAML file.

    Raises:
        ConfigurationError: If the file is missing, not valid YAML or invalid
    """
    if not os.path.exists(path):
        raise ConfigurationError(f"Configuration file not found: {path}")

    logger.debug(f"Loading configuration from '{path}'")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in '{path}': {e}") from e

    return parse_settings(data or {})

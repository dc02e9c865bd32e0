"""Data model for transfer runs.

Task definitions and destination profiles come from configuration and are
read-only to the pipeline. Results and events are immutable snapshots:
progress is tracked in task-scoped state and a result is produced once the
task (or run) has finished.
"""

import datetime
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.engine import URL

from dbtransfer.connectors.connection import build_profile_url

DEFAULT_SSL_MODE = "prefer"
DEFAULT_CONNECT_TIMEOUT = 10
DEFAULT_POSTGRES_PORT = 5432

_TRUE_STRINGS = {"true", "yes", "1"}
_FALSE_STRINGS = {"false", "no", "0"}


def parse_bool(value: Any, name: str, default: bool = False) -> bool:
    """Read a configuration flag that may arrive as a string.

    Accepts booleans, 0/1 and the strings true/false/yes/no/1/0 in any case;
    ``None`` gives ``default``.

    Raises:
        ValueError: For any other value
    """
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in _TRUE_STRINGS:
            return True
        if normalized in _FALSE_STRINGS:
            return False
    raise ValueError(f"'{name}' must be true or false, got {value!r}")


@dataclass(frozen=True)
class DataTransferTask:
    """One unit of work: a source query copied into a destination table."""

    name: str
    source_query: str
    destination_table: str
    destination_server_key: Optional[str] = None
    enable_transform: bool = False

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "DataTransferTask":
        """Create a task from its configuration mapping.

        Raises:
            ValueError: If a required field is missing or empty
        """
        if not isinstance(config, dict):
            raise ValueError("Task configuration must be a dictionary")

        missing = [
            key
            for key in ("name", "source_query", "destination_table")
            if not str(config.get(key) or "").strip()
        ]
        if missing:
            label = config.get("name") or "<unnamed>"
            raise ValueError(
                f"Task '{label}' missing required field(s): {', '.join(missing)}"
            )

        server_key = config.get("destination_server_key")
        return cls(
            name=str(config["name"]).strip(),
            source_query=str(config["source_query"]),
            destination_table=str(config["destination_table"]).strip(),
            destination_server_key=str(server_key).strip() if server_key else None,
            enable_transform=parse_bool(
                config.get("enable_transform"), "enable_transform"
            ),
        )


@dataclass(frozen=True)
class DestinationProfile:
    """Named connection parameters for an alternate destination database."""

    key: str
    host: str
    database: str
    username: str
    password: str = ""
    port: int = DEFAULT_POSTGRES_PORT
    ssl_mode: str = DEFAULT_SSL_MODE
    connect_timeout: int = DEFAULT_CONNECT_TIMEOUT

    @classmethod
    def from_dict(cls, key: str, config: Dict[str, Any]) -> "DestinationProfile":
        if not isinstance(config, dict):
            raise ValueError(f"Destination '{key}' configuration must be a dictionary")

        missing = [k for k in ("host", "database", "username") if not config.get(k)]
        if missing:
            raise ValueError(
                f"Destination '{key}' missing required field(s): {', '.join(missing)}"
            )

        try:
            port = int(config.get("port", DEFAULT_POSTGRES_PORT))
            connect_timeout = int(
                config.get("connect_timeout", DEFAULT_CONNECT_TIMEOUT)
            )
        except (TypeError, ValueError) as e:
            raise ValueError(f"Destination '{key}': {e}") from e

        return cls(
            key=key,
            host=str(config["host"]),
            database=str(config["database"]),
            username=str(config["username"]),
            password=str(config.get("password") or ""),
            port=port,
            ssl_mode=str(config.get("ssl_mode") or DEFAULT_SSL_MODE),
            connect_timeout=connect_timeout,
        )

    def to_url(self) -> URL:
        return build_profile_url(
            host=self.host,
            port=self.port,
            database=self.database,
            username=self.username,
            password=self.password,
            ssl_mode=self.ssl_mode,
            connect_timeout=self.connect_timeout,
        )

    def describe(self) -> str:
        return f"{self.key} ({self.host}:{self.port}/{self.database})"


@dataclass(frozen=True)
class ProgressEvent:
    """Rows committed so far for the task being written."""

    task_name: str
    total_records: int
    processed_records: int

    @property
    def percentage(self) -> float:
        if self.total_records <= 0:
            return 0.0
        return self.processed_records / self.total_records * 100


@dataclass(frozen=True)
class TaskProgressEvent:
    """Emitted after each task, whatever its outcome."""

    task_name: str
    completed_tasks: int
    total_tasks: int
    task_succeeded: bool


@dataclass(frozen=True)
class LogEvent:
    level: int
    message: str
    label: Optional[str] = None
    timestamp: datetime.datetime = field(default_factory=datetime.datetime.now)

    @property
    def level_name(self) -> str:
        return logging.getLevelName(self.level)

    def __str__(self) -> str:
        if self.label:
            return f"[{self.label}] {self.message}"
        return self.message


@dataclass(frozen=True, slots=True)
class TransferResult:
    """Outcome of one task."""

    task_name: str
    is_success: bool
    total_records: int = 0
    processed_records: int = 0
    duration: datetime.timedelta = datetime.timedelta(0)
    error_message: Optional[str] = None
    failed_stage: Optional[str] = None

    def __post_init__(self):
        if self.processed_records > self.total_records:
            raise ValueError("processed_records cannot exceed total_records")
        if self.is_success:
            if self.error_message:
                raise ValueError("Successful task cannot have error_message")
            if self.processed_records != self.total_records:
                raise ValueError("Successful task must process every record")
        elif not self.error_message:
            raise ValueError("Failed task must have error_message")


@dataclass(frozen=True, slots=True)
class MultiTaskTransferResult:
    """Outcome of a whole run, with every task's result in execution order."""

    is_success: bool
    total_tasks: int
    completed_tasks: int
    total_records_processed: int
    duration: datetime.timedelta = datetime.timedelta(0)
    error_message: Optional[str] = None
    task_results: Tuple[TransferResult, ...] = ()

    @property
    def failed_tasks(self) -> List[TransferResult]:
        return [result for result in self.task_results if not result.is_success]

    @property
    def succeeded_tasks(self) -> List[TransferResult]:
        return [result for result in self.task_results if result.is_success]

    def summary(self) -> str:
        """Human-readable outcome, naming every failed task."""
        lines = []
        if self.error_message:
            lines.append(f"Run aborted: {self.error_message}")
        failed = self.failed_tasks
        if failed:
            lines.append(f"{len(failed)} of {self.total_tasks} tasks failed")
            for result in failed:
                lines.append(f"  - {result.task_name}: {result.error_message}")
        elif not self.error_message:
            lines.append(
                f"All {self.total_tasks} tasks succeeded "
                f"({self.total_records_processed} records)"
            )
        return "\n".join(lines)


def create_multi_task_result(
    task_results: List[TransferResult],
    total_tasks: int,
    duration: datetime.timedelta,
    error_message: Optional[str] = None,
) -> MultiTaskTransferResult:
    """Aggregate task results; success is the AND of every task's success."""
    return MultiTaskTransferResult(
        is_success=error_message is None
        and all(result.is_success for result in task_results),
        total_tasks=total_tasks,
        completed_tasks=len(task_results),
        total_records_processed=sum(r.processed_records for r in task_results),
        duration=duration,
        error_message=error_message,
        task_results=tuple(task_results),
    )

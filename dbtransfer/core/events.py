"""Event sink shared by the orchestrator and task runner."""

import logging
from typing import Callable, Optional

from dbtransfer.core.models import LogEvent, ProgressEvent, TaskProgressEvent
from dbtransfer.logging import get_logger

ProgressCallback = Callable[[ProgressEvent], None]
TaskProgressCallback = Callable[[TaskProgressEvent], None]
LogCallback = Callable[[LogEvent], None]


class TransferEvents:
    """Forwards progress and log events to the caller's listeners.

    Log lines are also written to ``logger`` so they reach the configured
    logging handlers. Listeners are called synchronously, in emission order.
    """

    def __init__(
        self,
        on_progress: Optional[ProgressCallback] = None,
        on_task_progress: Optional[TaskProgressCallback] = None,
        on_log: Optional[LogCallback] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.on_progress = on_progress
        self.on_task_progress = on_task_progress
        self.on_log = on_log
        self.logger = logger or get_logger("dbtransfer.transfer")

    def progress(self, event: ProgressEvent) -> None:
        if self.on_progress is not None:
            self.on_progress(event)

    def task_progress(self, event: TaskProgressEvent) -> None:
        if self.on_task_progress is not None:
            self.on_task_progress(event)

    def log(
        self,
        message: str,
        label: Optional[str] = None,
        level: int = logging.INFO,
        exc_info: bool = False,
    ) -> None:
        event = LogEvent(level=level, message=message, label=label)
        self.logger.log(level, str(event), exc_info=exc_info)
        if self.on_log is not None:
            self.on_log(event)

    def info(self, message: str, label: Optional[str] = None) -> None:
        self.log(message, label, logging.INFO)

    def warning(self, message: str, label: Optional[str] = None) -> None:
        self.log(message, label, logging.WARNING)

    def error(
        self, message: str, label: Optional[str] = None, exc_info: bool = False
    ) -> None:
        self.log(message, label, logging.ERROR, exc_info=exc_info)

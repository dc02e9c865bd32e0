"""Sequential orchestration of a list of transfer tasks."""

import datetime
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, Iterable, List, Optional

from dbtransfer.connectors.base import SourceConnector
from dbtransfer.connectors.connection import mask_connection_string
from dbtransfer.connectors.postgres import DEFAULT_BATCH_SIZE
from dbtransfer.core.events import TransferEvents
from dbtransfer.core.models import (
    DataTransferTask,
    DestinationProfile,
    MultiTaskTransferResult,
    TaskProgressEvent,
    TransferResult,
    create_multi_task_result,
)
from dbtransfer.core.task_runner import TaskRunner
from dbtransfer.core.transform import RowTransform, identity_transform
from dbtransfer.exceptions import RunFatalError


class TransferPipeline:
    """Runs every configured task, one after another.

    A failing task is recorded and the run moves on to the next task. Only
    a failure outside any single task (for example when the task list itself
    cannot be read) ends the run early.
    """

    def __init__(
        self,
        source: SourceConnector,
        default_destination: str,
        destinations: Optional[Dict[str, DestinationProfile]] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        transform: RowTransform = identity_transform,
        events: Optional[TransferEvents] = None,
        source_description: Optional[str] = None,
        task_runner: Optional[TaskRunner] = None,
    ):
        self.events = events or TransferEvents()
        self.default_destination = default_destination
        self.source_description = source_description
        self.task_runner = task_runner or TaskRunner(
            source=source,
            default_destination=default_destination,
            destinations=destinations,
            batch_size=batch_size,
            transform=transform,
            events=self.events,
        )

    def _load_tasks(self, tasks: Iterable[DataTransferTask]) -> List[DataTransferTask]:
        try:
            task_list = list(tasks)
        except Exception as e:
            raise RunFatalError(f"Could not enumerate tasks: {e}") from e

        seen = set()
        for task in task_list:
            if not isinstance(task, DataTransferTask):
                raise RunFatalError(
                    f"Expected DataTransferTask, got {type(task).__name__}"
                )
            if not task.name:
                raise RunFatalError("Task names must not be empty")
            if task.name in seen:
                raise RunFatalError(f"Duplicate task name '{task.name}'")
            seen.add(task.name)
        return task_list

    def _log_connections(self) -> None:
        if self.source_description:
            self.events.info(
                f"Source: {mask_connection_string(self.source_description)}"
            )
        self.events.info(
            f"Default destination: {mask_connection_string(self.default_destination)}"
        )

    def run(self, tasks: Iterable[DataTransferTask]) -> MultiTaskTransferResult:
        started = time.monotonic()
        results: List[TransferResult] = []
        total_tasks = 0

        try:
            task_list = self._load_tasks(tasks)
            total_tasks = len(task_list)
            self.events.info(f"Starting transfer run with {total_tasks} task(s)")
            self._log_connections()

            for index, task in enumerate(task_list, start=1):
                self.events.info(f"Task {index}/{total_tasks}: {task.name}")
                result = self.task_runner.run(task)
                results.append(result)
                self.events.task_progress(
                    TaskProgressEvent(
                        task_name=task.name,
                        completed_tasks=len(results),
                        total_tasks=total_tasks,
                        task_succeeded=result.is_success,
                    )
                )
        except Exception as e:
            fatal = e if isinstance(e, RunFatalError) else RunFatalError(str(e))
            self.events.error(
                f"Run aborted: {fatal.message}",
                exc_info=not isinstance(e, RunFatalError),
            )
            return create_multi_task_result(
                results,
                total_tasks=total_tasks,
                duration=datetime.timedelta(seconds=time.monotonic() - started),
                error_message=fatal.message,
            )

        run_result = create_multi_task_result(
            results,
            total_tasks=total_tasks,
            duration=datetime.timedelta(seconds=time.monotonic() - started),
        )
        failed = run_result.failed_tasks
        if failed:
            self.events.warning(
                f"Run finished: {len(failed)} of {total_tasks} tasks failed"
            )
            for result in failed:
                self.events.warning(f"{result.task_name}: {result.error_message}")
        else:
            self.events.info(
                f"Run finished: all {total_tasks} tasks succeeded, "
                f"{run_result.total_records_processed} records in "
                f"{run_result.duration.total_seconds():.2f} seconds"
            )
        return run_result

    def run_in_background(
        self, tasks: Iterable[DataTransferTask]
    ) -> "Future[MultiTaskTransferResult]":
        """Run on a single worker thread so the caller stays responsive.

        Tasks still execute one at a time; the returned future resolves to
        the run result.
        """
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="dbtransfer")
        try:
            return executor.submit(self.run, tasks)
        finally:
            executor.shutdown(wait=False)

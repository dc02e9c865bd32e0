"""Runs a single transfer task from source query to destination table."""

import datetime
import logging
import time
from enum import Enum
from typing import Callable, Dict, Optional

from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import ArgumentError, SQLAlchemyError

from dbtransfer.connectors.base import SourceConnector
from dbtransfer.connectors.connection import (
    build_url,
    create_transfer_engine,
    mask_connection_string,
)
from dbtransfer.connectors.postgres import DEFAULT_BATCH_SIZE, ensure_table, write_batches
from dbtransfer.core.events import TransferEvents
from dbtransfer.core.models import (
    DataTransferTask,
    DestinationProfile,
    ProgressEvent,
    TransferResult,
)
from dbtransfer.core.transform import RowTransform, apply_transform, identity_transform
from dbtransfer.exceptions import (
    ConfigResolutionError,
    DestinationConnectionError,
    TransferError,
)


class TaskStage(str, Enum):
    INIT = "init"
    CONNECTING = "connecting"
    READING = "reading"
    TRANSFORMING = "transforming"
    ENSURING_SCHEMA = "ensuring_schema"
    WRITING = "writing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class _TaskState:
    """Mutable progress of the task currently running; never shared."""

    def __init__(self, task_name: str):
        self.task_name = task_name
        self.stage = TaskStage.INIT
        self.total_records = 0
        self.processed_records = 0


class TaskRunner:
    """Executes one task end to end and reports the outcome as a result.

    Stages run in order: connect to the destination, read the source query,
    transform (when enabled), ensure the destination table, write batches.
    Any failure is caught here and recorded in the returned
    ``TransferResult``; ``run`` itself never raises for task-level errors.
    """

    def __init__(
        self,
        source: SourceConnector,
        default_destination: str,
        destinations: Optional[Dict[str, DestinationProfile]] = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
        transform: RowTransform = identity_transform,
        events: Optional[TransferEvents] = None,
        engine_factory: Callable[[URL], Engine] = create_transfer_engine,
    ):
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        self.source = source
        self.default_destination = default_destination
        self.destinations = destinations or {}
        self.batch_size = batch_size
        self.transform = transform
        self.events = events or TransferEvents()
        self._engine_factory = engine_factory

    def resolve_destination(self, task: DataTransferTask) -> URL:
        """Pick the destination URL for a task.

        A named profile that does not exist falls back to the default
        destination with a warning instead of failing the task.
        """
        key = task.destination_server_key
        if key:
            profile = self.destinations.get(key)
            if profile is not None:
                self.events.info(
                    f"Using destination profile {profile.describe()}", task.name
                )
                return profile.to_url()
            error = ConfigResolutionError(
                f"Destination profile '{key}' not found; "
                "falling back to the default destination",
                context={"task": task.name},
            )
            self.events.warning(error.message, task.name)
        else:
            self.events.info("Using the default destination", task.name)

        try:
            return build_url(self.default_destination)
        except (ValueError, ArgumentError) as e:
            raise DestinationConnectionError(
                f"Invalid destination connection string: {e}",
                context={
                    "connection": mask_connection_string(self.default_destination)
                },
            ) from e

    def _enter(self, state: _TaskState, stage: TaskStage) -> None:
        state.stage = stage
        self.events.log(f"Stage: {stage.value}", state.task_name, level=logging.DEBUG)

    def _on_batch(self, state: _TaskState, processed: int) -> None:
        state.processed_records = processed
        self.events.progress(
            ProgressEvent(
                task_name=state.task_name,
                total_records=state.total_records,
                processed_records=processed,
            )
        )
        self.events.info(
            f"Progress: {processed}/{state.total_records} records processed",
            state.task_name,
        )

    def _connect(self, engine: Engine):
        try:
            return engine.connect()
        except SQLAlchemyError as e:
            raise DestinationConnectionError(
                f"Could not connect to destination database: {e}"
            ) from e

    def run(self, task: DataTransferTask) -> TransferResult:
        label = task.name
        state = _TaskState(task.name)
        started = time.monotonic()
        engine: Optional[Engine] = None
        self.events.info("Starting data transfer", label)

        try:
            self._enter(state, TaskStage.CONNECTING)
            engine = self._engine_factory(self.resolve_destination(task))
            with self._connect(engine) as connection:
                self.events.info("Connected to destination database", label)

                self._enter(state, TaskStage.READING)
                buffer = self.source.read_query(task.source_query, label)
                state.total_records = len(buffer)
                self.events.info(
                    f"Read {state.total_records} records from source", label
                )

                if task.enable_transform:
                    self._enter(state, TaskStage.TRANSFORMING)
                    buffer = apply_transform(self.transform, buffer, label)
                    state.total_records = len(buffer)
                else:
                    self.events.info("Transform disabled; rows passed through", label)

                self._enter(state, TaskStage.ENSURING_SCHEMA)
                ensure_table(buffer, task.destination_table, connection)
                self.events.info(
                    f"Table '{task.destination_table}' checked/created", label
                )

                self._enter(state, TaskStage.WRITING)
                write_batches(
                    buffer,
                    task.destination_table,
                    connection,
                    batch_size=self.batch_size,
                    on_batch=lambda processed: self._on_batch(state, processed),
                )
        except Exception as e:
            failed_stage = state.stage
            state.stage = TaskStage.FAILED
            message = (e.message if isinstance(e, TransferError) else str(e)) or (
                e.__class__.__name__
            )
            duration = datetime.timedelta(seconds=time.monotonic() - started)
            self.events.error(
                f"Failed during {failed_stage.value}: {message}",
                label,
                exc_info=not isinstance(e, TransferError),
            )
            return TransferResult(
                task_name=task.name,
                is_success=False,
                total_records=state.total_records,
                processed_records=state.processed_records,
                duration=duration,
                error_message=message,
                failed_stage=failed_stage.value,
            )
        finally:
            if engine is not None:
                engine.dispose()

        state.stage = TaskStage.SUCCEEDED
        duration = datetime.timedelta(seconds=time.monotonic() - started)
        self.events.info(
            f"Transfer complete: {state.processed_records}/{state.total_records} "
            f"records in {duration.total_seconds():.2f} seconds",
            label,
        )
        return TransferResult(
            task_name=task.name,
            is_success=True,
            total_records=state.total_records,
            processed_records=state.processed_records,
            duration=duration,
        )

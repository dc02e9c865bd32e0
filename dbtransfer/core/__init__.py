from dbtransfer.core.events import TransferEvents
from dbtransfer.core.models import (
    DataTransferTask,
    DestinationProfile,
    LogEvent,
    MultiTaskTransferResult,
    ProgressEvent,
    TaskProgressEvent,
    TransferResult,
)
from dbtransfer.core.orchestrator import TransferPipeline
from dbtransfer.core.task_runner import TaskRunner, TaskStage
from dbtransfer.core.transform import (
    RowTransform,
    apply_transform,
    identity_transform,
    load_transform,
)

__all__ = [
    "DataTransferTask",
    "DestinationProfile",
    "LogEvent",
    "MultiTaskTransferResult",
    "ProgressEvent",
    "RowTransform",
    "TaskProgressEvent",
    "TaskRunner",
    "TaskStage",
    "TransferEvents",
    "TransferPipeline",
    "TransferResult",
    "apply_transform",
    "identity_transform",
    "load_transform",
]

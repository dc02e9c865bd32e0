"""Row transform hook applied to a task's buffer before it is written.

A transform is any callable ``(buffer, label) -> buffer``. The default is
the identity; projects plug in their own through the ``transform`` entry
of the configuration file (``"package.module:function"``).
"""

import importlib
from typing import Callable

from dbtransfer.connectors.buffer import TabularBuffer
from dbtransfer.exceptions import TransformError
from dbtransfer.logging import get_logger

logger = get_logger(__name__)

RowTransform = Callable[[TabularBuffer, str], TabularBuffer]


def identity_transform(buffer: TabularBuffer, label: str) -> TabularBuffer:
    return buffer


def apply_transform(
    transform: RowTransform, buffer: TabularBuffer, label: str
) -> TabularBuffer:
    """Run ``transform`` and wrap any failure in ``TransformError``."""
    logger.info(f"[{label}] Starting transform ({len(buffer)} rows)")
    try:
        result = transform(buffer, label)
    except Exception as e:
        logger.error(f"[{label}] Transform failed: {e}")
        raise TransformError(
            f"Transform failed: {e}", context={"task": label}
        ) from e

    if not isinstance(result, TabularBuffer):
        raise TransformError(
            f"Transform returned {type(result).__name__}, expected TabularBuffer",
            context={"task": label},
        )
    logger.info(f"[{label}] Transform completed ({len(result)} rows)")
    return result


def load_transform(import_path: str) -> RowTransform:
    """Resolve ``"package.module:function"`` to a transform callable.

    Raises:
        ValueError: If the path is malformed or does not name a callable
    """
    module_name, sep, attribute = import_path.partition(":")
    if not sep or not module_name or not attribute:
        raise ValueError(
            f"Transform '{import_path}' must look like 'package.module:function'"
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ValueError(f"Cannot import transform module '{module_name}': {e}") from e

    transform = getattr(module, attribute, None)
    if not callable(transform):
        raise ValueError(f"'{import_path}' is not a callable transform")
    return transform

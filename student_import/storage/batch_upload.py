from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator

from ..models.storage_result import StorageResult, UploadTask
from .base import StorageAdapter

"""Sequential multi-file upload.

Failures are logged and skipped; the caller receives only the successful
uploads. iter_uploads() keeps each result paired with its task so callers
never have to line results up by index.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "ProgressCallback",
    "ErrorCallback",
    "iter_uploads",
    "batch_upload",
]

ProgressCallback = Callable[[int, int], None]
ErrorCallback = Callable[[UploadTask, Exception], None]


def iter_uploads(
    tasks: Iterable[UploadTask],
    adapter: StorageAdapter,
    on_progress: ProgressCallback | None = None,
    on_error: ErrorCallback | None = None,
) -> Iterator[tuple[UploadTask, StorageResult]]:
    """Upload tasks in order, yielding (task, result) for each success.

    on_progress(uploaded, total) is called after every successful upload.
    on_error(task, error) is called for every failed upload.
    """
    task_list = list(tasks)
    total = len(task_list)
    uploaded = 0
    for task in task_list:
        try:
            result = adapter.put(task.data, task.key, task.metadata)
        except Exception as e:
            # one bad file never stops the rest of the batch
            logger.warning("upload failed key=%s: %s", task.key, e)
            if on_error is not None:
                on_error(task, e)
            continue
        uploaded += 1
        if on_progress is not None:
            on_progress(uploaded, total)
        yield task, result


def batch_upload(
    tasks: Iterable[UploadTask],
    adapter: StorageAdapter,
    on_progress: ProgressCallback | None = None,
) -> list[StorageResult]:
    return [result for _, result in iter_uploads(tasks, adapter, on_progress)]

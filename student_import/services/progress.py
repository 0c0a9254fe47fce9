from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm

"""Commit progress bar (tqdm, interactive terminals only).

The orchestrator reports progress as absolute (processed, total) counts; the
tracker turns them into tqdm steps. When stdout is not a TTY (CI, redirected
output) no bar is created so log files carry no control sequences.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """Row progress for one commit.

    `update` matches the orchestrator's on_progress signature:

        with ProgressTracker(len(rows)) as tracker:
            orchestrator.commit(batch_id, rows, on_progress=tracker.update)
    """

    def __init__(self, total_rows: int, *, description: str = "Importing rows") -> None:
        self.total_rows = total_rows
        self.description = description
        self.processed = 0
        self.enabled = is_tty_enabled()
        self.pbar: Any = None
        if self.enabled:
            self.pbar = tqdm(
                total=total_rows,
                desc=description,
                unit="row",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )

    def update(self, processed: int, total: int) -> None:
        """Move to `processed` rows out of `total` (absolute, not a delta)."""
        step = processed - self.processed
        self.processed = processed
        if total != self.total_rows:
            self.total_rows = total
            if self.pbar is not None:
                self.pbar.total = total
        if self.pbar is not None and step > 0:
            self.pbar.update(step)

    def set_postfix(self, **kwargs: Any) -> None:
        if self.pbar is not None:
            self.pbar.set_postfix(**kwargs)

    def close(self) -> None:
        bar, self.pbar = self.pbar, None
        if bar is not None:
            bar.close()

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

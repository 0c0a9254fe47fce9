from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""Buffered JSON Lines error ledger.

Records collect in memory during a commit and are appended to
`<logs_dir>/errors-YYYYMMDD-HHMMSS.log` (UTC, stamped on first use) when the
commit ends. Nothing is created on disk for a clean run.
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
    "DEFAULT_LOGS_DIR",
]

DEFAULT_LOGS_DIR = Path("./logs")
FILE_STAMP = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """Not thread safe; commits run one at a time."""

    def __init__(self, logs_dir: Path | str = DEFAULT_LOGS_DIR) -> None:
        self._dir = Path(logs_dir)
        self._pending: list[ErrorRecord] = []
        self._path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._path is None:
            self._path = self._dir / f"errors-{datetime.now(UTC).strftime(FILE_STAMP)}.log"
        return self._path

    @property
    def records(self) -> list[ErrorRecord]:
        return self._pending.copy()

    def append(self, record: ErrorRecord) -> None:
        self._pending.append(record)

    def __len__(self) -> int:
        return len(self._pending)

    def flush(self) -> Path | None:
        """Append pending records to the ledger file and empty the buffer.

        Returns:
            The ledger path, or None when nothing was pending
        """
        if not self._pending:
            return None
        path = self.file_path
        path.parent.mkdir(parents=True, exist_ok=True)
        lines = "".join(record.to_json_line() + "\n" for record in self._pending)
        with path.open("a", encoding="utf-8") as fh:
            fh.write(lines)
        self._pending.clear()
        return path

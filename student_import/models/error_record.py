from __future__ import annotations

import json
from dataclasses import asdict, dataclass

from .storage_result import utc_timestamp

"""One line of the JSON Lines error ledger.

Written for every row-level problem seen during a commit, whether the create
call or a document upload was the part that failed.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Ledger entry. The field set is the on-disk key set; keep it closed.

    Attributes:
        timestamp: ISO8601 UTC with a 'Z' suffix
        file: spreadsheet the batch was parsed from
        batch_id: import batch id
        row: 1-based spreadsheet row, -1 when there is none
        error_type: UPPER_SNAKE_CASE classification
        message: human readable reason
    """
    timestamp: str
    file: str
    batch_id: str
    row: int
    error_type: str
    message: str

    @classmethod
    def create(cls, file: str, batch_id: str, row: int, error_type: str, message: str) -> ErrorRecord:
        return cls(utc_timestamp(), file, batch_id, row, error_type, message)

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum
from typing import Any

"""ImportBatch domain model and BatchStatus enum.

An ImportBatch is the set of rows parsed from one uploaded spreadsheet,
tracked as a unit through review and commit. Its row counts are a snapshot of
the parser output taken when the batch is created.
"""

__all__ = [
    "BatchStatus",
    "ImportBatch",
    "RowError",
    "CommitResult",
    "ALLOWED_TRANSITIONS",
]


class BatchStatus(Enum):
    """Status enum for the ImportBatch lifecycle.

    State transitions: pending → reviewing → importing → (completed | failed)

    - PENDING: batch created from parser output
    - REVIEWING: rows are being reviewed by an operator
    - IMPORTING: operator confirmed, commit about to run
    - COMPLETED: commit finished with zero failed rows
    - FAILED: commit finished with at least one failed row
    """
    PENDING = "pending"
    REVIEWING = "reviewing"
    IMPORTING = "importing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (BatchStatus.COMPLETED, BatchStatus.FAILED)


# Commit may close any non-terminal batch, so terminal targets are reachable
# from every non-terminal state.
ALLOWED_TRANSITIONS: dict[BatchStatus, frozenset[BatchStatus]] = {
    BatchStatus.PENDING: frozenset(
        {BatchStatus.REVIEWING, BatchStatus.COMPLETED, BatchStatus.FAILED}
    ),
    BatchStatus.REVIEWING: frozenset(
        {BatchStatus.IMPORTING, BatchStatus.COMPLETED, BatchStatus.FAILED}
    ),
    BatchStatus.IMPORTING: frozenset({BatchStatus.COMPLETED, BatchStatus.FAILED}),
    BatchStatus.COMPLETED: frozenset(),
    BatchStatus.FAILED: frozenset(),
}


@dataclass(frozen=True)
class ImportBatch:
    id: str
    file_name: str
    total_rows: int
    valid_rows: int
    invalid_rows: int
    warning_rows: int
    status: BatchStatus = BatchStatus.PENDING
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def can_transition_to(self, status: BatchStatus) -> bool:
        return status in ALLOWED_TRANSITIONS[self.status]

    def with_status(self, status: BatchStatus) -> ImportBatch:
        """Return a copy in the new status with updated_at refreshed."""
        return replace(self, status=status, updated_at=datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "file_name": self.file_name,
            "total_rows": self.total_rows,
            "valid_rows": self.valid_rows,
            "invalid_rows": self.invalid_rows,
            "warning_rows": self.warning_rows,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> ImportBatch:
        def _dt(value: Any) -> datetime:
            return value if isinstance(value, datetime) else datetime.fromisoformat(value)

        return ImportBatch(
            id=data["id"],
            file_name=data["file_name"],
            total_rows=int(data["total_rows"]),
            valid_rows=int(data["valid_rows"]),
            invalid_rows=int(data["invalid_rows"]),
            warning_rows=int(data["warning_rows"]),
            status=BatchStatus(data["status"]),
            created_at=_dt(data["created_at"]),
            updated_at=_dt(data["updated_at"]),
        )


@dataclass(frozen=True)
class RowError:
    row_number: int
    error: str


@dataclass(frozen=True)
class CommitResult:
    """Ledger of one commit call: counts plus per-row failures in row order."""
    imported: int
    failed: int
    errors: list[RowError] = field(default_factory=list)
    started_at: datetime | None = None
    finished_at: datetime | None = None
    elapsed_seconds: float = 0.0

    @property
    def processed(self) -> int:
        return self.imported + self.failed

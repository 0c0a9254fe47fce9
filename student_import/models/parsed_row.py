from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .student_row import STUDENT_FIELDS, StudentRow
from .validation import ValidationIssue

"""ParsedRow / ParseResult models for the student import parser.

ParsedRow is the unit that flows from the parser through review into commit.
Its status is derived from its issue lists so the invariant
(invalid iff errors, warning iff only warnings, else valid) cannot drift.
"""

__all__ = [
    "RowStatus",
    "ParsedRow",
    "ParseResult",
]


class RowStatus(Enum):
    """Validation status of a parsed row.

    - VALID: no errors, no warnings
    - WARNING: no errors, at least one warning (still importable)
    - INVALID: at least one error (never committed)
    """
    VALID = "valid"
    WARNING = "warning"
    INVALID = "invalid"


@dataclass(frozen=True)
class ParsedRow:
    row_number: int  # 1-based spreadsheet row (header is row 1)
    data: StudentRow
    errors: tuple[ValidationIssue, ...] = ()
    warnings: tuple[ValidationIssue, ...] = ()

    @property
    def status(self) -> RowStatus:
        if self.errors:
            return RowStatus.INVALID
        if self.warnings:
            return RowStatus.WARNING
        return RowStatus.VALID

    @property
    def is_committable(self) -> bool:
        return self.status is not RowStatus.INVALID

    def to_dict(self) -> dict[str, Any]:
        return {
            "row_number": self.row_number,
            "data": self.data.as_dict(),
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
            "status": self.status.value,
        }

    @staticmethod
    def from_dict(data: dict[str, Any]) -> ParsedRow:
        # status is derived; the stored value is informational only
        values = {k: v for k, v in data.get("data", {}).items() if k in STUDENT_FIELDS}
        return ParsedRow(
            row_number=int(data["row_number"]),
            data=StudentRow(**values),
            errors=tuple(ValidationIssue.from_dict(e) for e in data.get("errors", [])),
            warnings=tuple(ValidationIssue.from_dict(w) for w in data.get("warnings", [])),
        )


@dataclass(frozen=True)
class ParseResult:
    """Parser output: rows in spreadsheet order plus a frozen status tally."""
    rows: list[ParsedRow] = field(default_factory=list)
    total_rows: int = 0
    valid_rows: int = 0
    invalid_rows: int = 0
    warning_rows: int = 0

    @staticmethod
    def from_rows(rows: list[ParsedRow]) -> ParseResult:
        statuses = [r.status for r in rows]
        return ParseResult(
            rows=list(rows),
            total_rows=len(rows),
            valid_rows=statuses.count(RowStatus.VALID),
            invalid_rows=statuses.count(RowStatus.INVALID),
            warning_rows=statuses.count(RowStatus.WARNING),
        )

    @property
    def committable_rows(self) -> list[ParsedRow]:
        return [r for r in self.rows if r.is_committable]

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

"""Validation issue model for the student import parser.

A ValidationIssue is produced by the row validator and attached to a ParsedRow
either as an error (blocks the row from commit) or as a warning (row can still
be imported).
"""

__all__ = [
    "Severity",
    "ValidationIssue",
]


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class ValidationIssue:
    """One problem found on one field of a spreadsheet row."""
    field: str  # StudentRow attribute name
    message: str  # human readable text shown in review / error export
    severity: Severity

    @staticmethod
    def error(field: str, message: str) -> ValidationIssue:
        return ValidationIssue(field=field, message=message, severity=Severity.ERROR)

    @staticmethod
    def warning(field: str, message: str) -> ValidationIssue:
        return ValidationIssue(field=field, message=message, severity=Severity.WARNING)

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message, "severity": self.severity.value}

    @staticmethod
    def from_dict(data: dict[str, str]) -> ValidationIssue:
        return ValidationIssue(
            field=data["field"],
            message=data["message"],
            severity=Severity(data["severity"]),
        )

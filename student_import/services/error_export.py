from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

import pandas as pd

from ..models.parsed_row import ParsedRow, RowStatus
from ..models.student_row import STUDENT_FIELDS
from ..models.validation import ValidationIssue

"""Export of rows that need attention (invalid or warning) to an .xlsx file.

The workbook has one sheet, "Errors", with one line per row:
Row Number, Status, Errors, Warnings, then every student field. Issue lists
are rendered as "field: message; field: message".
"""

logger = logging.getLogger(__name__)

__all__ = [
    "ERRORS_SHEET",
    "format_issues",
    "build_errors_frame",
    "generate_errors_excel",
]

ERRORS_SHEET = "Errors"
LEADING_COLUMNS = ["Row Number", "Status", "Errors", "Warnings"]


def format_issues(issues: Iterable[ValidationIssue]) -> str:
    return "; ".join(f"{i.field}: {i.message}" for i in issues)


def build_errors_frame(rows: Iterable[ParsedRow]) -> pd.DataFrame:
    records = []
    for row in rows:
        if row.status is RowStatus.VALID:
            continue
        record = {
            "Row Number": row.row_number,
            "Status": row.status.value.upper(),
            "Errors": format_issues(row.errors),
            "Warnings": format_issues(row.warnings),
        }
        record.update(row.data.as_dict())
        records.append(record)
    return pd.DataFrame.from_records(records, columns=LEADING_COLUMNS + list(STUDENT_FIELDS))


def generate_errors_excel(rows: Iterable[ParsedRow], out_path: Path) -> int:
    """Write the error workbook.

    Returns:
        Number of rows written (0 means every row was valid; the file is still written)
    """
    df = build_errors_frame(rows)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=ERRORS_SHEET, index=False)
    logger.info("error export written path=%s rows=%d", out_path, len(df))
    return len(df)

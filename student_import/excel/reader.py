from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any

import pandas as pd

from .columns import COLUMN_MAPPING, STUDENTS_SHEET

"""Spreadsheet reader for the student import template.

Row 1 is the header, data starts at row 2. Cells are read without pandas'
default NA conversion so literal strings such as "NA" or "None" survive
(they can be real values, e.g. a nationality column filled with "NA" is a
validation problem, not a blank cell). Blank rows inside the sheet are kept
as blank records so that list position + 2 is always the spreadsheet row.

Parse-level failures raise ImportParseError subclasses and abort the import.
"""

__all__ = [
    "ImportParseError",
    "UnreadableFileError",
    "MissingSheetError",
    "NoDataError",
    "MissingColumnsError",
    "SheetData",
    "read_student_table",
    "cell_to_str",
]

CSV_SUFFIXES = {".csv"}


class ImportParseError(Exception):
    """Base class for fatal, whole-file parse failures."""


class UnreadableFileError(ImportParseError):
    """Raised when the file bytes cannot be read as a spreadsheet."""


class MissingSheetError(ImportParseError):
    """Raised when the expected sheet is not in the workbook."""


class NoDataError(ImportParseError):
    """Raised when the sheet has a header but no data rows."""


class MissingColumnsError(ImportParseError):
    """Raised when not a single template header is present."""


@dataclass
class SheetData:
    sheet_name: str
    columns: list[str]
    records: list[dict[str, Any]]  # header text -> raw cell value, one per data row


def cell_to_str(value: Any) -> str:
    """Render one raw cell as the trimmed string the parser works on."""
    if value is None:
        return ""
    if isinstance(value, float) and pd.isna(value):
        return ""
    if value is pd.NaT:
        return ""
    if isinstance(value, (pd.Timestamp, datetime)):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, float) and value.is_integer():
        # numeric cells such as phone numbers come back as 9876543210.0
        return str(int(value))
    return str(value).strip()


def _select_sheet(sheet_names: list[str], requested: str | None) -> str:
    if requested is not None:
        if requested not in sheet_names:
            raise MissingSheetError(f'Invalid template: "{requested}" sheet not found')
        return requested
    if STUDENTS_SHEET in sheet_names:
        return STUDENTS_SHEET
    if not sheet_names:
        raise MissingSheetError("workbook contains no sheets")
    return sheet_names[0]


def _read_frame(path: Path, sheet_name: str | None) -> tuple[str, pd.DataFrame]:
    if path.suffix.lower() in CSV_SUFFIXES:
        df = pd.read_csv(
            path,
            header=0,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=False,
        )
        return path.stem, df

    with pd.ExcelFile(path) as xls:
        name = _select_sheet([str(s) for s in xls.sheet_names], sheet_name)
        df = xls.parse(name, header=0, dtype=object, keep_default_na=False)
    return name, df


def read_student_table(path: Path, sheet_name: str | None = None) -> SheetData:
    """Read the students sheet of an .xlsx/.csv file into header-keyed records.

    Parameters
    ----------
    path: spreadsheet path
    sheet_name: explicit sheet to read (None: "Students" if present, else the first sheet)
    """
    if not path.exists():
        raise UnreadableFileError(f"file not found: {path}")
    try:
        name, df = _read_frame(path, sheet_name)
    except ImportParseError:
        raise
    except Exception as e:
        raise UnreadableFileError(
            f"Unable to read {path.name}. Please re-export the file and try again ({e})"
        ) from e

    columns = [str(c) for c in df.columns]
    if not any(c in COLUMN_MAPPING for c in columns):
        raise MissingColumnsError(
            f"sheet '{name}' has no recognised template headers (found {columns[:5]}...)"
        )

    records: list[dict[str, Any]] = []
    for raw in df.itertuples(index=False, name=None):
        records.append(dict(zip(columns, raw, strict=False)))

    if not records:
        raise NoDataError(f"No data found in {name} sheet")

    return SheetData(sheet_name=name, columns=columns, records=records)

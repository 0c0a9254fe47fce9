from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from ..excel.columns import COLUMN_MAPPING
from ..excel.reader import NoDataError, cell_to_str, read_student_table
from ..models.parsed_row import ParsedRow, ParseResult
from ..models.student_row import StudentRow
from .validation import DEFAULT_VOCABULARY, Vocabulary, validate_row

"""Row parser: spreadsheet records -> ParsedRow list.

parse_table() is pure: the same records always produce the same rows, and no
I/O happens. parse_import_file() adds the spreadsheet read in front of it.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "HEADER_OFFSET",
    "map_record",
    "parse_row",
    "parse_table",
    "parse_import_file",
]

# header is spreadsheet row 1, first data record is row 2
HEADER_OFFSET = 2


def map_record(record: Mapping[str, Any]) -> StudentRow:
    """Map one header-keyed record onto a StudentRow (trimmed, blanks -> "")."""
    values: dict[str, str] = {}
    for header, field_name in COLUMN_MAPPING.items():
        if header not in record:
            continue
        text = cell_to_str(record[header])
        # both date of birth header variants map to dob; keep the first non-blank
        if text or field_name not in values:
            values[field_name] = text
    return StudentRow(**values)


def parse_row(
    record: Mapping[str, Any], row_number: int, vocabulary: Vocabulary = DEFAULT_VOCABULARY
) -> ParsedRow:
    data = map_record(record)
    errors, warnings = validate_row(data, vocabulary)
    return ParsedRow(
        row_number=row_number,
        data=data,
        errors=tuple(errors),
        warnings=tuple(warnings),
    )


def parse_table(
    records: Sequence[Mapping[str, Any]], vocabulary: Vocabulary = DEFAULT_VOCABULARY
) -> ParseResult:
    """Parse and validate every data record of the students sheet.

    Args:
        records: header text -> cell value, one mapping per data row in sheet order
        vocabulary: closed value lists for the enum checks

    Returns:
        ParseResult with rows in input order; rows blank in every mapped field
        are dropped (not counted, not reported).

    Raises:
        NoDataError: when there is no data record at all
    """
    if not records:
        raise NoDataError("No data found in Students sheet")

    rows: list[ParsedRow] = []
    for index, record in enumerate(records):
        parsed = parse_row(record, index + HEADER_OFFSET, vocabulary)
        if parsed.data.is_empty():
            continue
        rows.append(parsed)
    return ParseResult.from_rows(rows)


def parse_import_file(
    path: Path,
    sheet_name: str | None = None,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> ParseResult:
    """Read a spreadsheet and parse its students sheet.

    Raises:
        ImportParseError: unreadable file, missing sheet, no headers or no data
    """
    sheet = read_student_table(path, sheet_name=sheet_name)
    result = parse_table(sheet.records, vocabulary)
    logger.info(
        "parsed file=%s sheet=%s rows=%d valid=%d warning=%d invalid=%d",
        path.name,
        sheet.sheet_name,
        result.total_rows,
        result.valid_rows,
        result.warning_rows,
        result.invalid_rows,
    )
    return result

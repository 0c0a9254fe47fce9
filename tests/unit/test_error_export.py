from __future__ import annotations

from pathlib import Path

import pandas as pd

from student_import.models.parsed_row import ParsedRow
from student_import.models.validation import ValidationIssue
from student_import.services.error_export import (
    ERRORS_SHEET,
    build_errors_frame,
    format_issues,
    generate_errors_excel,
)

from conftest import valid_student


def _rows() -> list[ParsedRow]:
    return [
        ParsedRow(2, valid_student()),
        ParsedRow(
            3,
            valid_student(first_name="", dob="2013-02-30"),
            errors=(
                ValidationIssue.error("first_name", "First name is required"),
                ValidationIssue.error("dob", "Invalid date format (use YYYY-MM-DD)"),
            ),
        ),
        ParsedRow(4, valid_student(), warnings=(ValidationIssue.warning("perm_state", "Unknown state"),)),
    ]


def test_format_issues():
    issues = [ValidationIssue.error("a", "x"), ValidationIssue.error("b", "y")]
    assert format_issues(issues) == "a: x; b: y"
    assert format_issues([]) == ""


def test_frame_skips_valid_rows():
    df = build_errors_frame(_rows())
    assert list(df["Row Number"]) == [3, 4]
    assert list(df["Status"]) == ["INVALID", "WARNING"]
    assert df.iloc[0]["Errors"].startswith("first_name: First name is required; dob:")
    assert df.iloc[1]["Warnings"] == "perm_state: Unknown state"
    assert list(df.columns[:4]) == ["Row Number", "Status", "Errors", "Warnings"]
    assert "first_name" in df.columns


def test_frame_all_valid_is_empty_with_columns():
    df = build_errors_frame([ParsedRow(2, valid_student())])
    assert df.empty
    assert "Errors" in df.columns


def test_generate_errors_excel(tmp_path: Path):
    out = tmp_path / "out" / "errors.xlsx"
    written = generate_errors_excel(_rows(), out)
    assert written == 2
    df = pd.read_excel(out, sheet_name=ERRORS_SHEET, dtype=str)
    assert list(df["Row Number"]) == ["3", "4"]

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from student_import.models.import_batch import CommitResult, RowError
from student_import.services.summary import (
    format_elapsed,
    generate_import_summary,
    render_summary_line,
)


@pytest.mark.parametrize(
    "seconds, expected",
    [(0, "0"), (2.0, "2"), (1.23456, "1.235"), (0.5, "0.5"), (0.000123, "0.000123")],
)
def test_format_elapsed(seconds, expected):
    assert format_elapsed(seconds) == expected


def test_render_summary_line():
    result = CommitResult(imported=9, failed=1, elapsed_seconds=1.5)
    assert render_summary_line("batch_1_abc", result) == (
        "SUMMARY batch=batch_1_abc rows=10 imported=9 failed=1 elapsed_sec=1.5"
    )


def test_import_summary_report():
    result = CommitResult(
        imported=9, failed=1, errors=[RowError(5, "Student with this admission number exists")]
    )
    # 06:30 UTC is 12:00 in India
    report = generate_import_summary(result, now=datetime(2025, 6, 1, 6, 30, tzinfo=UTC))

    assert "Total Processed: 10" in report
    assert "Successfully Imported: 9" in report
    assert "Failed: 1" in report
    assert "Success Rate: 90.0%" in report
    assert "Row 5: Student with this admission number exists" in report
    assert report.rstrip().endswith("Import completed at: 01/06/2025, 12:00:00")


def test_import_summary_without_rows():
    report = generate_import_summary(CommitResult(imported=0, failed=0))
    assert "Success Rate: 0%" in report
    assert "Errors:" not in report

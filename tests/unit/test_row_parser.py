from __future__ import annotations

import pytest

from student_import.excel.columns import REQUIRED_FIELDS
from student_import.excel.reader import NoDataError
from student_import.models.parsed_row import RowStatus
from student_import.services.row_parser import map_record, parse_table

from conftest import valid_record


def test_scenario_valid_row():
    result = parse_table([valid_record()])
    assert result.total_rows == 1
    row = result.rows[0]
    assert row.status is RowStatus.VALID
    assert row.errors == ()
    assert row.row_number == 2


def test_scenario_bad_dob_format():
    result = parse_table([valid_record(**{"Date of Birth *\n(YYYY-MM-DD)": "29-03-2013"})])
    row = result.rows[0]
    assert row.status is RowStatus.INVALID
    assert len(row.errors) == 1
    assert row.errors[0].field == "dob"
    assert "YYYY-MM-DD" in row.errors[0].message


def test_scenario_previous_school_required():
    record = valid_record(**{
        "Has Previous School (Yes/No)": "Yes",
        "Previous School Name": "",
        "Last Class Attended": "6",
    })
    row = parse_table([record]).rows[0]
    assert row.status is RowStatus.INVALID
    assert [e.field for e in row.errors] == ["previous_school_name"]


def test_missing_required_fields_one_error_each():
    record = {"First Name *": "Only", "Gender *": "Male"}
    row = parse_table([record]).rows[0]
    missing = set(REQUIRED_FIELDS) - {"first_name", "gender"}
    assert {e.field for e in row.errors} == missing
    assert len(row.errors) == len(missing)
    assert row.status is RowStatus.INVALID


def test_empty_rows_are_dropped_and_row_numbers_kept():
    records = [valid_record(), {"First Name *": "  ", "Last Name *": None}, valid_record()]
    result = parse_table(records)
    assert [r.row_number for r in result.rows] == [2, 4]
    assert result.total_rows == 2
    assert result.valid_rows == 2


def test_counts_by_status():
    records = [
        valid_record(),
        valid_record(**{"Blood Group": "Q"}),
        valid_record(**{"Gender *": "?"}),
    ]
    result = parse_table(records)
    assert (result.valid_rows, result.warning_rows, result.invalid_rows) == (1, 1, 1)
    assert [r.row_number for r in result.committable_rows] == [2, 3]


def test_parse_is_idempotent():
    records = [valid_record(), valid_record(**{"Gender *": "?"})]
    assert parse_table(records) == parse_table(records)


def test_no_records_raises():
    with pytest.raises(NoDataError):
        parse_table([])


def test_values_are_trimmed_and_numbers_rendered():
    row = map_record({"First Name *": "  Riya ", "Father Mobile *": 9876543210.0, "Roll Number": 7})
    assert row.first_name == "Riya"
    assert row.father_mobile == "9876543210"
    assert row.roll_no == "7"


def test_dob_header_without_newline_is_accepted():
    record = valid_record()
    record["Date of Birth *(YYYY-MM-DD)"] = record.pop("Date of Birth *\n(YYYY-MM-DD)")
    assert parse_table([record]).rows[0].data.dob == "2013-03-29"


def test_unknown_headers_are_ignored():
    row = parse_table([valid_record(Comments="ignored")]).rows[0]
    assert row.status is RowStatus.VALID

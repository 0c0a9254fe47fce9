# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path

import pandas as pd
import pytest

from student_import.logging.init import reset_logging
from student_import.models.parsed_row import ParsedRow
from student_import.models.student_row import StudentRow
from student_import.storage.local import LocalStorageAdapter

DOB_HEADER = "Date of Birth *\n(YYYY-MM-DD)"


def valid_record(**overrides) -> dict[str, object]:
    """Header-keyed spreadsheet record for a fully valid student."""
    record: dict[str, object] = {
        "First Name *": "Riya",
        "Last Name *": "Sharma",
        "Gender *": "Female",
        DOB_HEADER: "2013-03-29",
        "Admission Class *": "7",
        "Section *": "B",
        "Academic Year *": "2025-2026",
        "Category *": "General",
        "Nationality *": "Indian",
        "Primary Contact *": "father",
        "Permanent Street *": "12 MG Road",
        "Permanent City *": "Pune",
        "Permanent State *": "Maharashtra",
        "Permanent Pincode *": "411001",
        "Permanent Country *": "India",
        "Current same as Permanent (Yes/No)": "Yes",
        "Father Name *": "Rajesh Sharma",
        "Father Mobile *": "9876543210",
        "Father Aadhaar *": "123412341234",
        "Mother Name *": "Sunita Sharma",
        "Mother Mobile *": "9876501234",
        "Mother Aadhaar *": "432143214321",
    }
    record.update(overrides)
    return record


def valid_student(**overrides) -> StudentRow:
    values = {
        "first_name": "Riya",
        "last_name": "Sharma",
        "gender": "Female",
        "dob": "2013-03-29",
        "admission_class": "7",
        "section": "B",
        "current_year": "2025-2026",
        "category": "General",
        "nationality": "Indian",
        "primary_contact": "father",
        "perm_street": "12 MG Road",
        "perm_city": "Pune",
        "perm_state": "Maharashtra",
        "perm_pincode": "411001",
        "perm_country": "India",
        "same_as_permanent": "Yes",
        "father_name": "Rajesh Sharma",
        "father_mobile": "9876543210",
        "father_aadhaar": "123412341234",
        "mother_name": "Sunita Sharma",
        "mother_mobile": "9876501234",
        "mother_aadhaar": "432143214321",
    }
    values.update(overrides)
    return StudentRow(**values)


def make_rows(count: int, start: int = 2) -> list[ParsedRow]:
    """`count` valid ParsedRows with consecutive row numbers."""
    return [
        ParsedRow(
            row_number=start + i,
            data=valid_student(first_name=f"Student{i}", roll_no=str(i + 1)),
        )
        for i in range(count)
    ]


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """sheet_name: null
max_document_size_mb: 5
logs_directory: ./logs
storage:
  backend: local
  local_root: ./uploads
api:
  base_url: http://api.test/api
  timeout_seconds: 5
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def write_students_xlsx():
    """Factory: write records to an .xlsx with a Students sheet."""
    def _write(path: Path, records: list[dict[str, object]], sheet_name: str = "Students") -> Path:
        df = pd.DataFrame.from_records(records)
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name=sheet_name, index=False)
        return path
    return _write


@pytest.fixture()
def local_storage(tmp_path: Path) -> LocalStorageAdapter:
    return LocalStorageAdapter(tmp_path / "store")

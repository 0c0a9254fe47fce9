from __future__ import annotations

from pathlib import Path

import pytest

from student_import.cli.__main__ import main as cli_main
from student_import.clients.student_api import StudentApiClient, StudentApiError

from conftest import valid_record

"""Exit code contract: 0 all imported, 2 some rows failed, 1 fatal."""


@pytest.fixture(autouse=True)
def _offline(monkeypatch):
    monkeypatch.setenv("DISABLE_DB_CONNECT", "1")
    monkeypatch.delenv("STORAGE_BACKEND", raising=False)

    def _create(self, record):
        if record["basic"]["lastName"] == "Duplicate":
            raise StudentApiError("duplicate", status_code=409)
        return {"id": "1"}

    monkeypatch.setattr(StudentApiClient, "create_student", _create)


def test_exit_code_fatal_startup(temp_workdir: Path, capsys):
    # no config/import.yml in the working directory
    code = cli_main([str(temp_workdir / "data" / "students.xlsx")])
    assert code == 1
    assert "ERROR config:" in capsys.readouterr().out


def test_exit_code_fatal_missing_spreadsheet(write_config: Path, temp_workdir: Path, capsys):
    code = cli_main([str(temp_workdir / "data" / "nope.xlsx")])
    assert code == 1
    assert "ERROR parse: file not found" in capsys.readouterr().out


def test_exit_code_all_success(write_config: Path, temp_workdir: Path, write_students_xlsx):
    xlsx = write_students_xlsx(temp_workdir / "data" / "students.xlsx", [valid_record()])
    assert cli_main([str(xlsx)]) == 0


def test_exit_code_partial_failure(write_config: Path, temp_workdir: Path, write_students_xlsx):
    xlsx = write_students_xlsx(
        temp_workdir / "data" / "students.xlsx",
        [valid_record(), valid_record(**{"Last Name *": "Duplicate"})],
    )
    assert cli_main([str(xlsx)]) == 2


def test_invalid_rows_alone_do_not_fail_the_run(write_config: Path, temp_workdir: Path, write_students_xlsx):
    xlsx = write_students_xlsx(
        temp_workdir / "data" / "students.xlsx",
        [valid_record(), valid_record(**{"Gender *": "Unknown"})],
    )
    assert cli_main([str(xlsx)]) == 0

from __future__ import annotations

from student_import.services.normalize import normalize_student_record

from conftest import valid_student


def test_basic_blocks():
    record = normalize_student_record(valid_student(blood_group="B+"))
    assert record["basic"]["firstName"] == "Riya"
    assert record["basic"]["dateOfBirth"] == "2013-03-29"
    assert record["basic"]["bloodGroup"] == "B+"
    assert "middleName" not in record["basic"]
    assert record["academic"] == {"currentYear": "2025-2026", "admissionClass": "7", "section": "B"}
    assert record["father"]["name"] == "Rajesh Sharma"
    assert record["father"]["aadharNumber"] == "123412341234"
    assert record["primaryContact"] == "father"
    assert record["permanentAddress"]["city"] == "Pune"
    assert record["status"] == "active"
    assert record["medicalInfo"] == {"disabilityStatus": "No"}


def test_nationality_defaults_to_indian():
    record = normalize_student_record(valid_student(nationality=""))
    assert record["basic"]["nationality"] == "Indian"


def test_absent_blocks_are_omitted_not_null():
    record = normalize_student_record(valid_student(father_name="", mother_name=""))
    assert "father" not in record
    assert "mother" not in record
    assert "guardian" not in record
    assert "notes" not in record
    assert None not in record.values()


def test_current_address_when_different():
    record = normalize_student_record(
        valid_student(same_as_permanent="No", curr_street="1 Hill Rd", curr_city="Mumbai")
    )
    assert record["currentAddress"]["line1"] == "1 Hill Rd"
    assert record["currentAddress"]["city"] == "Mumbai"
    assert "currentAddress" not in normalize_student_record(valid_student())


def test_previous_school_block():
    record = normalize_student_record(valid_student(
        has_previous_school="Yes",
        previous_school_name="St. Mary",
        last_class_attended="6",
        tc_number="TC-9",
    ))
    school = record["academic"]["previousSchool"]
    assert school["name"] == "St. Mary"
    assert school["lastClass"] == "6"
    assert school["transferCertificate"] == {"number": "TC-9", "issueDate": ""}
    assert "previousSchool" not in normalize_student_record(valid_student())["academic"]


def test_guardian_block():
    record = normalize_student_record(valid_student(guardian_name="Anil", guardian_mobile="9000000000"))
    assert record["guardian"] == {"name": "Anil", "mobile": "9000000000"}

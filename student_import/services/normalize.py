from __future__ import annotations

from typing import Any

from ..models.student_row import StudentRow

"""StudentRow -> create-student payload.

The payload uses the nested camelCase shape the student API expects. Optional
values that are blank are left out of the payload (not sent as null), and
whole blocks are left out when their anchor field is blank:
- father / mother / guardian: when the name is blank
- academic.previousSchool: unless has_previous_school is "Yes"
- currentAddress: when same_as_permanent is "Yes"
"""

__all__ = ["DEFAULT_NATIONALITY", "normalize_student_record"]

DEFAULT_NATIONALITY = "Indian"


def _compact(values: dict[str, Any]) -> dict[str, Any]:
    """Drop keys whose value is None."""
    return {k: v for k, v in values.items() if v is not None}


def _opt(value: str) -> str | None:
    return value or None


def _parent(name: str, mobile: str, email: str, occupation: str, aadhaar: str, office: str):
    if not name:
        return None
    return _compact({
        "name": name,
        "mobile": mobile,
        "email": _opt(email),
        "occupation": _opt(occupation),
        "aadharNumber": _opt(aadhaar),
        "officeAddress": _opt(office),
    })


def _previous_school(row: StudentRow) -> dict[str, Any] | None:
    if row.has_previous_school != "Yes":
        return None
    tc = None
    if row.tc_number or row.tc_issue_date:
        tc = {"number": row.tc_number, "issueDate": row.tc_issue_date}
    return _compact({
        "name": row.previous_school_name,
        "lastClass": row.last_class_attended,
        "address": _opt(row.previous_school_address),
        "transferCertificate": tc,
        "reasonForLeaving": _opt(row.reason_for_leaving),
    })


def normalize_student_record(row: StudentRow) -> dict[str, Any]:
    """Build the create-student payload for one row. Pure and total."""
    basic = _compact({
        "firstName": row.first_name,
        "middleName": _opt(row.middle_name),
        "lastName": row.last_name,
        "gender": row.gender,
        "dateOfBirth": row.dob,
        "bloodGroup": _opt(row.blood_group),
        "category": row.category,
        "nationality": row.nationality or DEFAULT_NATIONALITY,
        "religion": _opt(row.religion),
        "motherTongue": _opt(row.mother_tongue),
        "caste": _opt(row.caste),
        "placeOfBirth": _opt(row.place_of_birth),
        "aadharNumber": _opt(row.aadhaar_no),
    })
    academic = _compact({
        "currentYear": row.current_year,
        "admissionClass": row.admission_class,
        "section": row.section,
        "rollNumber": _opt(row.roll_no),
        "previousSchool": _previous_school(row),
    })

    guardian = None
    if row.guardian_name:
        guardian = _compact({
            "name": row.guardian_name,
            "mobile": row.guardian_mobile,
            "email": _opt(row.guardian_email),
            "occupation": _opt(row.guardian_occupation),
            "aadharNumber": _opt(row.guardian_aadhaar),
            "address": _opt(row.guardian_office_address),
        })

    current_address = None
    if row.same_as_permanent != "Yes":
        current_address = {
            "line1": row.curr_street,
            "city": row.curr_city,
            "state": row.curr_state,
            "pincode": row.curr_pincode,
            "country": row.curr_country,
        }

    return _compact({
        "basic": basic,
        "academic": academic,
        "father": _parent(
            row.father_name, row.father_mobile, row.father_email,
            row.father_occupation, row.father_aadhaar, row.father_office_address,
        ),
        "mother": _parent(
            row.mother_name, row.mother_mobile, row.mother_email,
            row.mother_occupation, row.mother_aadhaar, row.mother_office_address,
        ),
        "guardian": guardian,
        "primaryContact": row.primary_contact,
        "permanentAddress": {
            "line1": row.perm_street,
            "city": row.perm_city,
            "state": row.perm_state,
            "pincode": row.perm_pincode,
            "country": row.perm_country,
        },
        "currentAddress": current_address,
        "medicalInfo": {"disabilityStatus": "No"},
        "status": "active",
        "notes": _opt(row.notes),
    })

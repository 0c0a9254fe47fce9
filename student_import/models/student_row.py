from __future__ import annotations

from dataclasses import asdict, dataclass, fields

"""StudentRow model: one spreadsheet line mapped onto typed attributes.

Every attribute is a trimmed string; a blank or missing cell is "".
Attribute names are the internal field names used in validation issues,
the error export and the create-student normalisation.
"""

__all__ = [
    "StudentRow",
    "STUDENT_FIELDS",
]


@dataclass(frozen=True)
class StudentRow:
    # Student
    admission_no: str = ""
    first_name: str = ""
    middle_name: str = ""
    last_name: str = ""
    gender: str = ""
    dob: str = ""
    blood_group: str = ""
    category: str = ""
    nationality: str = ""
    religion: str = ""
    mother_tongue: str = ""
    caste: str = ""
    place_of_birth: str = ""
    aadhaar_no: str = ""
    # Academic
    admission_class: str = ""
    section: str = ""
    roll_no: str = ""
    current_year: str = ""
    # Father
    father_name: str = ""
    father_mobile: str = ""
    father_email: str = ""
    father_occupation: str = ""
    father_aadhaar: str = ""
    father_office_address: str = ""
    # Mother
    mother_name: str = ""
    mother_mobile: str = ""
    mother_email: str = ""
    mother_occupation: str = ""
    mother_aadhaar: str = ""
    mother_office_address: str = ""
    # Guardian
    include_guardian: str = ""
    guardian_name: str = ""
    guardian_mobile: str = ""
    guardian_email: str = ""
    guardian_occupation: str = ""
    guardian_aadhaar: str = ""
    guardian_office_address: str = ""
    primary_contact: str = ""
    # Addresses
    perm_street: str = ""
    perm_city: str = ""
    perm_state: str = ""
    perm_pincode: str = ""
    perm_country: str = ""
    same_as_permanent: str = ""
    curr_street: str = ""
    curr_city: str = ""
    curr_state: str = ""
    curr_pincode: str = ""
    curr_country: str = ""
    # Previous school
    has_previous_school: str = ""
    previous_school_name: str = ""
    previous_school_address: str = ""
    last_class_attended: str = ""
    tc_number: str = ""
    tc_issue_date: str = ""
    reason_for_leaving: str = ""
    notes: str = ""

    def get(self, field_name: str) -> str:
        return getattr(self, field_name)

    def is_empty(self) -> bool:
        """True when every mapped field is blank."""
        return all(getattr(self, f.name) == "" for f in fields(self))

    def as_dict(self) -> dict[str, str]:
        return asdict(self)


STUDENT_FIELDS: tuple[str, ...] = tuple(f.name for f in fields(StudentRow))

from __future__ import annotations

"""Header → field mapping for the student import template.

Header text is matched exactly (case and whitespace sensitive). The date of
birth column is listed twice because spreadsheet tools may or may not keep the
embedded line break of the template header.
"""

__all__ = [
    "COLUMN_MAPPING",
    "REQUIRED_FIELDS",
    "STUDENTS_SHEET",
]

STUDENTS_SHEET = "Students"

COLUMN_MAPPING: dict[str, str] = {
    "Admission Number": "admission_no",
    "First Name *": "first_name",
    "Middle Name": "middle_name",
    "Last Name *": "last_name",
    "Gender *": "gender",
    "Date of Birth *(YYYY-MM-DD)": "dob",  # exported without the newline
    "Date of Birth *\n(YYYY-MM-DD)": "dob",  # template header
    "Blood Group": "blood_group",
    "Category *": "category",
    "Nationality *": "nationality",
    "Religion": "religion",
    "Mother Tongue": "mother_tongue",
    "Caste": "caste",
    "Place of Birth": "place_of_birth",
    "Aadhaar Number": "aadhaar_no",
    "Admission Class *": "admission_class",
    "Section *": "section",
    "Roll Number": "roll_no",
    "Academic Year *": "current_year",
    "Father Name *": "father_name",
    "Father Mobile *": "father_mobile",
    "Father Email": "father_email",
    "Father Occupation": "father_occupation",
    "Father Aadhaar *": "father_aadhaar",
    "Father Office Address": "father_office_address",
    "Mother Name *": "mother_name",
    "Mother Mobile *": "mother_mobile",
    "Mother Email": "mother_email",
    "Mother Occupation": "mother_occupation",
    "Mother Aadhaar *": "mother_aadhaar",
    "Mother Office Address": "mother_office_address",
    "Include Guardian (Yes/No)": "include_guardian",
    "Guardian Name": "guardian_name",
    "Guardian Mobile": "guardian_mobile",
    "Guardian Email": "guardian_email",
    "Guardian Occupation": "guardian_occupation",
    "Guardian Aadhaar": "guardian_aadhaar",
    "Guardian Office Address": "guardian_office_address",
    "Primary Contact *": "primary_contact",
    "Permanent Street *": "perm_street",
    "Permanent City *": "perm_city",
    "Permanent State *": "perm_state",
    "Permanent Pincode *": "perm_pincode",
    "Permanent Country *": "perm_country",
    "Current same as Permanent (Yes/No)": "same_as_permanent",
    "Current Street": "curr_street",
    "Current City": "curr_city",
    "Current State": "curr_state",
    "Current Pincode": "curr_pincode",
    "Current Country": "curr_country",
    "Has Previous School (Yes/No)": "has_previous_school",
    "Previous School Name": "previous_school_name",
    "Previous School Address": "previous_school_address",
    "Last Class Attended": "last_class_attended",
    "TC Number": "tc_number",
    "TC Issue Date (YYYY-MM-DD)": "tc_issue_date",
    "Reason For Leaving": "reason_for_leaving",
    "Additional Notes": "notes",
}

REQUIRED_FIELDS: tuple[str, ...] = (
    "first_name",
    "last_name",
    "gender",
    "dob",
    "admission_class",
    "section",
    "current_year",
    "primary_contact",
    "category",
    "nationality",
    "perm_street",
    "perm_city",
    "perm_state",
    "perm_pincode",
    "perm_country",
    "father_name",
    "father_mobile",
    "father_aadhaar",
    "mother_name",
    "mother_mobile",
    "mother_aadhaar",
)

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime

from ..excel.columns import REQUIRED_FIELDS
from ..models.student_row import StudentRow
from ..models.validation import ValidationIssue

"""Row validation for the student import parser.

Issue taxonomy:
- error (row is blocked from commit): required field empty, unknown value on a
  gating enum (gender, class, section, category, primary contact), malformed
  date / session year / email, missing previous-school details.
- warning (row still imports): malformed phone / Aadhaar / pincode, unknown
  advisory enum value (blood group, state), primary contact without details.

The format predicates are pure str -> bool functions and can be used on their
own.
"""

__all__ = [
    "Vocabulary",
    "DEFAULT_VOCABULARY",
    "is_valid_date",
    "is_valid_session_year",
    "is_valid_phone",
    "is_valid_aadhaar",
    "is_valid_pincode",
    "is_valid_email",
    "validate_row",
]

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_SESSION_YEAR_RE = re.compile(r"^\d{4}-\d{4}$")
_PHONE_STRIP_RE = re.compile(r"[\s\-()+]")
_PHONE_RE = re.compile(r"^\d{10,15}$")
_AADHAAR_STRIP_RE = re.compile(r"[\s\-]")
_AADHAAR_RE = re.compile(r"^\d{12}$")
_PINCODE_RE = re.compile(r"^\d{6}$")
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DATE_FIELDS = ("dob", "tc_issue_date")
PHONE_FIELDS = ("father_mobile", "mother_mobile", "guardian_mobile")
PINCODE_FIELDS = ("perm_pincode", "curr_pincode")
EMAIL_FIELDS = ("father_email", "mother_email", "guardian_email")
STATE_FIELDS = ("perm_state", "curr_state")

# primary contact role -> (name field, mobile field)
CONTACT_FIELDS: dict[str, tuple[str, str]] = {
    "father": ("father_name", "father_mobile"),
    "mother": ("mother_name", "mother_mobile"),
    "guardian": ("guardian_name", "guardian_mobile"),
}


@dataclass(frozen=True)
class Vocabulary:
    """Closed value lists used by the template dropdowns."""
    genders: tuple[str, ...] = ("Male", "Female", "Other")
    classes: tuple[str, ...] = (
        "Nursery", "LKG", "UKG", "1", "2", "3", "4", "5", "6", "7", "8", "9", "10", "11", "12",
    )
    sections: tuple[str, ...] = ("A", "B", "C", "D", "E")
    blood_groups: tuple[str, ...] = ("A+", "A-", "B+", "B-", "O+", "O-", "AB+", "AB-", "Unknown")
    categories: tuple[str, ...] = ("General", "OBC", "SC", "ST", "EWS")
    states: tuple[str, ...] = (
        "Maharashtra", "Delhi", "Karnataka", "Tamil Nadu", "Gujarat",
        "Rajasthan", "Uttar Pradesh", "West Bengal", "Other",
    )
    primary_contacts: tuple[str, ...] = ("father", "mother", "guardian")

    def with_overrides(
        self, classes: list[str] | None = None, sections: list[str] | None = None
    ) -> Vocabulary:
        return Vocabulary(
            genders=self.genders,
            classes=tuple(classes) if classes else self.classes,
            sections=tuple(sections) if sections else self.sections,
            blood_groups=self.blood_groups,
            categories=self.categories,
            states=self.states,
            primary_contacts=self.primary_contacts,
        )


DEFAULT_VOCABULARY = Vocabulary()


def is_valid_date(value: str) -> bool:
    """YYYY-MM-DD and an actual calendar day."""
    if not _DATE_RE.match(value):
        return False
    try:
        datetime.strptime(value, "%Y-%m-%d")
    except ValueError:
        return False
    return True


def is_valid_session_year(value: str) -> bool:
    return bool(_SESSION_YEAR_RE.match(value))


def is_valid_phone(value: str) -> bool:
    return bool(_PHONE_RE.match(_PHONE_STRIP_RE.sub("", value)))


def is_valid_aadhaar(value: str) -> bool:
    return bool(_AADHAAR_RE.match(_AADHAAR_STRIP_RE.sub("", value)))


def is_valid_pincode(value: str) -> bool:
    return bool(_PINCODE_RE.match(value))


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value))


def _check_enum(
    row: StudentRow,
    field_name: str,
    allowed: tuple[str, ...],
    label: str,
    errors: list[ValidationIssue],
) -> None:
    value = row.get(field_name)
    if value and value not in allowed:
        errors.append(
            ValidationIssue.error(
                field_name, f"Invalid {label}. Must be one of: {', '.join(allowed)}"
            )
        )


def validate_row(
    row: StudentRow, vocabulary: Vocabulary = DEFAULT_VOCABULARY
) -> tuple[list[ValidationIssue], list[ValidationIssue]]:
    """Validate one mapped row.

    Returns:
        (errors, warnings) in check order. Every missing required field gets
        its own error.
    """
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []

    for field_name in REQUIRED_FIELDS:
        if not row.get(field_name):
            errors.append(ValidationIssue.error(field_name, f"{field_name} is required"))

    _check_enum(row, "gender", vocabulary.genders, "gender", errors)
    _check_enum(row, "admission_class", vocabulary.classes, "class", errors)
    _check_enum(row, "section", vocabulary.sections, "section", errors)

    if row.has_previous_school == "Yes":
        if not row.previous_school_name:
            errors.append(ValidationIssue.error(
                "previous_school_name",
                "Previous school name is required when Has Previous School is Yes",
            ))
        if not row.last_class_attended:
            errors.append(ValidationIssue.error(
                "last_class_attended",
                "Last class attended is required when Has Previous School is Yes",
            ))

    for field_name in DATE_FIELDS:
        value = row.get(field_name)
        if value and not is_valid_date(value):
            errors.append(ValidationIssue.error(
                field_name, "Invalid date format. Must be YYYY-MM-DD (e.g., 2013-03-29)"
            ))

    if row.current_year and not is_valid_session_year(row.current_year):
        errors.append(ValidationIssue.error(
            "current_year", "Invalid session year format. Must be YYYY-YYYY (e.g., 2025-2026)"
        ))

    for field_name in PHONE_FIELDS:
        value = row.get(field_name)
        if value and not is_valid_phone(value):
            warnings.append(ValidationIssue.warning(field_name, "Phone number should be 10-15 digits"))

    if row.aadhaar_no and not is_valid_aadhaar(row.aadhaar_no):
        warnings.append(ValidationIssue.warning("aadhaar_no", "Aadhaar number should be 12 digits"))

    for field_name in PINCODE_FIELDS:
        value = row.get(field_name)
        if value and not is_valid_pincode(value):
            warnings.append(ValidationIssue.warning(field_name, "Pincode should be 6 digits"))

    for field_name in EMAIL_FIELDS:
        value = row.get(field_name)
        if value and not is_valid_email(value):
            errors.append(ValidationIssue.error(field_name, "Invalid email format"))

    if row.primary_contact:
        _check_enum(row, "primary_contact", vocabulary.primary_contacts, "primary contact", errors)
        contact = CONTACT_FIELDS.get(row.primary_contact)
        if contact is not None:
            name_field, mobile_field = contact
            if not row.get(name_field) or not row.get(mobile_field):
                role = row.primary_contact.capitalize()
                warnings.append(ValidationIssue.warning(
                    "primary_contact",
                    f"{role} is set as primary contact but {row.primary_contact} details are incomplete",
                ))

    _check_enum(row, "category", vocabulary.categories, "category", errors)

    if row.blood_group and row.blood_group not in vocabulary.blood_groups:
        warnings.append(ValidationIssue.warning(
            "blood_group",
            f"Invalid blood group. Must be one of: {', '.join(vocabulary.blood_groups)}",
        ))

    for field_name in STATE_FIELDS:
        value = row.get(field_name)
        if value and value not in vocabulary.states:
            warnings.append(ValidationIssue.warning(
                field_name, "State not in standard list. Please verify."
            ))

    return errors, warnings

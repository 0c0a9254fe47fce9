from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

"""Document matching models.

DocumentFile is a loose uploaded file (usually extracted from an archive).
FileMatch records which student row, if any, a file was assigned to and how
sure the matcher is about it.
"""

__all__ = [
    "DocumentFile",
    "StudentCandidate",
    "Confidence",
    "CandidateScore",
    "FileMatch",
    "MatchResult",
]


@dataclass(frozen=True)
class DocumentFile:
    name: str  # original file name (basename only)
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class StudentCandidate:
    """A student row the matcher may assign files to."""
    id: str  # candidate key, the orchestrator uses the spreadsheet row number
    primary_key: str  # admission number, may be ""
    first_name: str
    last_name: str
    secondary_key: str | None = None  # roll number


class Confidence(Enum):
    EXACT = "exact"
    FUZZY = "fuzzy"
    AMBIGUOUS = "ambiguous"
    NONE = "none"


@dataclass(frozen=True)
class CandidateScore:
    key: str
    score: float


@dataclass(frozen=True)
class FileMatch:
    file: DocumentFile
    confidence: Confidence = Confidence.NONE
    matched_student_key: str | None = None
    document_type: str | None = None
    candidates: tuple[CandidateScore, ...] = ()

    def __post_init__(self) -> None:
        matched = self.confidence in (Confidence.EXACT, Confidence.FUZZY)
        if matched != (self.matched_student_key is not None):
            raise ValueError(
                f"matched_student_key must be set only for exact/fuzzy matches "
                f"(confidence={self.confidence.value})"
            )
        if self.candidates and self.confidence is not Confidence.AMBIGUOUS:
            raise ValueError("candidates are only allowed on ambiguous matches")

    @property
    def original_name(self) -> str:
        return self.file.name


@dataclass(frozen=True)
class MatchResult:
    matches: list[FileMatch] = field(default_factory=list)  # exact, fuzzy and ambiguous
    unmatched_files: list[str] = field(default_factory=list)
    total_files: int = 0
    matched_files: int = 0
    ambiguous_files: int = 0

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from ..models.file_match import (
    CandidateScore,
    Confidence,
    DocumentFile,
    FileMatch,
    MatchResult,
    StudentCandidate,
)
from ..models.parsed_row import ParsedRow
from .archive import CONTENT_TYPES

"""Document matcher: loose files -> student rows.

Each file is checked against an ordered list of match tiers; the first tier
with an opinion decides the file:

  1. ExactPrimaryKey  admission number (STU-YYYY-NNNNN) anywhere in the name
  2. SecondaryKey     leading roll number token ("12_photo.jpg")
  3. FuzzyName        student first / last name inside the name

The document type is sniffed from the name before any tier runs and is kept
whatever the outcome.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "DOCUMENT_PATTERNS",
    "SECONDARY_KEY_SCORE",
    "FULL_NAME_SCORE",
    "REVERSED_NAME_SCORE",
    "BOTH_PARTS_SCORE",
    "ONE_PART_SCORE",
    "FUZZY_MIN_SCORE",
    "FUZZY_MIN_GAP",
    "AMBIGUOUS_MIN_SCORE",
    "MAX_AMBIGUOUS_CANDIDATES",
    "TierOutcome",
    "MatchTier",
    "ExactPrimaryKey",
    "SecondaryKey",
    "FuzzyName",
    "DEFAULT_TIERS",
    "normalize_primary_key",
    "candidate_primary_key",
    "detect_document_type",
    "match_file",
    "match_files_to_students",
    "group_by_candidate",
    "validate_document",
    "candidates_from_rows",
]

SECONDARY_KEY_SCORE = 0.8
FULL_NAME_SCORE = 0.9
REVERSED_NAME_SCORE = 0.85
BOTH_PARTS_SCORE = 0.75
ONE_PART_SCORE = 0.5
FUZZY_MIN_SCORE = 0.75
FUZZY_MIN_GAP = 0.2
AMBIGUOUS_MIN_SCORE = 0.5
MAX_AMBIGUOUS_CANDIDATES = 5

DEFAULT_MAX_DOCUMENT_SIZE_MB = 5.0
ALLOWED_CONTENT_TYPES = frozenset(CONTENT_TYPES.values())

# Order matters: the first category with a matching pattern wins.
DOCUMENT_PATTERNS: tuple[tuple[str, tuple[re.Pattern[str], ...]], ...] = (
    ("photo", (re.compile(r"photo"), re.compile(r"pic"), re.compile(r"image"), re.compile(r"img"))),
    ("birth_certificate", (re.compile(r"birth"), re.compile(r"birth[-_]?cert"), re.compile(r"bc"))),
    ("aadhaar_student", (
        re.compile(r"aadh?aa?r[-_]?student"),
        re.compile(r"student[-_]?aadh?aa?r"),
        re.compile(r"aadh?aa?r"),
    )),
    ("transfer_certificate", (re.compile(r"tc"), re.compile(r"transfer[-_]?cert"), re.compile(r"transfer"))),
    ("previous_marksheet", (re.compile(r"marksheet"), re.compile(r"mark[-_]?sheet"), re.compile(r"marks"))),
    ("caste_certificate", (re.compile(r"caste"), re.compile(r"caste[-_]?cert"))),
    ("medical_certificate", (re.compile(r"medical"), re.compile(r"medical[-_]?cert"))),
)

_PRIMARY_KEY_RE = re.compile(r"STU[-_]?(\d{4})[-_]?(\d{5})(?!\d)", re.IGNORECASE)
_SECONDARY_KEY_RE = re.compile(r"^(\d{1,4})[-_]")
_EXTENSION_RE = re.compile(r"\.[^.]+$")
_SEPARATOR_RE = re.compile(r"[-_]")
_DIGITS_RE = re.compile(r"\d+")


def normalize_primary_key(value: str) -> str | None:
    """Canonical "STU-dddd-ddddd" form, or None when value holds no admission number."""
    m = _PRIMARY_KEY_RE.search(value)
    if not m:
        return None
    return f"STU-{m.group(1)}-{m.group(2)}"


def candidate_primary_key(value: str) -> str:
    """Canonical form of a candidate's whole admission number.

    Only an exact STU-dddd-ddddd value gets the canonical form; anything else is
    compared upper-cased with "-" separators, so a malformed number never
    equals a well-formed one.
    """
    text = value.strip()
    m = _PRIMARY_KEY_RE.fullmatch(text)
    if m:
        return f"STU-{m.group(1)}-{m.group(2)}"
    return _SEPARATOR_RE.sub("-", text.upper())


def detect_document_type(filename: str) -> str | None:
    lower = filename.lower()
    for doc_type, patterns in DOCUMENT_PATTERNS:
        if any(p.search(lower) for p in patterns):
            return doc_type
    return None


@dataclass(frozen=True)
class TierOutcome:
    """A tier's opinion: a single match (exact/fuzzy) or an ambiguous set."""
    confidence: Confidence
    matched_key: str | None = None
    candidates: tuple[CandidateScore, ...] = ()


class MatchTier(ABC):
    name: str = "tier"

    @abstractmethod
    def evaluate(
        self, filename: str, candidates: Sequence[StudentCandidate]
    ) -> TierOutcome | None:
        """Return an outcome, or None when this tier has no opinion."""


class ExactPrimaryKey(MatchTier):
    name = "primary_key"

    def evaluate(self, filename, candidates):
        key = normalize_primary_key(filename)
        if key is None:
            return None
        for candidate in candidates:
            if candidate.primary_key and candidate_primary_key(candidate.primary_key) == key:
                return TierOutcome(Confidence.EXACT, matched_key=candidate.id)
        return None


class SecondaryKey(MatchTier):
    name = "secondary_key"

    def evaluate(self, filename, candidates):
        m = _SECONDARY_KEY_RE.match(filename)
        if not m:
            return None
        token = m.group(1)
        owners = [c for c in candidates if c.secondary_key and c.secondary_key == token]
        if len(owners) == 1:
            return TierOutcome(Confidence.EXACT, matched_key=owners[0].id)
        if len(owners) > 1:
            return TierOutcome(
                Confidence.AMBIGUOUS,
                candidates=tuple(CandidateScore(c.id, SECONDARY_KEY_SCORE) for c in owners),
            )
        return None


class FuzzyName(MatchTier):
    name = "fuzzy_name"

    @staticmethod
    def clean(filename: str) -> str:
        text = _EXTENSION_RE.sub("", filename.lower())
        text = _SEPARATOR_RE.sub(" ", text)
        return _DIGITS_RE.sub("", text).strip()

    @staticmethod
    def score(cleaned: str, candidate: StudentCandidate) -> float:
        first = candidate.first_name.strip().lower()
        last = candidate.last_name.strip().lower()
        if first and last:
            if f"{first} {last}" in cleaned:
                return FULL_NAME_SCORE
            if f"{last} {first}" in cleaned:
                return REVERSED_NAME_SCORE
        # an empty name part would match every file name
        first_hit = bool(first) and first in cleaned
        last_hit = bool(last) and last in cleaned
        if first_hit and last_hit:
            return BOTH_PARTS_SCORE
        if first_hit or last_hit:
            return ONE_PART_SCORE
        return 0.0

    def evaluate(self, filename, candidates):
        cleaned = self.clean(filename)
        if not cleaned:
            return None
        scored = [(self.score(cleaned, c), c) for c in candidates]
        # stable sort keeps candidate order among equal scores
        ranked = sorted((s for s in scored if s[0] > 0), key=lambda s: s[0], reverse=True)
        if not ranked:
            return None

        top_score, top = ranked[0]
        if top_score >= FUZZY_MIN_SCORE and (
            len(ranked) == 1 or top_score - ranked[1][0] > FUZZY_MIN_GAP
        ):
            return TierOutcome(Confidence.FUZZY, matched_key=top.id)
        if len(ranked) > 1 and top_score >= AMBIGUOUS_MIN_SCORE:
            return TierOutcome(
                Confidence.AMBIGUOUS,
                candidates=tuple(
                    CandidateScore(c.id, s) for s, c in ranked[:MAX_AMBIGUOUS_CANDIDATES]
                ),
            )
        return None


DEFAULT_TIERS: tuple[MatchTier, ...] = (ExactPrimaryKey(), SecondaryKey(), FuzzyName())


def match_file(
    file: DocumentFile,
    candidates: Sequence[StudentCandidate],
    tiers: Sequence[MatchTier] = DEFAULT_TIERS,
) -> FileMatch:
    document_type = detect_document_type(file.name)
    for tier in tiers:
        outcome = tier.evaluate(file.name, candidates)
        if outcome is None:
            continue
        logger.debug(
            "file=%s tier=%s confidence=%s", file.name, tier.name, outcome.confidence.value
        )
        return FileMatch(
            file=file,
            confidence=outcome.confidence,
            matched_student_key=outcome.matched_key,
            document_type=document_type,
            candidates=outcome.candidates,
        )
    return FileMatch(file=file, document_type=document_type)


def match_files_to_students(
    files: Iterable[DocumentFile],
    candidates: Sequence[StudentCandidate],
    tiers: Sequence[MatchTier] = DEFAULT_TIERS,
) -> MatchResult:
    """Assign each file to zero or one candidate.

    Returns:
        MatchResult whose matches hold exact, fuzzy and ambiguous outcomes in
        file order; names of files no tier could place go to unmatched_files.
    """
    matches: list[FileMatch] = []
    unmatched: list[str] = []
    matched = 0
    ambiguous = 0
    total = 0

    for file in files:
        total += 1
        result = match_file(file, candidates, tiers)
        if result.confidence in (Confidence.EXACT, Confidence.FUZZY):
            matches.append(result)
            matched += 1
        elif result.confidence is Confidence.AMBIGUOUS:
            matches.append(result)
            ambiguous += 1
        else:
            unmatched.append(file.name)

    logger.info(
        "matched files=%d matched=%d ambiguous=%d unmatched=%d",
        total, matched, ambiguous, len(unmatched),
    )
    return MatchResult(
        matches=matches,
        unmatched_files=unmatched,
        total_files=total,
        matched_files=matched,
        ambiguous_files=ambiguous,
    )


def group_by_candidate(matches: Iterable[FileMatch]) -> dict[str, list[FileMatch]]:
    """candidate id -> matched files, in match order. Ambiguous and unmatched entries are ignored."""
    grouped: dict[str, list[FileMatch]] = {}
    for match in matches:
        if match.matched_student_key is None:
            continue
        grouped.setdefault(match.matched_student_key, []).append(match)
    return grouped


def validate_document(
    file: DocumentFile, max_size_mb: float = DEFAULT_MAX_DOCUMENT_SIZE_MB
) -> str | None:
    """Return the reason a document cannot be stored, or None when it is acceptable."""
    if file.size > max_size_mb * 1024 * 1024:
        return f"File size exceeds {max_size_mb:g}MB limit"
    if file.content_type not in ALLOWED_CONTENT_TYPES:
        return "File type not allowed. Supported: JPG, PNG, GIF, PDF, DOC, DOCX"
    return None


def candidates_from_rows(rows: Iterable[ParsedRow]) -> list[StudentCandidate]:
    """Committable rows as match candidates, keyed by spreadsheet row number."""
    return [
        StudentCandidate(
            id=str(row.row_number),
            primary_key=row.data.admission_no,
            first_name=row.data.first_name,
            last_name=row.data.last_name,
            secondary_key=row.data.roll_no or None,
        )
        for row in rows
        if row.is_committable
    ]

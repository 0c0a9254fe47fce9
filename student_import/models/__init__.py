"""Domain models for the student bulk-import pipeline.

This package contains the dataclasses passed between the parser, the document
matcher, the storage gateway and the import orchestrator.
"""

from .config_models import ApiConfig, DatabaseConfig, ImportConfig, StorageConfig
from .error_record import ErrorRecord
from .file_match import (
    CandidateScore,
    Confidence,
    DocumentFile,
    FileMatch,
    MatchResult,
    StudentCandidate,
)
from .import_batch import BatchStatus, CommitResult, ImportBatch, RowError
from .parsed_row import ParsedRow, ParseResult, RowStatus
from .storage_result import StorageMetadata, StorageResult, UploadTask
from .student_row import STUDENT_FIELDS, StudentRow
from .validation import Severity, ValidationIssue

__all__ = [
    # Configuration models
    "ApiConfig",
    "DatabaseConfig",
    "ImportConfig",
    "StorageConfig",
    # Parsing models
    "ParsedRow",
    "ParseResult",
    "RowStatus",
    "Severity",
    "STUDENT_FIELDS",
    "StudentRow",
    "ValidationIssue",
    # Matching models
    "CandidateScore",
    "Confidence",
    "DocumentFile",
    "FileMatch",
    "MatchResult",
    "StudentCandidate",
    # Storage models
    "StorageMetadata",
    "StorageResult",
    "UploadTask",
    # Batch / commit models
    "BatchStatus",
    "CommitResult",
    "ErrorRecord",
    "ImportBatch",
    "RowError",
]

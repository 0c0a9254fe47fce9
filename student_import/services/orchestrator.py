from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, date, datetime
from typing import Any

from ..db.batch_repository import BatchRepository
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.file_match import FileMatch
from ..models.import_batch import BatchStatus, CommitResult, ImportBatch, RowError
from ..models.parsed_row import ParsedRow, ParseResult
from ..models.storage_result import StorageMetadata, UploadTask
from ..storage.base import StorageAdapter
from ..storage.batch_upload import iter_uploads
from .document_matcher import DEFAULT_MAX_DOCUMENT_SIZE_MB, group_by_candidate, validate_document
from .normalize import normalize_student_record

"""Import orchestration: batch lifecycle and per-row commit.

A batch is created from parser output and moves through
pending -> reviewing -> importing -> (completed | failed). commit() walks the
committable rows strictly in parse order, one at a time:

  1. normalise the row into the create-student payload
  2. upload the row's matched documents (a failed upload leaves the slot empty)
  3. call the create-student collaborator
  4. count the outcome and report progress

Row-level failures never abort the commit; they end up in the CommitResult
ledger and in the JSON Lines error log.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "ProcessingError",
    "BatchNotFoundError",
    "BatchStateError",
    "CreateStudent",
    "ProgressCallback",
    "ImportOrchestrator",
    "new_batch_id",
    "upload_key",
]

CreateStudent = Callable[[dict[str, Any]], Any]
ProgressCallback = Callable[[int, int], None]

RECORD_CREATE_ERROR = "RECORD_CREATE_ERROR"
DOCUMENT_UPLOAD_ERROR = "DOCUMENT_UPLOAD_ERROR"
DOCUMENT_REJECTED = "DOCUMENT_REJECTED"


class ProcessingError(Exception):
    """Base exception for batch-level orchestration errors."""


class BatchNotFoundError(ProcessingError):
    pass


class BatchStateError(ProcessingError):
    """Requested status change is not allowed from the batch's current status."""


def new_batch_id() -> str:
    return f"batch_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def upload_key(batch_id: str, row: ParsedRow, match: FileMatch) -> str:
    owner = row.data.admission_no or f"{batch_id}/row-{row.row_number}"
    return f"students/{owner}/{match.document_type or 'document'}_{match.original_name}"


class ImportOrchestrator:
    """Owns batch state and runs commits against injected collaborators.

    Args:
        repository: where batches and their rows are kept
        storage: document storage backend, built once by the caller
        create_student: persists one normalised record; any exception marks the row failed
        error_log: JSON Lines error buffer, flushed once at the end of every commit
        max_document_size_mb: documents above this size are not uploaded
    """

    def __init__(
        self,
        repository: BatchRepository,
        storage: StorageAdapter,
        create_student: CreateStudent,
        error_log: ErrorLogBuffer | None = None,
        max_document_size_mb: float = DEFAULT_MAX_DOCUMENT_SIZE_MB,
    ) -> None:
        self.repository = repository
        self.storage = storage
        self.create_student = create_student
        self.error_log = error_log
        self.max_document_size_mb = max_document_size_mb

    # ------------------------------------------------------------------
    # Batch lifecycle
    # ------------------------------------------------------------------
    def create_batch(self, file_name: str, rows: Sequence[ParsedRow]) -> str:
        """Register parser output as a new pending batch and return its id."""
        tally = ParseResult.from_rows(list(rows))
        batch = ImportBatch(
            id=new_batch_id(),
            file_name=file_name,
            total_rows=tally.total_rows,
            valid_rows=tally.valid_rows,
            invalid_rows=tally.invalid_rows,
            warning_rows=tally.warning_rows,
        )
        self.repository.save(batch)
        self.repository.save_rows(batch.id, tally.rows)
        logger.info(
            "batch created id=%s file=%s rows=%d valid=%d warning=%d invalid=%d",
            batch.id, file_name, batch.total_rows, batch.valid_rows,
            batch.warning_rows, batch.invalid_rows,
        )
        return batch.id

    def get_batch(self, batch_id: str) -> ImportBatch:
        batch = self.repository.get(batch_id)
        if batch is None:
            raise BatchNotFoundError(f"import batch not found: {batch_id}")
        return batch

    def get_rows(self, batch_id: str) -> list[ParsedRow]:
        self.get_batch(batch_id)
        return self.repository.get_rows(batch_id)

    def delete_batch(self, batch_id: str) -> None:
        self.get_batch(batch_id)
        self.repository.delete(batch_id)
        logger.info("batch deleted id=%s", batch_id)

    def _transition(self, batch: ImportBatch, status: BatchStatus) -> ImportBatch:
        if not batch.can_transition_to(status):
            raise BatchStateError(
                f"batch {batch.id}: cannot move from {batch.status.value} to {status.value}"
            )
        updated = batch.with_status(status)
        self.repository.save(updated)
        logger.debug("batch %s: %s -> %s", batch.id, batch.status.value, status.value)
        return updated

    def mark_reviewing(self, batch_id: str) -> ImportBatch:
        return self._transition(self.get_batch(batch_id), BatchStatus.REVIEWING)

    def mark_importing(self, batch_id: str) -> ImportBatch:
        return self._transition(self.get_batch(batch_id), BatchStatus.IMPORTING)

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------
    def commit(
        self,
        batch_id: str,
        rows: Sequence[ParsedRow] | None = None,
        file_matches: Iterable[FileMatch] | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> CommitResult:
        """Persist every valid / warning row of the batch.

        Args:
            batch_id: batch returned by create_batch
            rows: rows to commit (default: the rows stored with the batch)
            file_matches: matcher output; only exact / fuzzy matches are attached
            on_progress: called as (processed, total) after every row

        Returns:
            CommitResult with imported + failed == number of committable rows

        Raises:
            BatchNotFoundError: unknown batch id
            BatchStateError: batch already completed or failed
        """
        batch = self.get_batch(batch_id)
        if batch.status.is_terminal:
            raise BatchStateError(f"batch {batch_id} is already {batch.status.value}")

        source_rows = self.repository.get_rows(batch_id) if rows is None else rows
        to_commit = [r for r in source_rows if r.is_committable]
        files_by_row = group_by_candidate(file_matches or [])
        total = len(to_commit)

        started_at = datetime.now(UTC)
        t0 = time.perf_counter()
        imported = 0
        failed = 0
        errors: list[RowError] = []
        logger.info("commit start batch=%s rows=%d", batch_id, total)

        for processed, row in enumerate(to_commit, start=1):
            try:
                record = normalize_student_record(row.data)
                record["admission_date"] = date.today().isoformat()
                if row.data.admission_no:
                    record["admission_number"] = row.data.admission_no
                matches = files_by_row.get(str(row.row_number), [])
                if matches:
                    record.update(self._attach_documents(batch, row, matches))
                self.create_student(record)
            except Exception as e:
                failed += 1
                message = str(e) or type(e).__name__
                errors.append(RowError(row_number=row.row_number, error=message))
                logger.warning("row %d: create failed: %s", row.row_number, message)
                self._record_error(batch, row.row_number, RECORD_CREATE_ERROR, message)
            else:
                imported += 1

            if on_progress is not None:
                on_progress(processed, total)

        final_status = BatchStatus.COMPLETED if failed == 0 else BatchStatus.FAILED
        self._transition(batch, final_status)

        if self.error_log is not None:
            path = self.error_log.flush()
            if path is not None:
                logger.info("error log written path=%s", path)

        elapsed = time.perf_counter() - t0
        logger.info(
            "commit done batch=%s imported=%d failed=%d status=%s",
            batch_id, imported, failed, final_status.value,
        )
        return CommitResult(
            imported=imported,
            failed=failed,
            errors=errors,
            started_at=started_at,
            finished_at=datetime.now(UTC),
            elapsed_seconds=round(elapsed, 6),
        )

    def _attach_documents(
        self, batch: ImportBatch, row: ParsedRow, matches: list[FileMatch]
    ) -> dict[str, Any]:
        """Upload the row's documents; returns the document blocks to merge into the record."""
        tasks: list[UploadTask] = []
        for match in matches:
            reason = validate_document(match.file, self.max_document_size_mb)
            if reason is not None:
                logger.warning("row %d: skipped %s: %s", row.row_number, match.original_name, reason)
                self._record_error(
                    batch, row.row_number, DOCUMENT_REJECTED, f"{match.original_name}: {reason}"
                )
                continue
            tasks.append(UploadTask(
                data=match.file.content,
                key=upload_key(batch.id, row, match),
                metadata=StorageMetadata(
                    content_type=match.file.content_type,
                    custom_metadata={
                        "studentId": row.data.admission_no,
                        "documentType": match.document_type or "unknown",
                        "batchId": batch.id,
                    },
                ),
                file_name=match.original_name,
                document_type=match.document_type,
            ))

        def _on_error(task: UploadTask, error: Exception) -> None:
            self._record_error(
                batch, row.row_number, DOCUMENT_UPLOAD_ERROR, f"{task.file_name}: {error}"
            )

        documents: dict[str, Any] = {}
        additional: list[dict[str, Any]] = []
        for task, result in iter_uploads(tasks, self.storage, on_error=_on_error):
            entry = {
                "fileName": task.file_name,
                "url": result.url,
                "key": result.key,
                "size": result.size,
                "uploadedAt": result.uploaded_at,
            }
            if task.document_type and task.document_type not in documents:
                documents[task.document_type] = entry
            else:
                additional.append({**entry, "documentType": task.document_type or "document"})

        blocks: dict[str, Any] = {}
        if documents:
            blocks["documents"] = documents
        if additional:
            blocks["additionalDocuments"] = additional
        return blocks

    def _record_error(self, batch: ImportBatch, row: int, error_type: str, message: str) -> None:
        if self.error_log is None:
            return
        self.error_log.append(ErrorRecord.create(
            file=batch.file_name,
            batch_id=batch.id,
            row=row,
            error_type=error_type,
            message=message,
        ))

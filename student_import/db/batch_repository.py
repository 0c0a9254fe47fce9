from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

import psycopg2
from psycopg2.extras import Json, execute_values

from ..models.import_batch import ImportBatch
from ..models.parsed_row import ParsedRow

"""Batch repository: persistence of ImportBatch records and their parsed rows.

The orchestrator owns a repository instance; InMemoryBatchRepository backs
tests and dry runs, PostgresBatchRepository backs real imports. Each save
replaces the stored state of one batch id atomically.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "RepositoryError",
    "BatchRepository",
    "InMemoryBatchRepository",
    "PostgresBatchRepository",
    "SCHEMA_SQL",
]


class RepositoryError(Exception):
    """Raised when the backing store rejects a read or write."""


class BatchRepository(ABC):
    @abstractmethod
    def save(self, batch: ImportBatch) -> None:
        """Insert or replace the batch record."""

    @abstractmethod
    def get(self, batch_id: str) -> ImportBatch | None: ...

    @abstractmethod
    def save_rows(self, batch_id: str, rows: Sequence[ParsedRow]) -> None:
        """Replace the stored rows of a batch."""

    @abstractmethod
    def get_rows(self, batch_id: str) -> list[ParsedRow]: ...

    @abstractmethod
    def delete(self, batch_id: str) -> None:
        """Remove the batch and its rows. Unknown ids are ignored."""


class InMemoryBatchRepository(BatchRepository):
    def __init__(self) -> None:
        self._batches: dict[str, ImportBatch] = {}
        self._rows: dict[str, list[ParsedRow]] = {}

    def save(self, batch):
        self._batches[batch.id] = batch

    def get(self, batch_id):
        return self._batches.get(batch_id)

    def save_rows(self, batch_id, rows):
        self._rows[batch_id] = list(rows)

    def get_rows(self, batch_id):
        return list(self._rows.get(batch_id, []))

    def delete(self, batch_id):
        self._batches.pop(batch_id, None)
        self._rows.pop(batch_id, None)

    def __len__(self) -> int:
        return len(self._batches)


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS import_batches (
    id text PRIMARY KEY,
    file_name text NOT NULL,
    total_rows integer NOT NULL,
    valid_rows integer NOT NULL,
    invalid_rows integer NOT NULL,
    warning_rows integer NOT NULL,
    status text NOT NULL,
    created_at timestamptz NOT NULL,
    updated_at timestamptz NOT NULL
);
CREATE TABLE IF NOT EXISTS import_batch_rows (
    batch_id text NOT NULL REFERENCES import_batches(id) ON DELETE CASCADE,
    row_number integer NOT NULL,
    payload jsonb NOT NULL,
    PRIMARY KEY (batch_id, row_number)
);
"""

_UPSERT_BATCH_SQL = """
INSERT INTO import_batches
    (id, file_name, total_rows, valid_rows, invalid_rows, warning_rows, status, created_at, updated_at)
VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
ON CONFLICT (id) DO UPDATE SET
    file_name = EXCLUDED.file_name,
    total_rows = EXCLUDED.total_rows,
    valid_rows = EXCLUDED.valid_rows,
    invalid_rows = EXCLUDED.invalid_rows,
    warning_rows = EXCLUDED.warning_rows,
    status = EXCLUDED.status,
    updated_at = EXCLUDED.updated_at
"""

_SELECT_BATCH_SQL = """
SELECT id, file_name, total_rows, valid_rows, invalid_rows, warning_rows, status, created_at, updated_at
FROM import_batches WHERE id = %s
"""

_BATCH_COLUMNS = (
    "id", "file_name", "total_rows", "valid_rows", "invalid_rows",
    "warning_rows", "status", "created_at", "updated_at",
)


class PostgresBatchRepository(BatchRepository):
    """psycopg2-backed repository. Every public call is its own transaction."""

    def __init__(self, conn: Any, page_size: int = 1000) -> None:
        self._conn = conn
        self._page_size = page_size

    def _run(self, fn, *args):
        try:
            with self._conn:
                with self._conn.cursor() as cur:
                    return fn(cur, *args)
        except psycopg2.Error as e:
            raise RepositoryError(str(e)) from e

    def ensure_schema(self) -> None:
        self._run(lambda cur: cur.execute(SCHEMA_SQL))

    def save(self, batch):
        def _save(cur):
            cur.execute(
                _UPSERT_BATCH_SQL,
                (
                    batch.id, batch.file_name, batch.total_rows, batch.valid_rows,
                    batch.invalid_rows, batch.warning_rows, batch.status.value,
                    batch.created_at, batch.updated_at,
                ),
            )
        self._run(_save)

    def get(self, batch_id):
        def _get(cur):
            cur.execute(_SELECT_BATCH_SQL, (batch_id,))
            return cur.fetchone()
        row = self._run(_get)
        if row is None:
            return None
        return ImportBatch.from_dict(dict(zip(_BATCH_COLUMNS, row, strict=True)))

    def save_rows(self, batch_id, rows):
        values = [(batch_id, r.row_number, Json(r.to_dict())) for r in rows]

        def _save_rows(cur):
            cur.execute("DELETE FROM import_batch_rows WHERE batch_id = %s", (batch_id,))
            if values:
                execute_values(
                    cur,
                    "INSERT INTO import_batch_rows (batch_id, row_number, payload) VALUES %s",
                    values,
                    page_size=self._page_size,
                )
        self._run(_save_rows)
        logger.debug("stored rows batch=%s count=%d", batch_id, len(values))

    def get_rows(self, batch_id):
        def _get_rows(cur):
            cur.execute(
                "SELECT payload FROM import_batch_rows WHERE batch_id = %s ORDER BY row_number",
                (batch_id,),
            )
            return cur.fetchall()
        return [ParsedRow.from_dict(payload) for (payload,) in self._run(_get_rows)]

    def delete(self, batch_id):
        def _delete(cur):
            cur.execute("DELETE FROM import_batch_rows WHERE batch_id = %s", (batch_id,))
            cur.execute("DELETE FROM import_batches WHERE id = %s", (batch_id,))
        self._run(_delete)

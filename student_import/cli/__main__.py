from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import psycopg2
from dotenv import load_dotenv

from ..clients.student_api import StudentApiClient
from ..config.loader import ConfigError, load_config
from ..db.batch_repository import (
    BatchRepository,
    InMemoryBatchRepository,
    PostgresBatchRepository,
    RepositoryError,
)
from ..excel.reader import ImportParseError
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, setup_logging
from ..models.config_models import ImportConfig
from ..models.file_match import FileMatch
from ..services.archive import ArchiveError, extract_archive
from ..services.document_matcher import candidates_from_rows, match_files_to_students
from ..services.error_export import generate_errors_excel
from ..services.orchestrator import ImportOrchestrator, ProcessingError
from ..services.progress import ProgressTracker
from ..services.row_parser import parse_import_file
from ..services.summary import generate_import_summary, render_summary_line
from ..services.validation import DEFAULT_VOCABULARY
from ..storage.base import StorageError
from ..storage.factory import create_storage_adapter

"""CLI entrypoint.

    python -m student_import.cli students.xlsx --archive documents.zip

Flow: load config -> parse + validate -> (export errors) -> (match archive
documents) -> create batch -> commit valid / warning rows -> SUMMARY line.

Exit codes:
    0  every committable row imported (or --dry-run)
    2  at least one row failed to import
    1  fatal: bad config, unreadable spreadsheet or archive, storage setup failure
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

DEFAULT_CONFIG_PATH = Path("config/import.yml")


def _resolve_dsn(cfg: ImportConfig) -> str | None:
    """DATABASE_URL / PGDSN first, then PG* variables over the config section."""
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or cfg.database.dsn
    if dsn:
        return dsn
    db = cfg.database
    host = os.getenv("PGHOST", db.host or "")
    if not host:
        return None
    port = os.getenv("PGPORT", str(db.port) if db.port else "5432")
    user = os.getenv("PGUSER", db.user or "postgres")
    password = os.getenv("PGPASSWORD", db.password or "")
    database = os.getenv("PGDATABASE", db.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def _batch_repository(cfg: ImportConfig, logger) -> Iterator[BatchRepository]:
    """PostgreSQL repository when a database is configured, else in-memory.

    DISABLE_DB_CONNECT=1 forces the in-memory repository.
    """
    dsn = None if os.getenv("DISABLE_DB_CONNECT") == "1" else _resolve_dsn(cfg)
    if dsn is None:
        logger.debug("batch repository: in-memory")
        yield InMemoryBatchRepository()
        return

    try:
        conn = psycopg2.connect(dsn)
    except psycopg2.Error as e:
        logger.warning(f"DB connection failed -> in-memory batch repository: {e}")
        conn = None
    if conn is None:
        yield InMemoryBatchRepository()
        return

    try:
        repo = PostgresBatchRepository(conn)
        repo.ensure_schema()
        logger.debug("batch repository: postgres")
        yield repo
    finally:
        conn.close()


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="student_import",
        description="Bulk import of student records from a spreadsheet",
    )
    p.add_argument("file", type=Path, help="Spreadsheet (.xlsx or .csv)")
    p.add_argument("--archive", type=Path, help="Zip / tar archive of student documents")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Config YAML")
    p.add_argument("--errors-out", type=Path, help="Write invalid / warning rows to this .xlsx")
    p.add_argument("--report", type=Path, help="Write the import summary report to this file")
    p.add_argument("--dry-run", action="store_true", help="Parse, validate and match only")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _match_archive(archive: Path, rows, logger) -> list[FileMatch]:
    files = extract_archive(archive)
    result = match_files_to_students(files, candidates_from_rows(rows))
    for name in result.unmatched_files:
        logger.warning(f"unmatched document: {name}")
    for match in result.matches:
        if match.candidates:
            rows_listed = ", ".join(c.key for c in match.candidates)
            logger.warning(f"ambiguous document: {match.original_name} (rows {rows_listed})")
    return result.matches


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)

    # .env overrides the process environment
    env_path = Path(".env")
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=True)

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    vocabulary = DEFAULT_VOCABULARY.with_overrides(cfg.classes, cfg.sections)
    try:
        parsed = parse_import_file(args.file, sheet_name=cfg.sheet_name, vocabulary=vocabulary)
    except ImportParseError as e:
        logger.error(f"parse: {e}")
        return EXIT_FATAL

    if args.errors_out:
        generate_errors_excel(parsed.rows, args.errors_out)

    matches: list[FileMatch] = []
    if args.archive:
        try:
            matches = _match_archive(args.archive, parsed.rows, logger)
        except ArchiveError as e:
            logger.error(f"archive: {e}")
            return EXIT_FATAL

    if args.dry_run:
        log_summary(
            f"dry_run=1 rows={parsed.total_rows} valid={parsed.valid_rows} "
            f"warning={parsed.warning_rows} invalid={parsed.invalid_rows} documents={len(matches)}"
        )
        return EXIT_SUCCESS_ALL

    try:
        storage = create_storage_adapter(cfg.storage)
    except StorageError as e:
        logger.error(f"storage: {e}")
        return EXIT_FATAL

    api = StudentApiClient(cfg.api.base_url, cfg.api.token, timeout=cfg.api.timeout_seconds)
    try:
        with _batch_repository(cfg, logger) as repository:
            orchestrator = ImportOrchestrator(
                repository,
                storage,
                api.create_student,
                error_log=ErrorLogBuffer(cfg.logs_directory),
                max_document_size_mb=cfg.max_document_size_mb,
            )
            batch_id = orchestrator.create_batch(args.file.name, parsed.rows)
            orchestrator.mark_reviewing(batch_id)
            orchestrator.mark_importing(batch_id)
            with ProgressTracker(len(parsed.committable_rows)) as tracker:
                result = orchestrator.commit(
                    batch_id, parsed.rows, file_matches=matches, on_progress=tracker.update
                )
    except (ProcessingError, RepositoryError) as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL
    finally:
        api.close()

    # log_summary adds the "SUMMARY " label itself
    log_summary(render_summary_line(batch_id, result)[len("SUMMARY "):])

    if args.report:
        args.report.parent.mkdir(parents=True, exist_ok=True)
        args.report.write_text(generate_import_summary(result), encoding="utf-8")

    if result.failed > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

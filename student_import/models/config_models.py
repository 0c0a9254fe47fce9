from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the student import tool.

Built by student_import.config.loader from config/import.yml. Secrets
(database password, API token, Drive token, S3 keys) are normally supplied by
environment variables / .env and only fall back to these values.
"""

DEFAULT_STORAGE_BACKEND = "object_storage"


@dataclass(frozen=True)
class DatabaseConfig:
    """Connection settings for the PostgreSQL batch repository.

    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class StorageConfig:
    """Document storage backend selection and per-backend settings."""
    backend: str = DEFAULT_STORAGE_BACKEND  # object_storage | google_drive | local
    bucket: str = "student-documents"
    base_path: str = ""
    endpoint_url: str | None = None  # S3 compatible endpoint (R2, Supabase, MinIO)
    region: str | None = None
    public_base_url: str | None = None  # when set, URLs are public instead of presigned
    url_expires_in: int = 3600
    drive_folder_id: str | None = None
    local_root: str = "./uploads"


@dataclass(frozen=True)
class ApiConfig:
    """Create-student API endpoint."""
    base_url: str = "http://localhost:3001/api"
    timeout_seconds: float = 30.0
    token: str | None = None  # STUDENT_API_TOKEN overrides


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object for an import run."""
    storage: StorageConfig = field(default_factory=StorageConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    sheet_name: str | None = None  # None: "Students" sheet if present, else first sheet
    classes: list[str] | None = None  # vocabulary overrides
    sections: list[str] | None = None
    max_document_size_mb: float = 5.0
    logs_directory: str = "./logs"

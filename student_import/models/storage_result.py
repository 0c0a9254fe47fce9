from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

"""Storage gateway models shared by every storage backend."""

__all__ = [
    "StorageMetadata",
    "StorageResult",
    "UploadTask",
    "utc_timestamp",
]


def utc_timestamp() -> str:
    """ISO8601 UTC timestamp with 'Z' suffix."""
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class StorageMetadata:
    content_type: str | None = None
    custom_metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class StorageResult:
    """Outcome of one successful upload. Never mutated afterwards."""
    key: str  # backend specific locator (object key, Drive file id, relative path)
    url: str
    size: int  # bytes
    uploaded_at: str  # ISO8601 UTC


@dataclass(frozen=True)
class UploadTask:
    data: bytes
    key: str
    metadata: StorageMetadata | None = None
    file_name: str = ""
    document_type: str | None = None

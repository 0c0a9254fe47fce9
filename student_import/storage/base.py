from __future__ import annotations

from abc import ABC, abstractmethod

from ..models.storage_result import StorageMetadata, StorageResult

"""Storage gateway port.

Every backend exposes the same four operations. Adapters never retry; a
failed call raises a StorageError subclass and the caller decides what to do.
"""

__all__ = [
    "StorageError",
    "StorageNotFoundError",
    "StorageAdapter",
    "join_key",
]


class StorageError(Exception):
    """Backend rejected or could not complete a storage operation."""


class StorageNotFoundError(StorageError):
    """The requested key does not exist."""


def join_key(base_path: str, key: str) -> str:
    """Prefix `key` with `base_path` using a single '/' separator."""
    base = base_path.strip("/")
    key = key.lstrip("/")
    return f"{base}/{key}" if base else key


class StorageAdapter(ABC):
    """put / get_url / delete / exists over one storage backend."""

    backend_name: str = "abstract"

    @abstractmethod
    def put(
        self, data: bytes, key: str, metadata: StorageMetadata | None = None
    ) -> StorageResult:
        """Store `data` under `key` (overwriting) and return where it landed."""

    @abstractmethod
    def get_url(self, key: str) -> str:
        """Retrieval URL for `key`. Raises StorageNotFoundError when absent."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove `key`. Deleting an absent key is not an error."""

    @abstractmethod
    def exists(self, key: str) -> bool:
        """True when `key` is stored. Raises only when the backend is unreachable."""

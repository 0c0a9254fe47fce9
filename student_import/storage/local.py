from __future__ import annotations

import logging
from pathlib import Path

from ..models.storage_result import StorageResult, utc_timestamp
from .base import StorageAdapter, StorageError, StorageNotFoundError

"""Local filesystem backend for development and tests.

Keys are relative paths below the root directory; URLs are file:// URIs.
"""

logger = logging.getLogger(__name__)

__all__ = ["LocalStorageAdapter"]


class LocalStorageAdapter(StorageAdapter):
    backend_name = "local"

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root).resolve()

    def _path(self, key: str) -> Path:
        path = (self.root / key.lstrip("/")).resolve()
        if not path.is_relative_to(self.root):
            raise StorageError(f"key escapes storage root: {key}")
        return path

    def put(self, data, key, metadata=None):
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise StorageError(f"local write failed key={key}: {e}") from e
        return StorageResult(key=key, url=path.as_uri(), size=len(data), uploaded_at=utc_timestamp())

    def get_url(self, key):
        path = self._path(key)
        if not path.is_file():
            raise StorageNotFoundError(f"file not found: {key}")
        return path.as_uri()

    def delete(self, key):
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"local delete failed key={key}: {e}") from e

    def exists(self, key):
        return self._path(key).is_file()

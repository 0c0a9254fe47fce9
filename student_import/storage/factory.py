from __future__ import annotations

import logging
import os

from ..models.config_models import StorageConfig
from .base import StorageAdapter, StorageError
from .google_drive import GoogleDriveStorageAdapter
from .local import LocalStorageAdapter
from .object_storage import ObjectStorageAdapter

"""Storage backend selection.

The backend is chosen once per run from the `storage.backend` config value.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "BACKENDS",
    "create_storage_adapter",
]

BACKENDS = ("object_storage", "google_drive", "local")


def create_storage_adapter(config: StorageConfig) -> StorageAdapter:
    """Build the configured adapter.

    Raises:
        StorageError: unknown backend, or Google Drive without an access token
    """
    backend = config.backend
    if backend == "object_storage":
        adapter: StorageAdapter = ObjectStorageAdapter.from_config(config)
    elif backend == "google_drive":
        token = os.getenv("GOOGLE_DRIVE_ACCESS_TOKEN")
        if not token:
            raise StorageError("GOOGLE_DRIVE_ACCESS_TOKEN is not set")
        adapter = GoogleDriveStorageAdapter(token, config.drive_folder_id)
    elif backend == "local":
        adapter = LocalStorageAdapter(config.local_root)
    else:
        raise StorageError(f"unknown storage backend: {backend!r} (expected one of {', '.join(BACKENDS)})")
    logger.debug("storage backend=%s", adapter.backend_name)
    return adapter

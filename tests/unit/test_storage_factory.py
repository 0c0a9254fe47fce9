from __future__ import annotations

from unittest.mock import patch

import pytest

from student_import.models.config_models import StorageConfig
from student_import.storage.base import StorageError
from student_import.storage.factory import create_storage_adapter
from student_import.storage.google_drive import GoogleDriveStorageAdapter
from student_import.storage.local import LocalStorageAdapter
from student_import.storage.object_storage import ObjectStorageAdapter


def test_default_backend_is_object_storage():
    with patch("student_import.storage.object_storage.boto3") as boto3:
        adapter = create_storage_adapter(StorageConfig())
    assert isinstance(adapter, ObjectStorageAdapter)
    assert boto3.client.call_args.args == ("s3",)


def test_local_backend(tmp_path):
    adapter = create_storage_adapter(StorageConfig(backend="local", local_root=str(tmp_path)))
    assert isinstance(adapter, LocalStorageAdapter)


def test_google_drive_needs_token(monkeypatch):
    monkeypatch.delenv("GOOGLE_DRIVE_ACCESS_TOKEN", raising=False)
    with pytest.raises(StorageError):
        create_storage_adapter(StorageConfig(backend="google_drive", drive_folder_id="f"))
    monkeypatch.setenv("GOOGLE_DRIVE_ACCESS_TOKEN", "tok")
    adapter = create_storage_adapter(StorageConfig(backend="google_drive", drive_folder_id="f"))
    assert isinstance(adapter, GoogleDriveStorageAdapter)
    assert adapter.folder_id == "f"


def test_unknown_backend():
    with pytest.raises(StorageError):
        create_storage_adapter(StorageConfig(backend="ftp"))

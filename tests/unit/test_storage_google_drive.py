from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from student_import.models.storage_result import StorageMetadata, UploadTask
from student_import.storage.base import StorageError, StorageNotFoundError
from student_import.storage.batch_upload import batch_upload
from student_import.storage.google_drive import (
    DRIVE_FILES_URL,
    DRIVE_UPLOAD_URL,
    GoogleDriveStorageAdapter,
)


def _response(status: int, payload: dict | None = None) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.json.return_value = payload or {}
    resp.text = ""
    return resp


@pytest.fixture()
def session():
    s = MagicMock()
    s.headers = {}
    return s


def test_put_uploads_multipart_into_folder(session):
    session.request.return_value = _response(200, {"id": "f1", "webViewLink": "https://drive/f1"})
    adapter = GoogleDriveStorageAdapter("tok", "folder-9", session=session, timeout=7)

    result = adapter.put(b"%PDF", "students/STU-1/birth_certificate_b.pdf", StorageMetadata("application/pdf"))

    assert session.headers["Authorization"] == "Bearer tok"
    method, url = session.request.call_args.args
    kwargs = session.request.call_args.kwargs
    assert (method, url) == ("POST", DRIVE_UPLOAD_URL)
    assert kwargs["params"]["uploadType"] == "multipart"
    assert kwargs["timeout"] == 7
    assert kwargs["headers"]["Content-Type"].startswith("multipart/related; boundary=")
    assert b'"parents": ["folder-9"]' in kwargs["data"]
    assert b'"name": "birth_certificate_b.pdf"' in kwargs["data"]
    assert b"%PDF" in kwargs["data"]
    assert (result.key, result.url, result.size) == ("f1", "https://drive/f1", 4)


def test_put_without_folder_fails(session):
    with pytest.raises(StorageError):
        GoogleDriveStorageAdapter("tok", None, session=session).put(b"x", "k")
    session.request.assert_not_called()


def test_put_http_error(session):
    session.request.return_value = _response(403)
    with pytest.raises(StorageError):
        GoogleDriveStorageAdapter("tok", "f", session=session).put(b"x", "k")


def test_transport_error_is_storage_error(session):
    session.request.side_effect = requests.ConnectionError("down")
    with pytest.raises(StorageError):
        GoogleDriveStorageAdapter("tok", "f", session=session).exists("id")


def test_exists_get_url_delete(session):
    adapter = GoogleDriveStorageAdapter("tok", "f", session=session)

    session.request.return_value = _response(200, {"id": "id1"})
    assert adapter.exists("id1") is True
    assert adapter.get_url("id1") == "https://drive.google.com/file/d/id1/view"
    assert session.request.call_args.args == ("GET", f"{DRIVE_FILES_URL}/id1")

    session.request.return_value = _response(404)
    assert adapter.exists("id1") is False
    with pytest.raises(StorageNotFoundError):
        adapter.get_url("id1")
    adapter.delete("id1")

    session.request.return_value = _response(500)
    with pytest.raises(StorageError):
        adapter.delete("id1")


def _not_json(status: int = 200) -> MagicMock:
    resp = _response(status)
    resp.json.side_effect = ValueError("not json")
    return resp


def test_put_non_json_response_is_storage_error(session):
    session.request.side_effect = [_response(200, {"files": []}), _not_json()]
    with pytest.raises(StorageError, match="not JSON"):
        GoogleDriveStorageAdapter("tok", "f", session=session).put(b"x", "students/a.pdf")


def test_put_response_without_id_is_storage_error(session):
    session.request.side_effect = [_response(200, {"files": []}), _response(200, {"kind": "drive#file"})]
    with pytest.raises(StorageError, match="no file id"):
        GoogleDriveStorageAdapter("tok", "f", session=session).put(b"x", "students/a.pdf")


def test_batch_upload_skips_undecodable_drive_responses(session):
    session.request.side_effect = [
        _response(200, {"files": []}), _not_json(),
        _response(200, {"files": []}), _not_json(),
    ]
    adapter = GoogleDriveStorageAdapter("tok", "f", session=session)
    tasks = [UploadTask(b"a", "students/a.pdf"), UploadTask(b"b", "students/b.pdf")]
    assert batch_upload(tasks, adapter) == []


def test_put_same_name_updates_existing_file(session):
    session.request.side_effect = [
        _response(200, {"files": [{"id": "f1"}]}),
        _response(200, {"id": "f1", "webViewLink": "https://drive/f1"}),
    ]
    adapter = GoogleDriveStorageAdapter("tok", "folder-9", session=session)

    result = adapter.put(b"%PDF", "students/STU-1/tc.pdf", StorageMetadata("application/pdf"))

    lookup, upload = session.request.call_args_list
    assert lookup.args == ("GET", DRIVE_FILES_URL)
    assert lookup.kwargs["params"]["q"] == "name = 'tc.pdf' and 'folder-9' in parents and trashed = false"
    assert upload.args == ("PATCH", f"{DRIVE_UPLOAD_URL}/f1")
    assert b'"parents"' not in upload.kwargs["data"]
    assert result.key == "f1"


def test_lookup_escapes_quotes_in_name(session):
    session.request.side_effect = [_response(200, {"files": []}), _response(200, {"id": "f2"})]
    GoogleDriveStorageAdapter("tok", "f", session=session).put(b"x", "students/o'brien.jpg")
    q = session.request.call_args_list[0].kwargs["params"]["q"]
    assert q.startswith("name = 'o\\'brien.jpg'")

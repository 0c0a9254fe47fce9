from __future__ import annotations

import json
import logging
import uuid
from typing import Any

import requests

from ..models.storage_result import StorageMetadata, StorageResult, utc_timestamp
from .base import StorageAdapter, StorageError, StorageNotFoundError

"""Google Drive backend (Drive v3 REST API).

Files are uploaded into one configured folder with a multipart/related
request; the storage key of a document is its Drive file id. Drive has no
paths, so a file is identified by its name inside the folder: putting a name
that already exists there updates that file instead of adding a duplicate.
Authentication is a ready OAuth access token (obtaining / refreshing it is
out of scope).
"""

logger = logging.getLogger(__name__)

__all__ = [
    "GoogleDriveStorageAdapter",
    "DRIVE_FILES_URL",
    "DRIVE_UPLOAD_URL",
]

DRIVE_FILES_URL = "https://www.googleapis.com/drive/v3/files"
DRIVE_UPLOAD_URL = "https://www.googleapis.com/upload/drive/v3/files"
DRIVE_VIEW_URL = "https://drive.google.com/file/d/{file_id}/view"
DEFAULT_TIMEOUT = 30.0


def _multipart_related(metadata: dict[str, Any], data: bytes, content_type: str) -> tuple[bytes, str]:
    boundary = f"student-import-{uuid.uuid4().hex}"
    head = (
        f"--{boundary}\r\n"
        "Content-Type: application/json; charset=UTF-8\r\n\r\n"
        f"{json.dumps(metadata)}\r\n"
        f"--{boundary}\r\n"
        f"Content-Type: {content_type}\r\n\r\n"
    ).encode("utf-8")
    tail = f"\r\n--{boundary}--\r\n".encode()
    return head + data + tail, f"multipart/related; boundary={boundary}"


class GoogleDriveStorageAdapter(StorageAdapter):
    backend_name = "google_drive"

    def __init__(
        self,
        access_token: str,
        folder_id: str | None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self.folder_id = folder_id
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({"Authorization": f"Bearer {access_token}"})

    def close(self) -> None:
        self._session.close()

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        try:
            return self._session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.RequestException as e:
            raise StorageError(f"google drive request failed: {method} {url}: {e}") from e

    def _decode(self, resp: requests.Response, what: str) -> dict[str, Any]:
        try:
            payload = resp.json()
        except ValueError as e:
            raise StorageError(f"google drive {what}: response is not JSON") from e
        if not isinstance(payload, dict):
            raise StorageError(f"google drive {what}: unexpected response {payload!r}")
        return payload

    def _find_in_folder(self, name: str) -> str | None:
        """Id of a live file called `name` in the configured folder, if any."""
        quoted = name.replace("\\", "\\\\").replace("'", "\\'")
        resp = self._request(
            "GET",
            DRIVE_FILES_URL,
            params={
                "q": f"name = '{quoted}' and '{self.folder_id}' in parents and trashed = false",
                "fields": "files(id)",
                "pageSize": 1,
            },
        )
        if resp.status_code >= 400:
            raise StorageError(f"google drive lookup failed status={resp.status_code}")
        files = self._decode(resp, "lookup").get("files") or []
        return files[0].get("id") if files else None

    def put(self, data, key, metadata=None):
        """Upload into the folder. A file with the same name there is overwritten in place."""
        if not self.folder_id:
            raise StorageError("Google Drive folder ID not configured")
        meta = metadata or StorageMetadata()
        content_type = meta.content_type or "application/octet-stream"
        # Drive has no paths; the last key segment becomes the file name
        name = key.rsplit("/", 1)[-1]
        file_meta: dict[str, Any] = {"name": name}
        if meta.custom_metadata:
            file_meta["appProperties"] = dict(meta.custom_metadata)

        existing_id = self._find_in_folder(name)
        if existing_id is None:
            method, url = "POST", DRIVE_UPLOAD_URL
            file_meta["parents"] = [self.folder_id]
        else:
            # parents cannot be sent on update
            method, url = "PATCH", f"{DRIVE_UPLOAD_URL}/{existing_id}"
        body, body_type = _multipart_related(file_meta, data, content_type)

        resp = self._request(
            method,
            url,
            params={"uploadType": "multipart", "fields": "id,webViewLink"},
            data=body,
            headers={"Content-Type": body_type},
        )
        if resp.status_code >= 400:
            raise StorageError(f"google drive upload failed status={resp.status_code}: {resp.text[:200]}")
        payload = self._decode(resp, "upload")
        file_id = payload.get("id")
        if not file_id:
            raise StorageError("google drive upload: response has no file id")
        url = payload.get("webViewLink") or DRIVE_VIEW_URL.format(file_id=file_id)
        logger.debug("uploaded to drive name=%s id=%s replaced=%s", name, file_id, existing_id is not None)
        return StorageResult(key=file_id, url=url, size=len(data), uploaded_at=utc_timestamp())

    def _get_file(self, key: str) -> requests.Response:
        return self._request("GET", f"{DRIVE_FILES_URL}/{key}", params={"fields": "id,webViewLink"})

    def get_url(self, key):
        resp = self._get_file(key)
        if resp.status_code == 404:
            raise StorageNotFoundError(f"drive file not found: {key}")
        if resp.status_code >= 400:
            raise StorageError(f"google drive lookup failed status={resp.status_code}")
        return self._decode(resp, "lookup").get("webViewLink") or DRIVE_VIEW_URL.format(file_id=key)

    def delete(self, key):
        resp = self._request("DELETE", f"{DRIVE_FILES_URL}/{key}")
        if resp.status_code == 404:
            return
        if resp.status_code >= 400:
            raise StorageError(f"google drive delete failed status={resp.status_code}")

    def exists(self, key):
        resp = self._get_file(key)
        if resp.status_code == 404:
            return False
        if resp.status_code >= 400:
            raise StorageError(f"google drive lookup failed status={resp.status_code}")
        return True

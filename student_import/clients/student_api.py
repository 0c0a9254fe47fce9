from __future__ import annotations

import logging
from typing import Any

import requests

"""HTTP client for the student records API.

Only the create call is needed by the importer: POST <base_url>/students with
the normalised record as JSON. Timeouts are always explicit; retries are left
to the caller.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "StudentApiError",
    "StudentApiClient",
]


class StudentApiError(Exception):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StudentApiClient:
    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        *,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("base_url is required")
        self._base_url = base_url.rstrip("/")
        self._timeout = float(timeout)
        self._session = session or requests.Session()
        self._session.headers.update({"Content-Type": "application/json"})
        if token:
            self._session.headers.update({"Authorization": f"Bearer {token}"})

    def close(self) -> None:
        self._session.close()

    def create_student(self, record: dict[str, Any]) -> dict[str, Any]:
        """Create one student.

        Returns:
            The created student as returned by the API

        Raises:
            StudentApiError: transport failure or non-2xx response; the message is
                the API's "error" field when it sends one
        """
        url = f"{self._base_url}/students"
        try:
            resp = self._session.post(url, json=record, timeout=self._timeout)
        except requests.RequestException as e:
            raise StudentApiError(f"request failed: {e}") from e

        try:
            payload = resp.json()
        except ValueError:
            payload = {}

        if not resp.ok:
            message = payload.get("error") if isinstance(payload, dict) else None
            raise StudentApiError(
                message or f"HTTP {resp.status_code}: {resp.reason}", status_code=resp.status_code
            )
        if isinstance(payload, dict) and "student" in payload:
            return payload["student"]
        return payload

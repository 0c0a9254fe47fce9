from __future__ import annotations

import logging
import os
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..models.config_models import StorageConfig
from ..models.storage_result import StorageMetadata, StorageResult, utc_timestamp
from .base import StorageAdapter, StorageError, StorageNotFoundError, join_key

"""S3-compatible object storage backend (AWS S3, Cloudflare R2, MinIO).

Keys are stored under the configured base path. URLs are either
`<public_base_url>/<object key>` (public bucket / CDN) or presigned GET URLs
valid for `url_expires_in` seconds.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "ObjectStorageAdapter",
    "build_s3_client",
]

_NOT_FOUND_CODES = ("404", "NoSuchKey", "NotFound")


def build_s3_client(config: StorageConfig) -> Any:
    """boto3 S3 client from config; credentials come from the environment."""
    return boto3.client(
        "s3",
        endpoint_url=config.endpoint_url,
        aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
        aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
        region_name=config.region or "auto",
    )


def _error_code(e: ClientError) -> str:
    return str((e.response.get("Error") or {}).get("Code"))


class ObjectStorageAdapter(StorageAdapter):
    backend_name = "object_storage"

    def __init__(
        self,
        bucket: str,
        *,
        client: Any,
        base_path: str = "",
        public_base_url: str | None = None,
        url_expires_in: int = 3600,
    ) -> None:
        self.bucket = bucket
        self.base_path = base_path
        self.public_base_url = public_base_url.rstrip("/") if public_base_url else None
        self.url_expires_in = url_expires_in
        self._s3 = client

    @classmethod
    def from_config(cls, config: StorageConfig, client: Any | None = None) -> ObjectStorageAdapter:
        return cls(
            config.bucket,
            client=client if client is not None else build_s3_client(config),
            base_path=config.base_path,
            public_base_url=config.public_base_url,
            url_expires_in=config.url_expires_in,
        )

    def _object_key(self, key: str) -> str:
        return join_key(self.base_path, key)

    def _url_for(self, object_key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{object_key}"
        return self._s3.generate_presigned_url(
            ClientMethod="get_object",
            Params={"Bucket": self.bucket, "Key": object_key},
            ExpiresIn=self.url_expires_in,
        )

    def put(self, data, key, metadata=None):
        object_key = self._object_key(key)
        meta = metadata or StorageMetadata()
        try:
            self._s3.put_object(
                Bucket=self.bucket,
                Key=object_key,
                Body=data,
                ContentType=meta.content_type or "application/octet-stream",
                Metadata=dict(meta.custom_metadata),
            )
            url = self._url_for(object_key)
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"object storage upload failed key={object_key}: {e}") from e
        logger.debug("stored bucket=%s key=%s size=%d", self.bucket, object_key, len(data))
        return StorageResult(key=key, url=url, size=len(data), uploaded_at=utc_timestamp())

    def get_url(self, key):
        if not self.exists(key):
            raise StorageNotFoundError(f"object not found: {self._object_key(key)}")
        try:
            return self._url_for(self._object_key(key))
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"failed to build url for {key}: {e}") from e

    def delete(self, key):
        object_key = self._object_key(key)
        try:
            self._s3.delete_object(Bucket=self.bucket, Key=object_key)
        except ClientError as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                return
            raise StorageError(f"object storage delete failed key={object_key}: {e}") from e
        except BotoCoreError as e:
            raise StorageError(f"object storage delete failed key={object_key}: {e}") from e

    def exists(self, key):
        object_key = self._object_key(key)
        try:
            self._s3.head_object(Bucket=self.bucket, Key=object_key)
        except ClientError as e:
            if _error_code(e) in _NOT_FOUND_CODES:
                return False
            raise StorageError(f"object storage unavailable: {e}") from e
        except BotoCoreError as e:
            raise StorageError(f"object storage unavailable: {e}") from e
        return True

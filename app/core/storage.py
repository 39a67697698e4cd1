import logging
import os
from pathlib import Path
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .config import settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the object store rejects an operation"""


class ObjectStorage:
    """Handles image storage in an S3 compatible bucket (Cloudflare R2, MinIO, S3)"""

    def __init__(self):
        """Initialize the S3 client with settings from config"""
        self.client = None
        self.bucket = settings.STORAGE_BUCKET_NAME
        self.public_url = settings.STORAGE_PUBLIC_URL.rstrip("/")
        self.base_url = settings.BASE_URL.rstrip("/")
        self.local_root = Path(settings.UPLOAD_DIRECTORY)

        logger.info("Initializing ObjectStorage with configuration:")
        logger.info(f"  Bucket: {self.bucket}")
        logger.info(f"  Public URL: {self.public_url or 'Not set'}")
        logger.info(f"  Endpoint: {settings.STORAGE_ENDPOINT or 'Not set'}")

        if all([settings.STORAGE_ENDPOINT, settings.STORAGE_ACCESS_KEY_ID, settings.STORAGE_SECRET_ACCESS_KEY]):
            try:
                self.client = boto3.client(
                    "s3",
                    endpoint_url=settings.STORAGE_ENDPOINT,
                    aws_access_key_id=settings.STORAGE_ACCESS_KEY_ID,
                    aws_secret_access_key=settings.STORAGE_SECRET_ACCESS_KEY,
                )
                logger.info("ObjectStorage S3 client initialized successfully")
            except (BotoCoreError, ValueError) as e:
                logger.error(f"Failed to create S3 client: {e}")
                logger.warning("Object storage falls back to the local upload directory")
        else:
            missing = [
                name for name, value in (
                    ("STORAGE_ENDPOINT", settings.STORAGE_ENDPOINT),
                    ("STORAGE_ACCESS_KEY_ID", settings.STORAGE_ACCESS_KEY_ID),
                    ("STORAGE_SECRET_ACCESS_KEY", settings.STORAGE_SECRET_ACCESS_KEY),
                ) if not value
            ]
            logger.warning(f"Object storage not configured - missing: {', '.join(missing)}; using local uploads")

    def _local_path(self, key: str) -> Path:
        """Path for ``key`` under the upload directory; keys escaping it are rejected"""
        root = self.local_root.resolve()
        local_path = (self.local_root / key).resolve()
        if not local_path.is_relative_to(root) or local_path == root:
            raise StorageError(f"Key {key!r} resolves outside the upload directory")
        return local_path

    @property
    def proxy_prefix(self) -> str:
        return f"{self.base_url}{settings.API_V1_STR}/media/"

    def upload_bytes(self, key: str, body: bytes, content_type: str) -> None:
        """Store ``body`` under ``key``; never overwrites an existing local file"""
        if not self.client:
            local_path = self._local_path(key)
            local_path.parent.mkdir(parents=True, exist_ok=True)
            try:
                with open(local_path, "xb") as out_file:
                    out_file.write(body)
            except OSError as e:
                raise StorageError(f"Failed to save file locally: {e}") from e
            logger.info(f"Saved upload locally at {local_path}")
            return

        logger.info(f"Uploading {len(body)} bytes to bucket '{self.bucket}' with key '{key}'")
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentType=content_type or "application/octet-stream",
                CacheControl="max-age=3600",
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Failed to upload {key}: {e}") from e

    def get_public_url(self, key: str) -> str:
        """Public URL for a stored key; the media proxy URL when no public bucket URL is configured"""
        if self.client and self.public_url:
            return f"{self.public_url}/{key}"
        return f"{self.proxy_prefix}{key}"

    def key_from_url(self, url: str) -> Optional[str]:
        if not url:
            return None
        if self.public_url and url.startswith(f"{self.public_url}/"):
            return url[len(self.public_url) + 1:]
        if url.startswith(self.proxy_prefix):
            return url[len(self.proxy_prefix):]
        logger.error(f"URL {url} doesn't match any expected URL pattern")
        return None

    def read_object(self, key: str) -> Optional[tuple]:
        """Return ``(body, content_type)`` for a stored key, or None when it does not exist"""
        if not self.client:
            try:
                local_path = self._local_path(key)
            except StorageError:
                return None
            if not local_path.is_file():
                return None
            return local_path.read_bytes(), None

        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                return None
            raise StorageError(f"Failed to read {key}: {e}") from e
        return response["Body"].read(), response.get("ContentType")

    def delete_object(self, key: str) -> None:
        if not self.client:
            local_path = self._local_path(key)
            if local_path.is_file():
                os.remove(local_path)
            return

        logger.info(f"Deleting object '{key}' from bucket '{self.bucket}'")
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Failed to delete {key}: {e}") from e


_storage: Optional[ObjectStorage] = None


def get_storage() -> ObjectStorage:
    """FastAPI dependency returning the app-wide storage instance"""
    global _storage
    if _storage is None:
        _storage = ObjectStorage()
    return _storage

import logging
import os
import re
import secrets
import time
from typing import Optional, Tuple

from fastapi import UploadFile

from app.core.config import settings
from app.core.errors import bad_request, internal_error, not_found
from app.core.storage import ObjectStorage, StorageError

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = "jpg"
UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_-]")
UNSAFE_EXTENSION_CHARS = re.compile(r"[^a-z0-9]")

def validate_image(content_type: Optional[str], size: int) -> None:
    """Reject files over the size limit or outside the image type allow-list"""
    if size > settings.MAX_UPLOAD_SIZE:
        raise bad_request("file_too_large", size_mb=f"{size / 1024 / 1024:.2f}")
    if content_type not in settings.ALLOWED_IMAGE_TYPES:
        raise bad_request("unsupported_image_type")

async def read_image(image: UploadFile) -> bytes:
    """
    Read a validated upload. A declared size is checked before anything is read,
    and at most one byte past the limit is ever held in memory.
    """
    if image.size is not None:
        validate_image(image.content_type, image.size)
    body = await image.read(settings.MAX_UPLOAD_SIZE + 1)
    validate_image(image.content_type, len(body))
    return body

def build_object_key(owner_external_id: str, filename: Optional[str]) -> str:
    """``<owner>/<epoch-ms>-<random>.<ext>``, unique per upload and namespaced by owner"""
    extension = os.path.splitext(filename or "")[1].lstrip(".").lower()
    extension = UNSAFE_EXTENSION_CHARS.sub("", extension) or DEFAULT_EXTENSION
    # uids may carry path separators or dots; the prefix must stay one path segment
    owner_prefix = UNSAFE_KEY_CHARS.sub("_", owner_external_id) or "_"
    unique_name = f"{int(time.time() * 1000)}-{secrets.token_hex(4)}.{extension}"
    return f"{owner_prefix}/{unique_name}"

class MediaService:
    def __init__(self, storage: ObjectStorage):
        self.storage = storage

    def upload_image(self, owner_external_id: str, filename: Optional[str], body: bytes, content_type: str) -> Tuple[str, str]:
        """Store an already validated image; returns (object key, public URL)"""
        key = build_object_key(owner_external_id, filename)
        try:
            self.storage.upload_bytes(key, body, content_type)
        except StorageError as e:
            logger.error(f"Error uploading image: {e}")
            raise internal_error("image_upload_failed")

        url = self.storage.get_public_url(key)
        if not url:
            self.discard(key)
            raise internal_error("image_url_failed")
        return key, url

    def discard(self, key: Optional[str]) -> bool:
        """Best-effort delete; failures are logged and reported as False"""
        if not key:
            return False
        try:
            self.storage.delete_object(key)
            return True
        except StorageError as e:
            logger.warning(f"Failed to clean up object {key}: {e}")
            return False

    def discard_url(self, url: Optional[str]) -> bool:
        return self.discard(self.storage.key_from_url(url))

    def get_media(self, path: str) -> Tuple[bytes, str]:
        """Read a stored object for the media proxy route"""
        try:
            found = self.storage.read_object(path)
        except StorageError as e:
            logger.error(f"Failed to retrieve file {path}: {e}")
            raise internal_error()
        if found is None:
            raise not_found("media_not_found")

        content, content_type = found
        return content, content_type or _guess_content_type(path)

def _guess_content_type(path: str) -> str:
    lowered = path.lower()
    if lowered.endswith((".jpg", ".jpeg")):
        return "image/jpeg"
    elif lowered.endswith(".png"):
        return "image/png"
    elif lowered.endswith(".gif"):
        return "image/gif"
    elif lowered.endswith(".webp"):
        return "image/webp"
    return "application/octet-stream"

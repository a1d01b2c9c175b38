"""Image storage on S3 for destination photos, review images and avatars."""

import logging
from abc import ABC, abstractmethod
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError
from pydantic import Base64Bytes, BaseModel

from core.config import Config
from core.errors import ErrorCode, UpstreamError, ValidationError
from core.models.common import ImageRef, new_id

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}
MAX_IMAGE_BYTES = 5 * 1024 * 1024


class ImageUpload(BaseModel):
    """An image as sent in a JSON body: base64 data plus its content type."""

    data: Base64Bytes
    content_type: str
    caption: str = ""


def check_upload(upload: ImageUpload) -> None:
    if upload.content_type not in ALLOWED_CONTENT_TYPES:
        raise ValidationError(f"Unsupported image type: {upload.content_type}")
    if not upload.data:
        raise ValidationError("Image is empty")
    if len(upload.data) > MAX_IMAGE_BYTES:
        raise ValidationError("Image exceeds the 5 MB limit")


class ImageStore(ABC):
    @abstractmethod
    def upload(self, upload: ImageUpload, folder: str) -> ImageRef: ...

    @abstractmethod
    def delete(self, public_id: str) -> None: ...


class S3ImageStore(ImageStore):
    def __init__(self, config: Config, client: Any) -> None:
        self._bucket = config.images_bucket
        self._base_url = config.images_base_url.rstrip("/")
        self._client = client

    def upload(self, upload: ImageUpload, folder: str) -> ImageRef:
        check_upload(upload)
        key = f"traveltrack/{folder}/{new_id()}.{ALLOWED_CONTENT_TYPES[upload.content_type]}"
        try:
            self._client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=upload.data,
                ContentType=upload.content_type,
            )
        except (BotoCoreError, ClientError) as e:
            raise UpstreamError(f"Image upload failed: {e}", code=ErrorCode.IMAGE_UPLOAD_FAILED) from e
        return ImageRef(public_id=key, url=f"{self._base_url}/{key}", caption=upload.caption)

    def delete(self, public_id: str) -> None:
        try:
            self._client.delete_object(Bucket=self._bucket, Key=public_id)
        except (BotoCoreError, ClientError) as e:
            raise UpstreamError(f"Image delete failed: {e}", code=ErrorCode.IMAGE_UPLOAD_FAILED) from e


def discard_images(store: ImageStore, images: list[ImageRef]) -> None:
    """Best-effort removal of stored images; failures are logged and skipped."""
    seen: set[str] = set()
    for image in images:
        if not image.public_id or image.public_id in seen:
            continue
        seen.add(image.public_id)
        try:
            store.delete(image.public_id)
        except UpstreamError:
            logger.warning("Could not delete image %s", image.public_id, exc_info=True)

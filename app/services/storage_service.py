"""
Image storage on Amazon S3
"""
import hashlib
import io
import logging
import mimetypes
from pathlib import Path
from typing import Iterable, List, Optional
from urllib.parse import unquote, urlparse

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError
from slugify import slugify

from app.core.config import settings
from app.core.exceptions import InvalidArgument

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}


def _hash_bytes(data: bytes, n: int = 16) -> str:
    return hashlib.sha256(data).hexdigest()[:n]


def safe_filename(filename: str, data: bytes) -> str:
    """Slugified stem plus a content hash, so re-uploads of the same bytes share a key"""
    path = Path(filename or "image")
    stem = slugify(path.stem) or "image"
    ext = (path.suffix or "").lower()
    return f"{stem}-{_hash_bytes(data)}{ext}"


def detect_content_type(filename: str, fallback: str = "application/octet-stream") -> str:
    ctype, _ = mimetypes.guess_type(filename)
    return ctype or fallback


def upload_folder(restaurant_id: Optional[str] = None, user_id: Optional[str] = None,
                  location_id: Optional[str] = None) -> str:
    """Storage folder for an upload, chosen from the owning entity"""
    root = settings.IMAGE_ROOT_FOLDER
    if restaurant_id:
        return f"{root}/restaurants/{restaurant_id}"
    if user_id:
        return f"{root}/users/{user_id}"
    if location_id:
        return f"{root}/locations/{location_id}"
    return root


class StorageService:
    """Uploads and deletes images in the configured S3 bucket"""

    def __init__(self, bucket: Optional[str] = None, client=None):
        self.bucket = bucket or settings.S3_BUCKET_NAME
        self._client = client

    @property
    def s3(self):
        if self._client is None:
            self._client = boto3.client(
                "s3",
                region_name=settings.AWS_REGION,
                config=Config(s3={"addressing_style": "virtual"}),
            )
        return self._client

    def public_url(self, key: str) -> str:
        return f"https://{self.bucket}.s3.amazonaws.com/{key}"

    def key_from_url(self, url: str) -> Optional[str]:
        """Object key of one of our public URLs; bare keys are passed through"""
        if not url:
            return None
        parsed = urlparse(url)
        if not parsed.scheme:
            return url.lstrip("/")
        host = parsed.netloc
        path = unquote(parsed.path.lstrip("/"))
        if host.startswith(f"{self.bucket}."):
            return path or None
        # path-style URL: s3.<region>.amazonaws.com/<bucket>/<key>
        prefix = f"{self.bucket}/"
        if path.startswith(prefix):
            return path[len(prefix):] or None
        logger.warning(f"URL does not belong to bucket {self.bucket}: {url}")
        return None

    def upload_image(self, filename: str, data: bytes, folder: str,
                     content_type: Optional[str] = None) -> str:
        """Store one image and return its public URL"""
        if not data:
            raise InvalidArgument("No file uploaded")
        content_type = content_type or detect_content_type(filename)
        if content_type not in ALLOWED_IMAGE_TYPES:
            raise InvalidArgument("Only image files are allowed (jpg, png, gif, webp)")

        key = f"{folder.rstrip('/')}/{safe_filename(filename, data)}"
        self.s3.upload_fileobj(
            Fileobj=io.BytesIO(data),
            Bucket=self.bucket,
            Key=key,
            ExtraArgs={"ContentType": content_type},
        )
        url = self.public_url(key)
        logger.info(f"Image uploaded successfully: {url}")
        return url

    def upload_images(self, files: Iterable[tuple], folder: str) -> List[str]:
        """Upload (filename, data, content_type) triples in order"""
        return [self.upload_image(name, data, folder, ctype) for name, data, ctype in files]

    def delete_image(self, url: str) -> bool:
        key = self.key_from_url(url)
        if not key:
            return False
        try:
            self.s3.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error deleting image {key}: {e}")
            return False
        logger.info(f"Deleted image: {key}")
        return True

    def delete_images(self, urls: Iterable[str]) -> int:
        return sum(1 for url in urls if self.delete_image(url))

    def delete_folder(self, folder: str) -> int:
        """Delete every object under a folder prefix; returns how many were removed"""
        prefix = f"{folder.rstrip('/')}/"
        removed = 0
        try:
            paginator = self.s3.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
                keys = [{"Key": obj["Key"]} for obj in page.get("Contents", [])]
                if not keys:
                    continue
                self.s3.delete_objects(Bucket=self.bucket, Delete={"Objects": keys, "Quiet": True})
                removed += len(keys)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error deleting folder {prefix}: {e}")
            return removed
        logger.info(f"Deleted {removed} object(s) under {prefix}")
        return removed


storage_service = StorageService()

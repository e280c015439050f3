"""JSON blob storage backends for raw uploaded data files.

Provides a storage abstraction with two backends:
- LocalBlobStorage: Writes files on local disk
- S3BlobStorage: Uploads to S3/R2-compatible object storage

Original uploads can be far larger than a single database round-trip allows,
so they are stored here and only the returned URL is kept relationally.

The factory function `get_blob_storage()` selects the backend based on config.
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any

import aioboto3
import pytz

from db.config import settings

logger = logging.getLogger(__name__)


def serialize_json(data: Any) -> bytes:
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def tinder_blob_pathname(profile_id: str, upload_date: datetime | None = None) -> str:
    """Blob key for a Tinder export: ``tinder-data/{profile_id}/{YYYY-MM-DD}/data.json``."""
    upload_date = upload_date or datetime.now(pytz.UTC)
    return f"tinder-data/{profile_id}/{upload_date.strftime('%Y-%m-%d')}/data.json"


class BlobStorage(ABC):
    """Abstract base class for JSON blob storage."""

    @abstractmethod
    async def upload_json(self, pathname: str, data: Any) -> str:
        """Store a JSON document.

        Args:
            pathname: Slash-separated key of the blob
            data: JSON-serializable document

        Returns:
            Public URL of the stored blob
        """


class LocalBlobStorage(BlobStorage):
    """Writes JSON blobs under a local directory."""

    def __init__(self, root: str | Path | None = None, public_base_url: str | None = None):
        self.root = Path(root or settings.blob_local_dir)
        self.root.mkdir(parents=True, exist_ok=True)
        self.public_base_url = public_base_url or settings.blob_public_base_url

    async def upload_json(self, pathname: str, data: Any) -> str:
        content = serialize_json(data)
        file_path = self.root / pathname
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_bytes(content)
        logger.info("Stored blob %s locally (%d bytes)", pathname, len(content))
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{pathname}"
        return file_path.resolve().as_uri()


class S3BlobStorage(BlobStorage):
    """Uploads JSON blobs to S3/R2-compatible object storage."""

    def __init__(self):
        if not all(
            [
                settings.s3_endpoint_url,
                settings.s3_access_key_id,
                settings.s3_secret_access_key,
                settings.s3_bucket_name,
            ]
        ):
            raise ValueError(
                "S3 storage requires s3_endpoint_url, s3_access_key_id, "
                "s3_secret_access_key, and s3_bucket_name to be configured."
            )

    def _get_s3_client(self):
        session = aioboto3.Session()
        return session.client(
            "s3",
            endpoint_url=settings.s3_endpoint_url,
            aws_access_key_id=settings.s3_access_key_id,
            aws_secret_access_key=settings.s3_secret_access_key,
            region_name=settings.s3_region,
        )

    def _public_url(self, pathname: str) -> str:
        if settings.blob_public_base_url:
            return f"{settings.blob_public_base_url.rstrip('/')}/{pathname}"
        return f"{settings.s3_endpoint_url.rstrip('/')}/{settings.s3_bucket_name}/{pathname}"

    async def upload_json(self, pathname: str, data: Any) -> str:
        content = serialize_json(data)
        async with self._get_s3_client() as s3:
            await s3.put_object(
                Bucket=settings.s3_bucket_name,
                Key=pathname,
                Body=content,
                ContentType="application/json",
            )
        logger.info("Stored blob %s to S3 (%d bytes)", pathname, len(content))
        return self._public_url(pathname)


_storage_instance: BlobStorage | None = None


def get_blob_storage() -> BlobStorage:
    """Get the configured blob storage backend (singleton)."""
    global _storage_instance
    if _storage_instance is None:
        if settings.blob_storage_backend == "s3":
            _storage_instance = S3BlobStorage()
        else:
            _storage_instance = LocalBlobStorage()
    return _storage_instance

"""MinIO storage for source files and generated audio overviews."""
import io
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import BinaryIO, Optional

from minio import Minio
from minio.error import S3Error

from legal_insights.config import get_settings
from legal_insights.services.errors import StorageError

logger = logging.getLogger(__name__)


@dataclass
class SignedUrl:
    url: str
    expires_at: datetime


def source_object_name(notebook_id, source_id, filename: str) -> str:
    return f"{notebook_id}/{source_id}/{filename}"


class StorageService:
    """Service for managing file storage with MinIO."""

    def __init__(self):
        settings = get_settings()
        self.client = Minio(
            settings.minio_endpoint,
            access_key=settings.minio_access_key,
            secret_key=settings.minio_secret_key,
            secure=settings.minio_secure,
        )
        self.sources_bucket = settings.minio_sources_bucket
        self.audio_bucket = settings.minio_audio_bucket
        self.url_lifetime = timedelta(seconds=settings.signed_url_expire_seconds)
        for bucket in (self.sources_bucket, self.audio_bucket):
            self._ensure_bucket(bucket)

    def _ensure_bucket(self, bucket: str):
        """Create bucket if it doesnt exist."""
        try:
            if not self.client.bucket_exists(bucket):
                self.client.make_bucket(bucket)
                logger.info(f"Created bucket: {bucket}")
        except S3Error as e:
            logger.error(f"Failed to ensure bucket {bucket}: {e}")
            raise StorageError(f"Storage bucket unavailable: {bucket}") from e

    def upload_file(
        self,
        bucket: str,
        file_data: BinaryIO,
        object_name: str,
        content_type: str = "application/octet-stream",
    ) -> int:
        """Upload a file and return its size in bytes."""
        file_bytes = file_data.read()
        file_size = len(file_bytes)
        try:
            self.client.put_object(
                bucket,
                object_name,
                io.BytesIO(file_bytes),
                length=file_size,
                content_type=content_type,
            )
        except S3Error as e:
            logger.error(f"Failed to upload {object_name}: {e}")
            raise StorageError("Failed to upload file") from e
        logger.info(f"Uploaded file: {bucket}/{object_name} ({file_size} bytes)")
        return file_size

    def delete_file(self, bucket: str, object_name: str) -> None:
        """Delete a file. Missing objects count as deleted, any other failure raises."""
        try:
            self.client.remove_object(bucket, object_name)
        except S3Error as e:
            if e.code == "NoSuchKey":
                return
            logger.error(f"Failed to delete {bucket}/{object_name}: {e}")
            raise StorageError(f"Failed to delete stored file {object_name}") from e
        logger.info(f"Deleted file: {bucket}/{object_name}")

    def get_signed_url(
        self,
        bucket: str,
        object_name: str,
        lifetime: Optional[timedelta] = None,
    ) -> SignedUrl:
        """Time-limited download URL together with the moment it stops working."""
        lifetime = lifetime or self.url_lifetime
        issued_at = datetime.now(timezone.utc)
        try:
            url = self.client.presigned_get_object(bucket, object_name, expires=lifetime)
        except S3Error as e:
            logger.error(f"Failed to sign URL for {bucket}/{object_name}: {e}")
            raise StorageError("Failed to generate signed URL") from e
        return SignedUrl(url=url, expires_at=issued_at + lifetime)

    def is_available(self) -> bool:
        try:
            self.client.bucket_exists(self.sources_bucket)
            return True
        except Exception as e:
            logger.warning(f"Storage health check failed: {e}")
            return False


# Singleton instance
_storage_service: Optional[StorageService] = None


def get_storage_service() -> StorageService:
    """Get the storage service singleton."""
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService()
    return _storage_service


def get_reachable_storage() -> Optional[StorageService]:
    """Storage for health checks, or None when the service cannot even be set up."""
    try:
        return get_storage_service()
    except Exception as e:
        logger.warning(f"Storage unavailable: {e}")
        return None

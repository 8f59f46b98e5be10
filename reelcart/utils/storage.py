"""
Object storage gateway for catalog assets (thumbnails, videos) on S3.

- Uploads are staged on local disk, pushed with put_object, then the staged
  file is removed
- Public URLs are unsigned and derived from bucket + region + key
- Deletes raise on failure; handlers use safe_delete_url() so that storage
  cleanup never aborts a database mutation
- Blocking boto3 calls run on a thread pool
"""

import os
import uuid
import asyncio
import boto3
from botocore.config import Config as BotocoreConfig
from fastapi import UploadFile
from typing import Optional
from pathlib import Path
import logging
from concurrent.futures import ThreadPoolExecutor

from ..config import settings

logger = logging.getLogger(__name__)

# Thread pool for blocking I/O operations
UPLOAD_EXECUTOR = ThreadPoolExecutor(max_workers=10, thread_name_prefix="upload_worker")

CHUNK_SIZE = 1024 * 1024


class StorageNotConfigured(RuntimeError):
    pass


class StorageService:
    """S3 storage gateway with async wrappers"""

    def __init__(
        self,
        bucket: Optional[str] = None,
        region: Optional[str] = None,
        staging_dir: Optional[str] = None,
        client=None,
    ):
        self.bucket = bucket if bucket is not None else settings.AWS_BUCKET_NAME
        self.region = region or settings.AWS_REGION
        self.staging_dir = staging_dir or settings.upload_dir_path
        self._client = client

    @property
    def client(self):
        """boto3 S3 client, created on first use"""
        if self._client is None:
            boto_config = BotocoreConfig(
                signature_version='s3v4',
                retries={
                    'max_attempts': 3,
                    'mode': 'adaptive'
                },
                max_pool_connections=50,
                connect_timeout=10,
                read_timeout=300,
            )
            self._client = boto3.client(
                's3',
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                region_name=self.region,
                config=boto_config,
            )
            logger.info(f"✅ S3 client initialized for bucket {self.bucket} ({self.region})")
        return self._client

    # ==================== URLS & KEYS ====================

    @property
    def public_base_url(self) -> str:
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com"

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/{key}"

    def key_from_url(self, file_url: Optional[str]) -> Optional[str]:
        """Object key for one of our public URLs, None for anything else"""
        if not file_url or not self.bucket:
            return None
        prefix = f"{self.public_base_url}/"
        if not file_url.startswith(prefix):
            return None
        key = file_url[len(prefix):].split('?')[0]
        return key or None

    def _generate_unique_filename(self, original_filename: Optional[str]) -> str:
        ext = Path(original_filename or "").suffix.lower()
        return f"{uuid.uuid4()}{ext}"

    # ==================== STAGING ====================

    async def stage(self, file: UploadFile) -> str:
        """Write the incoming upload to the staging directory, return its path"""
        os.makedirs(self.staging_dir, exist_ok=True)
        staged_path = os.path.join(self.staging_dir, self._generate_unique_filename(file.filename))

        await file.seek(0)
        with open(staged_path, "wb") as fh:
            while True:
                chunk = await file.read(CHUNK_SIZE)
                if not chunk:
                    break
                fh.write(chunk)

        return staged_path

    # ==================== UPLOAD ====================

    async def upload(self, file: UploadFile, folder: str) -> str:
        """
        Upload a file under folder/ and return its public URL.
        The staged copy is removed whether or not the upload succeeds.
        """
        if not self.bucket:
            raise StorageNotConfigured("S3 bucket is not configured")

        staged_path = await self.stage(file)
        key = f"{folder}/{os.path.basename(staged_path)}"
        content_type = file.content_type or 'application/octet-stream'

        def _upload():
            with open(staged_path, "rb") as body:
                self.client.put_object(
                    Bucket=self.bucket,
                    Key=key,
                    Body=body,
                    ContentType=content_type,
                    CacheControl='max-age=31536000',
                )

        loop = asyncio.get_event_loop()
        try:
            await loop.run_in_executor(UPLOAD_EXECUTOR, _upload)
        except Exception as e:
            logger.error(f"❌ S3 upload failed for {key}: {e}")
            raise
        finally:
            try:
                os.remove(staged_path)
            except FileNotFoundError:
                pass

        logger.info(f"✅ Uploaded to S3: {key}")
        return self.public_url(key)

    # ==================== DELETE ====================

    async def delete(self, key: str) -> None:
        """Remove an object from the bucket; errors propagate"""
        if not self.bucket:
            raise StorageNotConfigured("S3 bucket is not configured")

        def _delete():
            self.client.delete_object(Bucket=self.bucket, Key=key)

        loop = asyncio.get_event_loop()
        await loop.run_in_executor(UPLOAD_EXECUTOR, _delete)
        logger.info(f"✅ Deleted from S3: {key}")

    async def safe_delete_url(self, file_url: Optional[str]) -> bool:
        """Best-effort cleanup: failures are logged, never raised"""
        key = self.key_from_url(file_url)
        if not key:
            logger.debug(f"Skipping delete for non-bucket URL: {file_url}")
            return False

        try:
            await self.delete(key)
            return True
        except Exception as e:
            logger.error(f"❌ Failed to delete {key} from S3: {e}")
            return False

    def get_upload_stats(self) -> dict:
        return {
            's3_enabled': bool(self.bucket),
            'bucket': self.bucket,
            'region': self.region,
            'max_workers': UPLOAD_EXECUTOR._max_workers,
        }


# Singleton instance
storage_service = StorageService()


def get_storage() -> StorageService:
    """FastAPI dependency; tests override it with an in-memory double"""
    return storage_service


def cleanup_storage_service():
    """Cleanup thread pool on shutdown"""
    UPLOAD_EXECUTOR.shutdown(wait=True)
    logger.info("✅ Storage service thread pool cleaned up")

"""
MinIO Blob Store.

S3-совместимое хранилище. Клиент minio синхронный, поэтому каждый
вызов выполняется в отдельном потоке.
"""

import asyncio
import logging
from datetime import timedelta
from io import BytesIO
from typing import Optional

from minio import Minio
from minio.error import S3Error
from urllib3.exceptions import HTTPError

from editorial.domain.ports.blob_store import IBlobStore
from editorial.shared.exceptions.infrastructure_exceptions import BlobNotFoundError, BlobStoreError

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = ("NoSuchKey", "NoSuchObject", "NotFound")

# Сеть и пул соединений urllib3 под клиентом minio
_TRANSPORT_ERRORS = (HTTPError, OSError)


class MinioBlobStore(IBlobStore):
    """Адаптер хранилища поверх одного бакета MinIO."""

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        bucket: str,
        secure: bool = False,
        client: Optional[Minio] = None
    ):
        self.bucket = bucket
        self._client = client or Minio(
            endpoint=endpoint,
            access_key=access_key,
            secret_key=secret_key,
            secure=secure,
        )
        logger.info(f"[BlobStore] MinIO client initialized (endpoint={endpoint}, bucket={bucket})")

    async def ensure_bucket(self) -> None:
        """Создать бакет, если его нет."""
        def _ensure():
            if not self._client.bucket_exists(self.bucket):
                self._client.make_bucket(self.bucket)

        try:
            await asyncio.to_thread(_ensure)
        except S3Error as e:
            raise BlobStoreError(f"Cannot ensure bucket {self.bucket}: {e}") from e
        except _TRANSPORT_ERRORS as e:
            raise BlobStoreError(f"MinIO unreachable while ensuring bucket {self.bucket}: {e}") from e

    async def write(self, data: bytes, path: str, content_type: str = "application/octet-stream") -> str:
        try:
            await asyncio.to_thread(
                self._client.put_object,
                bucket_name=self.bucket,
                object_name=path,
                data=BytesIO(data),
                length=len(data),
                content_type=content_type,
            )
        except S3Error as e:
            raise BlobStoreError(f"Upload failed for {path}: {e}") from e
        except _TRANSPORT_ERRORS as e:
            raise BlobStoreError(f"MinIO unreachable while uploading {path}: {e}") from e
        logger.info(f"[BlobStore] Uploaded {self.bucket}/{path} ({len(data)} bytes)")
        return path

    async def read(self, path: str) -> bytes:
        def _read() -> bytes:
            response = None
            try:
                response = self._client.get_object(self.bucket, path)
                return response.read()
            finally:
                if response:
                    response.close()
                    response.release_conn()

        try:
            return await asyncio.to_thread(_read)
        except S3Error as e:
            if e.code in _NOT_FOUND_CODES:
                raise BlobNotFoundError(f"Blob not found: {path}") from e
            raise BlobStoreError(f"Download failed for {path}: {e}") from e
        except _TRANSPORT_ERRORS as e:
            raise BlobStoreError(f"MinIO unreachable while downloading {path}: {e}") from e

    async def signed_url(self, path: str, expires_in: int, mode: str = "read") -> str:
        expires = timedelta(seconds=int(expires_in))
        try:
            if mode == "read":
                return await asyncio.to_thread(
                    self._client.presigned_get_object, self.bucket, path, expires=expires
                )
            if mode == "write":
                return await asyncio.to_thread(
                    self._client.presigned_put_object, self.bucket, path, expires=expires
                )
        except S3Error as e:
            raise BlobStoreError(f"Cannot sign URL for {path}: {e}") from e
        except _TRANSPORT_ERRORS as e:
            raise BlobStoreError(f"MinIO unreachable while signing {path}: {e}") from e
        raise BlobStoreError(f"Unsupported signed URL mode: {mode}")

    async def delete(self, path: str) -> bool:
        def _delete() -> bool:
            try:
                self._client.stat_object(self.bucket, path)
            except S3Error as e:
                if e.code in _NOT_FOUND_CODES:
                    return False
                raise
            self._client.remove_object(self.bucket, path)
            return True

        try:
            deleted = await asyncio.to_thread(_delete)
        except S3Error as e:
            raise BlobStoreError(f"Delete failed for {path}: {e}") from e
        except _TRANSPORT_ERRORS as e:
            raise BlobStoreError(f"MinIO unreachable while deleting {path}: {e}") from e
        if deleted:
            logger.info(f"[BlobStore] Deleted {self.bucket}/{path}")
        return deleted

"""
Local Blob Store.

Файлы хранятся в каталоге на диске, ссылки подписываются HMAC-SHA256.
Подходит для локального запуска и тестов.
"""

import asyncio
import hashlib
import hmac
import logging
import os
import time
from pathlib import Path
from typing import Optional
from urllib.parse import urlencode

import aiofiles

from editorial.domain.ports.blob_store import IBlobStore
from editorial.shared.exceptions.infrastructure_exceptions import BlobNotFoundError, BlobStoreError

logger = logging.getLogger(__name__)


class LocalBlobStore(IBlobStore):
    """
    Хранилище на локальной файловой системе.

    Аргументы:
        root: Корневой каталог
        base_url: Базовый URL для выдачи ссылок
        signing_secret: Секрет для подписи ссылок
    """

    def __init__(self, root: str, base_url: str, signing_secret: str):
        self.root = Path(root).resolve()
        self.base_url = base_url.rstrip("/")
        self._secret = signing_secret.encode("utf-8")

    def _resolve(self, path: str) -> Path:
        target = (self.root / path.lstrip("/")).resolve()
        if target != self.root and self.root not in target.parents:
            raise BlobStoreError(f"Path escapes storage root: {path}")
        return target

    async def write(self, data: bytes, path: str, content_type: str = "application/octet-stream") -> str:
        target = self._resolve(path)
        await asyncio.to_thread(target.parent.mkdir, parents=True, exist_ok=True)
        async with aiofiles.open(target, "wb") as f:
            await f.write(data)
        logger.info(f"[BlobStore] Stored {path} ({len(data)} bytes, {content_type})")
        return path

    async def read(self, path: str) -> bytes:
        target = self._resolve(path)
        if not target.is_file():
            raise BlobNotFoundError(f"Blob not found: {path}")
        async with aiofiles.open(target, "rb") as f:
            return await f.read()

    async def signed_url(self, path: str, expires_in: int, mode: str = "read") -> str:
        if mode not in ("read", "write"):
            raise BlobStoreError(f"Unsupported signed URL mode: {mode}")
        expires = int(time.time()) + int(expires_in)
        query = urlencode({"mode": mode, "expires": expires, "signature": self._sign(path, mode, expires)})
        return f"{self.base_url}/{path.lstrip('/')}?{query}"

    def verify(self, path: str, mode: str, expires: int, signature: str, now: Optional[float] = None) -> bool:
        """Проверить подпись и срок действия ссылки."""
        if (now if now is not None else time.time()) > expires:
            return False
        return hmac.compare_digest(self._sign(path, mode, expires), signature)

    async def delete(self, path: str) -> bool:
        target = self._resolve(path)
        try:
            await asyncio.to_thread(os.remove, target)
        except FileNotFoundError:
            return False
        logger.info(f"[BlobStore] Deleted {path}")
        return True

    def _sign(self, path: str, mode: str, expires: int) -> str:
        message = f"{path.lstrip('/')}:{mode}:{expires}".encode("utf-8")
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()

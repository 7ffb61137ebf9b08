"""
Загрузка содержимого вложений.

Скачивание идёт параллельно с ограничением (asyncio.Semaphore).
Неудачная загрузка пропускается с предупреждением.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import aiohttp

from editorial.domain.entities.attachment import Attachment
from editorial.domain.ports.blob_store import IBlobStore
from editorial.shared.exceptions.infrastructure_exceptions import BlobStoreError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadedAttachment:
    """Вложение и его байты."""

    attachment: Attachment
    data: bytes


class AttachmentLoader:
    """
    Аргументы:
        blob_store: Хранилище вложений
        concurrency: Максимум одновременных загрузок
        http_timeout: Таймаут загрузки по public_url (сек)
    """

    def __init__(self, blob_store: IBlobStore, concurrency: int = 4, http_timeout: float = 30.0):
        self.blob_store = blob_store
        self.concurrency = max(1, concurrency)
        self.http_timeout = http_timeout

    async def load_all(self, attachments: Sequence[Attachment]) -> List[LoadedAttachment]:
        """Загрузить все вложения; порядок результата совпадает с порядком входа."""
        if not attachments:
            return []

        semaphore = asyncio.Semaphore(self.concurrency)
        timeout = aiohttp.ClientTimeout(total=self.http_timeout)

        async with aiohttp.ClientSession(timeout=timeout) as http:
            async def _guarded(att: Attachment) -> Optional[LoadedAttachment]:
                async with semaphore:
                    return await self._load_one(att, http)

            results = await asyncio.gather(*(_guarded(att) for att in attachments))

        loaded = [r for r in results if r is not None]
        logger.info(f"[Similarity] Loaded {len(loaded)}/{len(attachments)} attachments")
        return loaded

    async def _load_one(self, attachment: Attachment, http: aiohttp.ClientSession) -> Optional[LoadedAttachment]:
        try:
            if attachment.storage_path:
                data = await self.blob_store.read(attachment.storage_path)
            else:
                async with http.get(attachment.public_url) as resp:
                    resp.raise_for_status()
                    data = await resp.read()
        except (BlobStoreError, aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.warning(f"[Similarity] Failed to download attachment {attachment.id}: {e}")
            return None
        return LoadedAttachment(attachment=attachment, data=data)

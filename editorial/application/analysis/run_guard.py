"""
Один запуск анализа на статью.

Аренда в хранилище ключ-значение с TTL: если процесс упал, не освободив
аренду, она истечёт сама.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator
from uuid import UUID, uuid4

from editorial.domain.ports.key_value_store import IKeyValueStore
from editorial.shared.exceptions.domain_exceptions import ConflictError

logger = logging.getLogger(__name__)


def lease_key(article_id: UUID) -> str:
    return f"analysis:run:{article_id}"


class AnalysisRunGuard:
    """Аренды запусков анализа по статьям."""

    def __init__(self, store: IKeyValueStore):
        self.store = store

    @asynccontextmanager
    async def hold(self, article_id: UUID, ttl_seconds: float) -> AsyncIterator[str]:
        """
        Захватить аренду на время блока.

        Raises:
            ConflictError: Для статьи уже идёт анализ
        """
        key = lease_key(article_id)
        token = uuid4().hex
        if not await self.store.set_if_absent(key, token, ttl_seconds=ttl_seconds):
            raise ConflictError(f"Analysis for article {article_id} is already running")

        logger.debug(f"[Analysis] Lease {key} acquired")
        try:
            yield token
        finally:
            released = await self.store.compare_and_delete(key, token)
            if not released:
                logger.warning(f"[Analysis] Lease {key} expired before release")

    async def is_running(self, article_id: UUID) -> bool:
        return await self.store.get(lease_key(article_id)) is not None

# -*- coding: utf-8 -*-
"""
In-Memory Key-Value Store с TTL.

Хранит записи в словаре процесса. Время берётся из внедряемых часов,
поэтому истечение записей проверяется в тестах без ожидания.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from editorial.domain.ports.key_value_store import IKeyValueStore

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    """Запись хранилища."""
    value: str
    expires_at: Optional[float] = None  # None - бессрочно

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class InMemoryKeyValueStore(IKeyValueStore):
    """
    Хранилище ключ-значение в памяти процесса.

    Использование:
        store = InMemoryKeyValueStore()

        # Аренда на 10 минут
        if await store.set_if_absent("analysis:run:42", token, ttl_seconds=600):
            try:
                ...
            finally:
                await store.compare_and_delete("analysis:run:42", token)
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """
        Args:
            clock: Источник времени в секундах (по умолчанию time.monotonic)
        """
        self._clock = clock
        self._entries: Dict[str, _Entry] = {}
        self._lock = asyncio.Lock()

    def _expires_at(self, ttl_seconds: Optional[float]) -> Optional[float]:
        if ttl_seconds is None:
            return None
        return self._clock() + ttl_seconds

    def _live(self, key: str) -> Optional[_Entry]:
        """Живая запись; истёкшая удаляется."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._entries[key]
            logger.debug(f"[KV] Expired {key}")
            return None
        return entry

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            entry = self._live(key)
            return entry.value if entry else None

    async def set(self, key: str, value: str, ttl_seconds: Optional[float] = None) -> None:
        async with self._lock:
            self._entries[key] = _Entry(value=value, expires_at=self._expires_at(ttl_seconds))

    async def set_if_absent(self, key: str, value: str, ttl_seconds: Optional[float] = None) -> bool:
        async with self._lock:
            if self._live(key) is not None:
                return False
            self._entries[key] = _Entry(value=value, expires_at=self._expires_at(ttl_seconds))
            return True

    async def delete(self, key: str) -> bool:
        async with self._lock:
            return self._entries.pop(key, None) is not None

    async def compare_and_delete(self, key: str, expected: str) -> bool:
        async with self._lock:
            entry = self._live(key)
            if entry is None or entry.value != expected:
                return False
            del self._entries[key]
            return True

    def purge_expired(self) -> int:
        """Удалить все истёкшие записи. Возвращает количество удалённых."""
        now = self._clock()
        expired = [k for k, e in self._entries.items() if e.is_expired(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.info(f"[KV] Purged {len(expired)} expired entries")
        return len(expired)

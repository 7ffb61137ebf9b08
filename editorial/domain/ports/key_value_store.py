"""
Порт: IKeyValueStore

Ключ-значение с временем жизни записей. Используется для блокировок
(аренд) на время длительных операций.
"""

from abc import ABC, abstractmethod
from typing import Optional


class IKeyValueStore(ABC):
    """Интерфейс хранилища ключ-значение с TTL."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: Optional[float] = None) -> None:
        pass

    @abstractmethod
    async def set_if_absent(self, key: str, value: str, ttl_seconds: Optional[float] = None) -> bool:
        """
        Атомарно записать значение, если ключа нет (или он истёк).

        Returns:
            True если значение записано
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        pass

    @abstractmethod
    async def compare_and_delete(self, key: str, expected: str) -> bool:
        """Удалить ключ, только если его значение равно expected."""
        pass

"""
Порт: IBlobStore

Файловое хранилище вложений и отчётов с выдачей подписанных ссылок.
"""

from abc import ABC, abstractmethod


class IBlobStore(ABC):
    """Интерфейс хранилища файлов."""

    @abstractmethod
    async def write(self, data: bytes, path: str, content_type: str = "application/octet-stream") -> str:
        """
        Записать объект.

        Args:
            data: Содержимое
            path: Ключ объекта
            content_type: MIME тип

        Returns:
            Ключ записанного объекта
        """
        pass

    @abstractmethod
    async def read(self, path: str) -> bytes:
        """
        Прочитать объект.

        Raises:
            BlobNotFoundError: Объект не найден
        """
        pass

    @abstractmethod
    async def signed_url(self, path: str, expires_in: int, mode: str = "read") -> str:
        """
        Выдать ограниченную по времени ссылку.

        Args:
            path: Ключ объекта
            expires_in: Срок действия в секундах
            mode: "read" или "write"
        """
        pass

    @abstractmethod
    async def delete(self, path: str) -> bool:
        """Удалить объект. False, если объекта не было."""
        pass

"""
Repository Interface: IAttachmentRepository
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from editorial.domain.entities.attachment import Attachment


class IAttachmentRepository(ABC):
    """Интерфейс репозитория вложений."""

    @abstractmethod
    async def add(self, attachment: Attachment) -> Attachment:
        pass

    @abstractmethod
    async def get(self, attachment_id: UUID) -> Optional[Attachment]:
        pass

    @abstractmethod
    async def list_for_article(self, article_id: UUID) -> List[Attachment]:
        """Вложения статьи в порядке загрузки."""
        pass

    @abstractmethod
    async def exists_by_storage_path(self, storage_path: str) -> bool:
        pass

    @abstractmethod
    async def delete(self, attachment_id: UUID) -> bool:
        pass

"""
Repository Interface: IArticleRepository

Порт (интерфейс) для работы с хранилищем статей.
Реализации (адаптеры) находятся в infrastructure layer.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from editorial.domain.entities.article import Article
from editorial.domain.value_objects.article_status import ArticleStatus


class IArticleRepository(ABC):
    """
    Интерфейс репозитория статей.

    Следует Repository Pattern и является портом в Hexagonal Architecture.
    Репозиторий не фиксирует транзакцию сам: это делает IUnitOfWork.
    """

    @abstractmethod
    async def add(self, article: Article) -> Article:
        """
        Добавить новую статью.

        Args:
            article: Статья для сохранения

        Returns:
            Сохранённая статья
        """
        pass

    @abstractmethod
    async def get(self, article_id: UUID) -> Optional[Article]:
        """
        Найти статью по ID.

        Args:
            article_id: UUID статьи

        Returns:
            Статья или None
        """
        pass

    @abstractmethod
    async def list(
        self,
        status: Optional[ArticleStatus] = None,
        author_id: Optional[UUID] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[Article]:
        """
        Получить список статей с фильтрацией (новые сверху).

        Args:
            status: Фильтр по статусу
            author_id: Фильтр по автору
            limit: Лимит записей
            offset: Смещение

        Returns:
            Список статей
        """
        pass

    @abstractmethod
    async def transition(
        self,
        article_id: UUID,
        expected: ArticleStatus,
        target: ArticleStatus,
        changes: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Условно сменить статус: только если текущий статус равен expected.

        Args:
            article_id: UUID статьи
            expected: Статус, прочитанный при проверке прав
            target: Новый статус
            changes: Дополнительные поля (body, metadata, price, is_free, published_at)

        Raises:
            ConflictError: Статус изменился с момента чтения
        """
        pass

    @abstractmethod
    async def update_fields(
        self,
        article_id: UUID,
        expected_statuses: Iterable[ArticleStatus],
        changes: Dict[str, Any]
    ) -> None:
        """
        Обновить поля без смены статуса, если статус входит в expected_statuses.

        Raises:
            ConflictError: Статус изменился с момента чтения
        """
        pass

    @abstractmethod
    async def delete(self, article_id: UUID) -> bool:
        """
        Удалить статью.

        Args:
            article_id: UUID статьи

        Returns:
            True если удалена
        """
        pass

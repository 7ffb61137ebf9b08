# -*- coding: utf-8 -*-
"""
SQLAlchemy Repository реализация для статей.

Смена статуса выполняется условным UPDATE ... WHERE status = :expected,
поэтому параллельные команды над одной статьёй не перетирают друг друга.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from editorial.domain.entities.article import Article
from editorial.domain.repositories.article_repository import IArticleRepository
from editorial.domain.value_objects.article_status import ArticleStatus
from editorial.infrastructure.persistence.models import ArticleModel
from editorial.shared.exceptions.domain_exceptions import ConflictError

# Поля сущности, которые команды могут менять вместе со статусом
_MUTABLE_FIELDS = {
    "title": "title",
    "body": "body",
    "summary": "summary",
    "tags": "tags",
    "metadata": "article_metadata",
    "price": "price",
    "is_free": "is_free",
    "published_at": "published_at",
}


class ArticleRepositoryImpl(IArticleRepository):
    """
    Реализация repository для SQLAlchemy.

    Адаптер в Hexagonal Architecture.
    Преобразует доменные сущности Article в SQLAlchemy модели и обратно.
    Не фиксирует транзакцию: это делает unit of work.
    """

    def __init__(self, session: AsyncSession):
        """
        Инициализация репозитория.

        Аргументы:
            session: Асинхронная сессия SQLAlchemy
        """
        self.session = session

    async def add(self, article: Article) -> Article:
        """Добавить статью."""
        self.session.add(self._to_model(article))
        await self.session.flush()
        return article

    async def get(self, article_id: UUID) -> Optional[Article]:
        """Найти статью по ID (всегда свежие данные из БД)."""
        result = await self.session.execute(
            select(ArticleModel)
            .where(ArticleModel.id == article_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def list(
        self,
        status: Optional[ArticleStatus] = None,
        author_id: Optional[UUID] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[Article]:
        """Получить список статей с фильтрацией."""
        query = select(ArticleModel)

        if status:
            query = query.where(ArticleModel.status == status.value)
        if author_id:
            query = query.where(ArticleModel.author_id == author_id)

        query = query.order_by(ArticleModel.created_at.desc()).limit(limit).offset(offset)

        result = await self.session.execute(query)
        return [self._to_entity(m) for m in result.scalars().all()]

    async def transition(
        self,
        article_id: UUID,
        expected: ArticleStatus,
        target: ArticleStatus,
        changes: Optional[Dict[str, Any]] = None
    ) -> None:
        """Условная смена статуса."""
        values = self._to_columns(changes or {})
        values["status"] = target.value
        values["updated_at"] = datetime.utcnow()

        result = await self.session.execute(
            update(ArticleModel)
            .where(ArticleModel.id == article_id, ArticleModel.status == expected.value)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise ConflictError(
                f"Article {article_id} is no longer in status '{expected.value}'"
            )

    async def update_fields(
        self,
        article_id: UUID,
        expected_statuses: Iterable[ArticleStatus],
        changes: Dict[str, Any]
    ) -> None:
        """Условное обновление полей без смены статуса."""
        statuses = [s.value for s in expected_statuses]
        values = self._to_columns(changes)
        values["updated_at"] = datetime.utcnow()

        result = await self.session.execute(
            update(ArticleModel)
            .where(ArticleModel.id == article_id, ArticleModel.status.in_(statuses))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise ConflictError(f"Article {article_id} changed status, reload and retry")

    async def delete(self, article_id: UUID) -> bool:
        """Удалить статью по ID."""
        result = await self.session.execute(
            delete(ArticleModel).where(ArticleModel.id == article_id)
        )
        return result.rowcount > 0

    # =========================================================================
    # Маппинг
    # =========================================================================

    @staticmethod
    def _to_columns(changes: Dict[str, Any]) -> Dict[str, Any]:
        unknown = set(changes) - set(_MUTABLE_FIELDS)
        if unknown:
            raise ValueError(f"Unsupported article fields: {sorted(unknown)}")
        return {_MUTABLE_FIELDS[key]: value for key, value in changes.items()}

    @staticmethod
    def _to_model(article: Article) -> ArticleModel:
        """Конвертировать entity → model."""
        return ArticleModel(
            id=article.id,
            author_id=article.author_id,
            title=article.title,
            body=article.body,
            summary=article.summary,
            category_id=article.category_id,
            tags=list(article.tags or []),
            status=article.status.value,
            price=article.price,
            is_free=article.is_free,
            created_at=article.created_at,
            updated_at=article.updated_at,
            published_at=article.published_at,
            article_metadata=dict(article.metadata or {}),
        )

    @staticmethod
    def _to_entity(model: ArticleModel) -> Article:
        """Конвертировать model → entity."""
        return Article(
            id=model.id,
            author_id=model.author_id,
            title=model.title,
            body=model.body or "",
            summary=model.summary or "",
            category_id=model.category_id,
            tags=list(model.tags or []),
            status=ArticleStatus(model.status),
            price=model.price,
            is_free=bool(model.is_free),
            created_at=model.created_at,
            updated_at=model.updated_at,
            published_at=model.published_at,
            metadata=dict(model.article_metadata or {}),
        )

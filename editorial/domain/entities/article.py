# -*- coding: utf-8 -*-
"""
Доменная сущность: Статья (Article)

Работа автора, проходящая редакционный процесс:
draft -> submitted -> under_review -> (changes_requested) -> approved -> published
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List
from uuid import UUID, uuid4

from editorial.domain.value_objects.article_status import ArticleStatus
from editorial.shared.exceptions.domain_exceptions import DomainValidationError


@dataclass
class Article:
    """
    Доменная сущность статьи.

    Инварианты:
    - Статья всегда имеет уникальный ID и автора
    - Заголовок не может быть пустым (max 500 символов)
    - Цена не может быть отрицательной
    """

    # =========================================================================
    # Идентификация
    # =========================================================================
    id: UUID = field(default_factory=uuid4)
    author_id: Optional[UUID] = None

    # =========================================================================
    # Основные атрибуты
    # =========================================================================
    title: str = field(default="")
    body: str = field(default="")
    summary: str = field(default="")
    category_id: Optional[UUID] = None
    tags: List[str] = field(default_factory=list)

    # =========================================================================
    # Статус и публикация
    # =========================================================================
    status: ArticleStatus = ArticleStatus.DRAFT
    price: Optional[float] = None
    is_free: bool = False

    # =========================================================================
    # Временные метки
    # =========================================================================
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)
    published_at: Optional[datetime] = None

    # =========================================================================
    # JSON метаданные
    # =========================================================================
    metadata: dict = field(default_factory=dict)

    def __post_init__(self):
        """Валидация инвариантов после инициализации."""
        self.validate()

    def validate(self) -> None:
        """
        Проверка инвариантов сущности.

        Исключения:
            DomainValidationError: Если инварианты нарушены
        """
        if not self.title or len(self.title.strip()) == 0:
            raise DomainValidationError("Article title cannot be empty")

        if len(self.title) > 500:
            raise DomainValidationError("Article title too long (max 500 chars)")

        if self.author_id is None:
            raise DomainValidationError("Article must have an author")

        if self.price is not None and self.price < 0:
            raise DomainValidationError("Article price cannot be negative")

    # =========================================================================
    # Бизнес-логика
    # =========================================================================

    def is_owned_by(self, user_id: UUID) -> bool:
        """Является ли пользователь автором статьи."""
        return self.author_id == user_id

    def is_editable(self) -> bool:
        """Может ли автор править статью в текущем статусе."""
        return self.status.is_editable_by_author()

    def merged_metadata(self, patch: dict) -> dict:
        """
        Поверхностное слияние метаданных (аналог JSON_MERGE_PATCH).

        Ключи со значением None удаляются, вложенные словари сливаются.
        """
        merged = dict(self.metadata or {})
        for key, value in (patch or {}).items():
            if value is None:
                merged.pop(key, None)
            elif isinstance(value, dict) and isinstance(merged.get(key), dict):
                nested = dict(merged[key])
                nested.update(value)
                merged[key] = nested
            else:
                merged[key] = value
        return merged

    def excerpt(self, length: int = 200) -> str:
        """Короткий фрагмент текста для списков."""
        return (self.summary or self.body or "")[:length]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Article):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"Article(id={self.id}, title='{self.title[:50]}...', status={self.status.value})"

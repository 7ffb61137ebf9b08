"""
CQRS Commands: статьи и вложения.

Команды иммутабельны (frozen=True).
"""

from dataclasses import dataclass
from typing import List, Optional
from uuid import UUID

from editorial.domain.value_objects.actor import Actor


@dataclass(frozen=True)
class CreateArticleCommand:
    """Команда создания статьи (статус draft)."""

    # Required
    actor: Actor
    title: str

    # Optional
    body: str = ""
    summary: str = ""
    category_id: Optional[UUID] = None
    tags: List[str] = None
    metadata: dict = None

    def __post_init__(self):
        """Установка значений по умолчанию для изменяемых типов."""
        if self.tags is None:
            object.__setattr__(self, 'tags', [])
        if self.metadata is None:
            object.__setattr__(self, 'metadata', {})


@dataclass(frozen=True)
class DeleteArticleCommand:
    actor: Actor
    article_id: UUID


@dataclass(frozen=True)
class RegisterAttachmentCommand:
    """Регистрация уже загруженного в хранилище файла."""

    actor: Actor
    article_id: UUID
    filename: str
    storage_path: Optional[str] = None
    public_url: Optional[str] = None
    mime_type: str = "application/octet-stream"
    size_bytes: int = 0


@dataclass(frozen=True)
class RemoveAttachmentCommand:
    actor: Actor
    article_id: UUID
    attachment_id: UUID

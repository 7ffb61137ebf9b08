"""
Pydantic schemas для API: статьи, журнал, вложения.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from editorial.domain.entities.article import Article
from editorial.domain.entities.attachment import Attachment
from editorial.domain.entities.workflow_event import WorkflowEvent


class CreateArticleRequest(BaseModel):
    """Запрос на создание статьи."""

    title: str = Field(..., min_length=1, max_length=500)
    body: str = ""
    summary: str = ""
    category_id: Optional[UUID] = None
    tags: List[str] = []
    metadata: dict = {}


class ArticleResponse(BaseModel):
    """Ответ со статьёй."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    author_id: Optional[UUID]
    title: str
    body: str
    summary: str
    category_id: Optional[UUID]
    tags: List[str]
    status: str
    price: Optional[float]
    is_free: bool
    metadata: dict
    created_at: datetime
    updated_at: datetime
    published_at: Optional[datetime]

    @classmethod
    def from_entity(cls, entity: Article) -> "ArticleResponse":
        """Создать из entity."""
        return cls(
            id=entity.id,
            author_id=entity.author_id,
            title=entity.title,
            body=entity.body,
            summary=entity.summary,
            category_id=entity.category_id,
            tags=entity.tags,
            status=entity.status.value,
            price=entity.price,
            is_free=entity.is_free,
            metadata=entity.metadata,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            published_at=entity.published_at,
        )


class WorkflowEventResponse(BaseModel):
    id: Optional[int]
    article_id: UUID
    actor_id: UUID
    from_status: str
    to_status: str
    note: str
    created_at: datetime

    @classmethod
    def from_entity(cls, entity: WorkflowEvent) -> "WorkflowEventResponse":
        return cls(
            id=entity.id,
            article_id=entity.article_id,
            actor_id=entity.actor_id,
            from_status=entity.from_status.value,
            to_status=entity.to_status.value,
            note=entity.note,
            created_at=entity.created_at,
        )


class RegisterAttachmentRequest(BaseModel):
    """Вложение уже загружено в хранилище (или доступно по URL)."""

    filename: str = Field(..., min_length=1, max_length=255)
    storage_path: Optional[str] = None
    public_url: Optional[str] = None
    mime_type: str = "application/octet-stream"
    size_bytes: int = Field(default=0, ge=0)


class AttachmentResponse(BaseModel):
    id: UUID
    article_id: UUID
    filename: str
    storage_path: Optional[str]
    public_url: Optional[str]
    mime_type: str
    size_bytes: int
    created_at: datetime

    @classmethod
    def from_entity(cls, entity: Attachment) -> "AttachmentResponse":
        return cls(
            id=entity.id,
            article_id=entity.article_id,
            filename=entity.filename,
            storage_path=entity.storage_path,
            public_url=entity.public_url,
            mime_type=entity.mime_type,
            size_bytes=entity.size_bytes,
            created_at=entity.created_at,
        )

"""
SQLAlchemy Repository реализация вложений.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from editorial.domain.entities.attachment import Attachment
from editorial.domain.repositories.attachment_repository import IAttachmentRepository
from editorial.infrastructure.persistence.models import AttachmentModel


class AttachmentRepositoryImpl(IAttachmentRepository):
    """Вложения поверх таблицы attachments."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, attachment: Attachment) -> Attachment:
        self.session.add(
            AttachmentModel(
                id=attachment.id,
                article_id=attachment.article_id,
                filename=attachment.filename,
                storage_path=attachment.storage_path,
                public_url=attachment.public_url,
                mime_type=attachment.mime_type,
                size_bytes=attachment.size_bytes,
                uploaded_by=attachment.uploaded_by,
                created_at=attachment.created_at,
            )
        )
        await self.session.flush()
        return attachment

    async def get(self, attachment_id: UUID) -> Optional[Attachment]:
        model = await self.session.get(AttachmentModel, attachment_id)
        return self._to_entity(model) if model else None

    async def list_for_article(self, article_id: UUID) -> List[Attachment]:
        result = await self.session.execute(
            select(AttachmentModel)
            .where(AttachmentModel.article_id == article_id)
            .order_by(AttachmentModel.created_at.asc())
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    async def exists_by_storage_path(self, storage_path: str) -> bool:
        result = await self.session.execute(
            select(func.count(AttachmentModel.id)).where(AttachmentModel.storage_path == storage_path)
        )
        return result.scalar() > 0

    async def delete(self, attachment_id: UUID) -> bool:
        result = await self.session.execute(
            delete(AttachmentModel).where(AttachmentModel.id == attachment_id)
        )
        return result.rowcount > 0

    @staticmethod
    def _to_entity(model: AttachmentModel) -> Attachment:
        return Attachment(
            id=model.id,
            article_id=model.article_id,
            filename=model.filename,
            storage_path=model.storage_path,
            public_url=model.public_url,
            mime_type=model.mime_type or "application/octet-stream",
            size_bytes=model.size_bytes or 0,
            uploaded_by=model.uploaded_by,
            created_at=model.created_at,
        )

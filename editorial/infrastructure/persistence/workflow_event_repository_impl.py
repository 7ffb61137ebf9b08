"""
SQLAlchemy Repository реализация журнала переходов.
"""

from typing import List
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from editorial.domain.entities.workflow_event import WorkflowEvent
from editorial.domain.repositories.workflow_event_repository import IWorkflowEventRepository
from editorial.domain.value_objects.article_status import ArticleStatus
from editorial.infrastructure.persistence.models import WorkflowEventModel


class WorkflowEventRepositoryImpl(IWorkflowEventRepository):
    """Журнал переходов поверх таблицы workflow_events."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def append(self, event: WorkflowEvent) -> WorkflowEvent:
        model = WorkflowEventModel(
            article_id=event.article_id,
            actor_id=event.actor_id,
            from_status=event.from_status.value,
            to_status=event.to_status.value,
            note=event.note or "",
            created_at=event.created_at,
        )
        self.session.add(model)
        await self.session.flush()
        return self._to_entity(model)

    async def list_for_article(self, article_id: UUID) -> List[WorkflowEvent]:
        result = await self.session.execute(
            select(WorkflowEventModel)
            .where(WorkflowEventModel.article_id == article_id)
            .order_by(WorkflowEventModel.created_at.asc(), WorkflowEventModel.id.asc())
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    async def delete_for_article(self, article_id: UUID) -> int:
        result = await self.session.execute(
            delete(WorkflowEventModel).where(WorkflowEventModel.article_id == article_id)
        )
        return result.rowcount

    @staticmethod
    def _to_entity(model: WorkflowEventModel) -> WorkflowEvent:
        return WorkflowEvent(
            id=model.id,
            article_id=model.article_id,
            actor_id=model.actor_id,
            from_status=ArticleStatus(model.from_status),
            to_status=ArticleStatus(model.to_status),
            note=model.note or "",
            created_at=model.created_at,
        )

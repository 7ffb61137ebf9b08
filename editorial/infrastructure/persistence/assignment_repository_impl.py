"""
SQLAlchemy Repository реализация назначений.
"""

from dataclasses import replace
from datetime import datetime
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from editorial.domain.entities.assignment import Assignment
from editorial.domain.repositories.assignment_repository import IAssignmentRepository
from editorial.domain.value_objects.assignment_status import AssignmentKind, AssignmentStatus
from editorial.infrastructure.persistence.models import AssignmentModel
from editorial.shared.exceptions.domain_exceptions import ConflictError

_ACTIVE = [s.value for s in AssignmentStatus.active_statuses()]


class AssignmentRepositoryImpl(IAssignmentRepository):
    """Назначения поверх таблицы assignments."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, assignment: Assignment) -> Assignment:
        self.session.add(self._to_model(assignment))
        await self.session.flush()
        return assignment

    async def get(self, assignment_id: UUID) -> Optional[Assignment]:
        result = await self.session.execute(
            select(AssignmentModel)
            .where(AssignmentModel.id == assignment_id)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def list_for_article(
        self,
        article_id: UUID,
        kind: Optional[AssignmentKind] = None,
        active_only: bool = False
    ) -> List[Assignment]:
        query = select(AssignmentModel).where(AssignmentModel.article_id == article_id)
        if kind:
            query = query.where(AssignmentModel.kind == kind.value)
        if active_only:
            query = query.where(AssignmentModel.status.in_(_ACTIVE))
        query = query.order_by(AssignmentModel.assigned_at.desc()).execution_options(
            populate_existing=True
        )

        result = await self.session.execute(query)
        return [self._to_entity(m) for m in result.scalars().all()]

    async def cancel_active(
        self,
        article_id: UUID,
        kind: Optional[AssignmentKind] = None
    ) -> List[Assignment]:
        active = await self.list_for_article(article_id, kind=kind, active_only=True)
        if not active:
            return []

        now = datetime.utcnow()
        await self.session.execute(
            update(AssignmentModel)
            .where(
                AssignmentModel.id.in_([a.id for a in active]),
                AssignmentModel.status.in_(_ACTIVE),
            )
            .values(status=AssignmentStatus.CANCELLED.value, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        return [replace(a, status=AssignmentStatus.CANCELLED, updated_at=now) for a in active]

    async def update_status(
        self,
        assignment_id: UUID,
        expected: Iterable[AssignmentStatus],
        new_status: AssignmentStatus
    ) -> None:
        result = await self.session.execute(
            update(AssignmentModel)
            .where(
                AssignmentModel.id == assignment_id,
                AssignmentModel.status.in_([s.value for s in expected]),
            )
            .values(status=new_status.value, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise ConflictError(f"Assignment {assignment_id} changed status, reload and retry")

    async def delete_for_article(self, article_id: UUID) -> int:
        result = await self.session.execute(
            delete(AssignmentModel).where(AssignmentModel.article_id == article_id)
        )
        return result.rowcount

    @staticmethod
    def _to_model(assignment: Assignment) -> AssignmentModel:
        return AssignmentModel(
            id=assignment.id,
            article_id=assignment.article_id,
            assignee_id=assignment.assignee_id,
            assigned_by=assignment.assigned_by,
            kind=assignment.kind.value,
            status=assignment.status.value,
            due_date=assignment.due_date,
            assigned_at=assignment.assigned_at,
            updated_at=assignment.updated_at,
        )

    @staticmethod
    def _to_entity(model: AssignmentModel) -> Assignment:
        return Assignment(
            id=model.id,
            article_id=model.article_id,
            assignee_id=model.assignee_id,
            assigned_by=model.assigned_by,
            kind=AssignmentKind(model.kind),
            status=AssignmentStatus(model.status),
            due_date=model.due_date,
            assigned_at=model.assigned_at,
            updated_at=model.updated_at,
        )

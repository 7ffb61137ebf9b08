"""
SQLAlchemy Unit of Work.

Одна AsyncSession на единицу работы; все репозитории пишут в неё,
commit() фиксирует изменения разом.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from editorial.domain.repositories.unit_of_work import IUnitOfWork
from editorial.infrastructure.persistence.article_repository_impl import ArticleRepositoryImpl
from editorial.infrastructure.persistence.assignment_repository_impl import AssignmentRepositoryImpl
from editorial.infrastructure.persistence.attachment_repository_impl import AttachmentRepositoryImpl
from editorial.infrastructure.persistence.category_repository_impl import CategoryRepositoryImpl
from editorial.infrastructure.persistence.report_repository_impl import SimilarityReportRepositoryImpl
from editorial.infrastructure.persistence.workflow_event_repository_impl import WorkflowEventRepositoryImpl
from editorial.shared.exceptions.infrastructure_exceptions import DatabaseError

logger = logging.getLogger(__name__)


class SqlAlchemyUnitOfWork(IUnitOfWork):
    """
    Unit of Work поверх async_sessionmaker.

    Использование:
        uow = SqlAlchemyUnitOfWork(session_factory)
        async with uow:
            ...
            await uow.commit()
    """

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory
        self.session: AsyncSession = None

    async def __aenter__(self) -> "SqlAlchemyUnitOfWork":
        self.session = self._session_factory()
        self.articles = ArticleRepositoryImpl(self.session)
        self.events = WorkflowEventRepositoryImpl(self.session)
        self.assignments = AssignmentRepositoryImpl(self.session)
        self.attachments = AttachmentRepositoryImpl(self.session)
        self.reports = SimilarityReportRepositoryImpl(self.session)
        self.categories = CategoryRepositoryImpl(self.session)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        try:
            await self.rollback()
        finally:
            await self.session.close()

    async def commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            logger.error(f"[UoW] Commit failed: {e}")
            await self.session.rollback()
            raise DatabaseError(f"Commit failed: {e}") from e

    async def rollback(self) -> None:
        await self.session.rollback()

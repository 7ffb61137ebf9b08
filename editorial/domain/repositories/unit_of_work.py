"""
Порт: IUnitOfWork

Группирует репозитории в одну транзакцию. Смена статуса, запись в журнал
и изменения назначений фиксируются вместе или откатываются вместе.

Использование:
    async with uow_factory() as uow:
        article = await uow.articles.get(article_id)
        await uow.articles.transition(article.id, expected, target)
        await uow.events.append(event)
        await uow.commit()
"""

from abc import ABC, abstractmethod

from editorial.domain.repositories.article_repository import IArticleRepository
from editorial.domain.repositories.assignment_repository import IAssignmentRepository
from editorial.domain.repositories.attachment_repository import IAttachmentRepository
from editorial.domain.repositories.category_repository import ICategoryRepository
from editorial.domain.repositories.report_repository import ISimilarityReportRepository
from editorial.domain.repositories.workflow_event_repository import IWorkflowEventRepository


class IUnitOfWork(ABC):
    """Единица работы над хранилищем документов."""

    articles: IArticleRepository
    events: IWorkflowEventRepository
    assignments: IAssignmentRepository
    attachments: IAttachmentRepository
    reports: ISimilarityReportRepository
    categories: ICategoryRepository

    async def __aenter__(self) -> "IUnitOfWork":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        # Без явного commit() изменения откатываются
        await self.rollback()

    @abstractmethod
    async def commit(self) -> None:
        pass

    @abstractmethod
    async def rollback(self) -> None:
        pass

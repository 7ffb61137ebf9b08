"""
Query Handler: чтение статей и связанных записей.

Опубликованные статьи видны всем; остальные - автору, привилегированным
ролям и исполнителям активных назначений.
"""

from typing import Callable, List, Optional

from editorial.application.queries.article_queries import (
    GetArticleQuery,
    GetLatestReportQuery,
    ListArticlesQuery,
    ListAssignmentsQuery,
    ListAttachmentsQuery,
    ListWorkflowEventsQuery,
)
from editorial.domain.entities.article import Article
from editorial.domain.entities.assignment import Assignment
from editorial.domain.entities.attachment import Attachment
from editorial.domain.entities.similarity_report import SimilarityReport
from editorial.domain.entities.workflow_event import WorkflowEvent
from editorial.domain.repositories.unit_of_work import IUnitOfWork
from editorial.domain.services.access_policy import ensure_read_access
from editorial.domain.value_objects.actor import Actor
from editorial.domain.value_objects.article_status import ArticleStatus
from editorial.shared.exceptions.domain_exceptions import EntityNotFoundError


class ArticleQueryHandler:
    """Handler для запросов."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]):
        self.uow_factory = uow_factory

    async def handle_get_article(self, query: GetArticleQuery) -> Article:
        async with self.uow_factory() as uow:
            return await self._readable(uow, query.actor, query.article_id, allow_published=True)

    async def handle_list_articles(self, query: ListArticlesQuery) -> List[Article]:
        """
        Список статей.

        Непривилегированный участник видит опубликованные статьи и свои.
        """
        author_id = query.author_id
        status = query.status
        actor = query.actor
        if not actor.role.is_privileged and status != ArticleStatus.PUBLISHED:
            author_id = actor.user_id

        async with self.uow_factory() as uow:
            return await uow.articles.list(
                status=status, author_id=author_id, limit=query.limit, offset=query.offset
            )

    async def handle_list_events(self, query: ListWorkflowEventsQuery) -> List[WorkflowEvent]:
        async with self.uow_factory() as uow:
            await self._readable(uow, query.actor, query.article_id)
            return await uow.events.list_for_article(query.article_id)

    async def handle_list_assignments(self, query: ListAssignmentsQuery) -> List[Assignment]:
        async with self.uow_factory() as uow:
            await self._readable(uow, query.actor, query.article_id)
            return await uow.assignments.list_for_article(
                query.article_id, kind=query.kind, active_only=query.active_only
            )

    async def handle_list_attachments(self, query: ListAttachmentsQuery) -> List[Attachment]:
        async with self.uow_factory() as uow:
            await self._readable(uow, query.actor, query.article_id)
            return await uow.attachments.list_for_article(query.article_id)

    async def handle_get_latest_report(self, query: GetLatestReportQuery) -> SimilarityReport:
        async with self.uow_factory() as uow:
            await self._readable(uow, query.actor, query.article_id)
            report = await uow.reports.latest_for_article(query.article_id, query.method)
        if report is None:
            raise EntityNotFoundError(f"No similarity report for article {query.article_id}")
        return report

    @staticmethod
    async def _readable(
        uow: IUnitOfWork,
        actor: Actor,
        article_id,
        allow_published: bool = False
    ) -> Optional[Article]:
        article = await uow.articles.get(article_id)
        if article is None:
            raise EntityNotFoundError(f"Article {article_id} not found")
        if allow_published and article.status == ArticleStatus.PUBLISHED:
            return article
        assignments = await uow.assignments.list_for_article(article_id, active_only=True)
        ensure_read_access(actor, article, assignments)
        return article

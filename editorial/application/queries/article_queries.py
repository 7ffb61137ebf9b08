"""
CQRS Queries: статьи, журнал, назначения, отчёты.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from editorial.domain.value_objects.actor import Actor
from editorial.domain.value_objects.article_status import ArticleStatus
from editorial.domain.value_objects.assignment_status import AssignmentKind
from editorial.domain.value_objects.report_status import SimilarityMethod


@dataclass(frozen=True)
class GetArticleQuery:
    """Запрос статьи по ID."""

    actor: Actor
    article_id: UUID


@dataclass(frozen=True)
class ListArticlesQuery:
    """Запрос списка статей."""

    actor: Actor
    status: Optional[ArticleStatus] = None
    author_id: Optional[UUID] = None
    limit: int = 100
    offset: int = 0


@dataclass(frozen=True)
class ListWorkflowEventsQuery:
    actor: Actor
    article_id: UUID


@dataclass(frozen=True)
class ListAssignmentsQuery:
    actor: Actor
    article_id: UUID
    kind: Optional[AssignmentKind] = None
    active_only: bool = False


@dataclass(frozen=True)
class GetLatestReportQuery:
    actor: Actor
    article_id: UUID
    method: Optional[SimilarityMethod] = None


@dataclass(frozen=True)
class ListAttachmentsQuery:
    actor: Actor
    article_id: UUID

"""
Доменные события редакционного процесса.

Создаются обработчиком команд и передаются диспетчеру уведомлений
только после фиксации транзакции.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID

from editorial.domain.value_objects.article_status import ArticleStatus
from editorial.domain.value_objects.assignment_status import AssignmentKind, AssignmentStatus


@dataclass(frozen=True)
class DomainEvent:
    """Базовое доменное событие."""

    article_id: UUID
    actor_id: UUID
    occurred_at: datetime = field(default_factory=datetime.utcnow, kw_only=True)


@dataclass(frozen=True)
class ArticleStatusChanged(DomainEvent):
    """Статья перешла между статусами."""

    author_id: UUID
    title: str
    from_status: ArticleStatus
    to_status: ArticleStatus
    note: str = ""


@dataclass(frozen=True)
class AssignmentCreated(DomainEvent):
    """Создано назначение редактора / рецензента."""

    assignment_id: UUID
    assignee_id: UUID
    kind: AssignmentKind
    title: str = ""
    due_date: Optional[datetime] = None


@dataclass(frozen=True)
class AssignmentUpdated(DomainEvent):
    """Исполнитель изменил статус назначения."""

    assignment_id: UUID
    assigned_by: UUID
    kind: AssignmentKind
    status: AssignmentStatus
    feedback: str = ""

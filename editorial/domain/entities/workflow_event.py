"""
Доменная сущность: WorkflowEvent

Неизменяемая запись журнала переходов статьи.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID

from editorial.domain.value_objects.article_status import ArticleStatus


@dataclass(frozen=True)
class WorkflowEvent:
    """
    Запись о переходе статьи между статусами.

    Создаётся ровно один раз на каждый легальный переход и больше не меняется.
    Порядок событий статьи задаётся парой (created_at, id).
    """

    article_id: UUID
    actor_id: UUID
    from_status: ArticleStatus
    to_status: ArticleStatus
    note: str = ""
    created_at: datetime = field(default_factory=datetime.utcnow)
    id: Optional[int] = None

    @property
    def is_self_transition(self) -> bool:
        return self.from_status == self.to_status

"""
Repository Interface: IWorkflowEventRepository

Журнал переходов статей (только добавление).
"""

from abc import ABC, abstractmethod
from typing import List
from uuid import UUID

from editorial.domain.entities.workflow_event import WorkflowEvent


class IWorkflowEventRepository(ABC):
    """Интерфейс журнала переходов."""

    @abstractmethod
    async def append(self, event: WorkflowEvent) -> WorkflowEvent:
        """Добавить событие. Возвращает событие с присвоенным id."""
        pass

    @abstractmethod
    async def list_for_article(self, article_id: UUID) -> List[WorkflowEvent]:
        """События статьи в порядке (created_at, id)."""
        pass

    @abstractmethod
    async def delete_for_article(self, article_id: UUID) -> int:
        """Удалить журнал статьи (только вместе со статьёй)."""
        pass

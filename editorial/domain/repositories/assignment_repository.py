"""
Repository Interface: IAssignmentRepository

Назначения редакторов и рецензентов.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional
from uuid import UUID

from editorial.domain.entities.assignment import Assignment
from editorial.domain.value_objects.assignment_status import AssignmentKind, AssignmentStatus


class IAssignmentRepository(ABC):
    """Интерфейс репозитория назначений."""

    @abstractmethod
    async def add(self, assignment: Assignment) -> Assignment:
        """Добавить назначение."""
        pass

    @abstractmethod
    async def get(self, assignment_id: UUID) -> Optional[Assignment]:
        """Найти назначение по ID."""
        pass

    @abstractmethod
    async def list_for_article(
        self,
        article_id: UUID,
        kind: Optional[AssignmentKind] = None,
        active_only: bool = False
    ) -> List[Assignment]:
        """
        Назначения статьи (новые сверху).

        Args:
            article_id: UUID статьи
            kind: Фильтр по типу
            active_only: Только assigned / in_progress
        """
        pass

    @abstractmethod
    async def cancel_active(
        self,
        article_id: UUID,
        kind: Optional[AssignmentKind] = None
    ) -> List[Assignment]:
        """
        Отменить активные назначения статьи (всех типов, если kind не задан).

        Returns:
            Отменённые назначения (со статусом cancelled)
        """
        pass

    @abstractmethod
    async def update_status(
        self,
        assignment_id: UUID,
        expected: Iterable[AssignmentStatus],
        new_status: AssignmentStatus
    ) -> None:
        """
        Условно сменить статус назначения.

        Raises:
            ConflictError: Статус назначения изменился с момента чтения
        """
        pass

    @abstractmethod
    async def delete_for_article(self, article_id: UUID) -> int:
        """Удалить назначения статьи (только вместе со статьёй)."""
        pass

"""
Value Objects: AssignmentKind, AssignmentStatus

Тип и статус назначения редактора / рецензента.
"""

from enum import Enum


class AssignmentKind(str, Enum):
    """Тип назначения."""

    EDITOR = "editor"
    REVIEWER = "reviewer"


class AssignmentStatus(str, Enum):
    """Статусы назначения."""

    ASSIGNED = "assigned"          # Назначено
    IN_PROGRESS = "in_progress"    # В работе
    COMPLETED = "completed"        # Завершено
    CANCELLED = "cancelled"        # Отменено (снятие / переназначение)

    @classmethod
    def active_statuses(cls) -> tuple:
        """Статусы активного назначения."""
        return (cls.ASSIGNED, cls.IN_PROGRESS)

    def is_active(self) -> bool:
        """Назначение ещё не завершено и не отменено."""
        return self in self.active_statuses()

    def can_transition_to(self, new_status: 'AssignmentStatus') -> bool:
        """
        Проверка возможности перехода.

        Правила переходов:
        - ASSIGNED -> IN_PROGRESS, COMPLETED, CANCELLED
        - IN_PROGRESS -> COMPLETED, CANCELLED
        """
        transitions = {
            AssignmentStatus.ASSIGNED: [AssignmentStatus.IN_PROGRESS, AssignmentStatus.COMPLETED, AssignmentStatus.CANCELLED],
            AssignmentStatus.IN_PROGRESS: [AssignmentStatus.COMPLETED, AssignmentStatus.CANCELLED],
        }
        return new_status in transitions.get(self, [])

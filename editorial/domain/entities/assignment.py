"""
Доменная сущность: Assignment

Назначение редактора или рецензента на статью.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from editorial.domain.value_objects.assignment_status import AssignmentKind, AssignmentStatus
from editorial.shared.exceptions.domain_exceptions import DomainValidationError


@dataclass
class Assignment:
    """
    Назначение участника на статью.

    Инварианты:
    - На статью одновременно не больше одного активного назначения каждого типа
      (обеспечивается репозиторием при создании нового назначения)
    - Назначающий и исполнитель заданы
    """

    article_id: UUID
    assignee_id: UUID
    assigned_by: UUID
    kind: AssignmentKind
    status: AssignmentStatus = AssignmentStatus.ASSIGNED
    due_date: Optional[datetime] = None
    id: UUID = field(default_factory=uuid4)
    assigned_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self):
        if self.assignee_id is None:
            raise DomainValidationError("Assignment must have an assignee")
        if self.assigned_by is None:
            raise DomainValidationError("Assignment must have an assigning actor")

    @property
    def is_active(self) -> bool:
        return self.status.is_active()

    def is_held_by(self, user_id: UUID) -> bool:
        """Активно ли назначение на данного пользователя."""
        return self.is_active and self.assignee_id == user_id

"""
Доменная сущность: User

Запись справочника пользователей (профили ведутся вне этого сервиса).
"""

from dataclasses import dataclass, field
from typing import Optional
from uuid import UUID, uuid4

from editorial.domain.value_objects.role import Role


@dataclass
class User:
    """Пользователь платформы."""

    name: str
    role: Role
    email: Optional[str] = None
    is_active: bool = True
    id: UUID = field(default_factory=uuid4)

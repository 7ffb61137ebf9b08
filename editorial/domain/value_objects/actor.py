"""
Value Object: Actor

Аутентифицированный участник, выполняющий команду.
"""

from dataclasses import dataclass
from uuid import UUID

from editorial.domain.value_objects.role import Role


@dataclass(frozen=True)
class Actor:
    """Идентификатор пользователя и его роль."""

    user_id: UUID
    role: Role

    def owns(self, owner_id: UUID) -> bool:
        """Является ли участник владельцем ресурса."""
        return self.user_id == owner_id

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_manager(self) -> bool:
        return self.role.is_manager

"""
Порт: IUserDirectory

Справочник пользователей: поиск по ID и по роли.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from editorial.domain.entities.user import User
from editorial.domain.value_objects.role import Role


class IUserDirectory(ABC):
    """Интерфейс справочника пользователей."""

    @abstractmethod
    async def get_user(self, user_id: UUID) -> Optional[User]:
        pass

    @abstractmethod
    async def list_by_role(self, role: Role, limit: int = 50) -> List[User]:
        """Активные пользователи с ролью (не больше limit)."""
        pass

"""
In-Memory User Directory.

Справочник пользователей в памяти.
"""

from typing import Dict, Iterable, List, Optional
from uuid import UUID

from editorial.domain.entities.user import User
from editorial.domain.ports.user_directory import IUserDirectory
from editorial.domain.value_objects.role import Role


class InMemoryUserDirectory(IUserDirectory):
    """Справочник поверх словаря."""

    def __init__(self, users: Iterable[User] = ()):
        self._users: Dict[UUID, User] = {u.id: u for u in users}

    def add(self, user: User) -> User:
        self._users[user.id] = user
        return user

    async def get_user(self, user_id: UUID) -> Optional[User]:
        return self._users.get(user_id)

    async def list_by_role(self, role: Role, limit: int = 50) -> List[User]:
        matches = [u for u in self._users.values() if u.role == role and u.is_active]
        return matches[:limit]

"""
SQL User Directory.

Справочник пользователей поверх таблицы users.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker

from editorial.domain.entities.user import User
from editorial.domain.ports.user_directory import IUserDirectory
from editorial.domain.value_objects.role import Role
from editorial.infrastructure.persistence.models import UserModel


class SqlUserDirectory(IUserDirectory):
    """Каждый запрос выполняется в собственной короткой сессии."""

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def get_user(self, user_id: UUID) -> Optional[User]:
        async with self._session_factory() as session:
            model = await session.get(UserModel, user_id)
            return self._to_entity(model) if model else None

    async def list_by_role(self, role: Role, limit: int = 50) -> List[User]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(UserModel)
                .where(UserModel.role == role.value, UserModel.is_active.is_(True))
                .order_by(UserModel.name.asc())
                .limit(limit)
            )
            return [self._to_entity(m) for m in result.scalars().all()]

    async def add(self, user: User) -> User:
        async with self._session_factory() as session:
            session.add(
                UserModel(
                    id=user.id,
                    name=user.name,
                    email=user.email,
                    role=user.role.value,
                    is_active=user.is_active,
                )
            )
            await session.commit()
        return user

    @staticmethod
    def _to_entity(model: UserModel) -> User:
        return User(
            id=model.id,
            name=model.name,
            email=model.email,
            role=Role(model.role),
            is_active=bool(model.is_active),
        )

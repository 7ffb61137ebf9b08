"""
SQLAlchemy Repository реализация рубрик.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from editorial.domain.entities.category import Category
from editorial.domain.repositories.category_repository import ICategoryRepository
from editorial.infrastructure.persistence.models import CategoryModel


class CategoryRepositoryImpl(ICategoryRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, category_id: UUID) -> Optional[Category]:
        model = await self.session.get(CategoryModel, category_id)
        if model is None:
            return None
        return Category(id=model.id, name=model.name, is_active=bool(model.is_active))

    async def add(self, category: Category) -> Category:
        self.session.add(
            CategoryModel(id=category.id, name=category.name, is_active=category.is_active)
        )
        await self.session.flush()
        return category

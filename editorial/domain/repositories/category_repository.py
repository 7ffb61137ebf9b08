"""
Repository Interface: ICategoryRepository
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from editorial.domain.entities.category import Category


class ICategoryRepository(ABC):
    """Справочник рубрик (только чтение для редакционного процесса)."""

    @abstractmethod
    async def get(self, category_id: UUID) -> Optional[Category]:
        pass

    @abstractmethod
    async def add(self, category: Category) -> Category:
        pass

"""
Доменная сущность: Category
"""

from dataclasses import dataclass, field
from uuid import UUID, uuid4


@dataclass
class Category:
    """Рубрика статьи."""

    name: str
    is_active: bool = True
    id: UUID = field(default_factory=uuid4)

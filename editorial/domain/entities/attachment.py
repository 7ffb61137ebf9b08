"""
Доменная сущность: Attachment

Файл, приложенный к статье.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from editorial.shared.exceptions.domain_exceptions import DomainValidationError


@dataclass
class Attachment:
    """
    Вложение статьи.

    Инварианты:
    - Должен быть задан storage_path (ключ в хранилище) или public_url
    - Размер не отрицательный
    """

    article_id: UUID
    filename: str
    storage_path: Optional[str] = None
    public_url: Optional[str] = None
    mime_type: str = "application/octet-stream"
    size_bytes: int = 0
    uploaded_by: Optional[UUID] = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if not self.storage_path and not self.public_url:
            raise DomainValidationError("Attachment needs a storage path or a public URL")
        if self.size_bytes < 0:
            raise DomainValidationError("Attachment size cannot be negative")
        if not self.filename:
            self.filename = str(self.id)

    @property
    def display_name(self) -> str:
        return self.filename or str(self.id)

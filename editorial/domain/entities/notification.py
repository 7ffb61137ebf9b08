"""
Доменная сущность: Notification

Сообщение получателю (email + уведомление в приложении).
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID


@dataclass(frozen=True)
class Notification:
    """Уведомление одному получателю."""

    user_id: UUID
    type: str
    title: str
    message: str
    email: Optional[str] = None
    link: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)

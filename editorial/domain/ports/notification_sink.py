"""
Порт: INotificationSink

Доставка уведомлений (email и / или внутри приложения).
"""

from abc import ABC, abstractmethod

from editorial.domain.entities.notification import Notification


class INotificationSink(ABC):
    """Интерфейс доставки уведомлений."""

    @abstractmethod
    async def deliver(self, notification: Notification) -> None:
        """
        Доставить одно уведомление.

        Raises:
            NotificationDeliveryError: Доставка не удалась
        """
        pass

"""
Notification sinks.

- InAppNotificationSink: запись в таблицу notifications
- EmailNotificationSink: письмо через EmailBackend
- CompositeNotificationSink: оба канала; ошибка одного не мешает другому
"""

import logging
from typing import List, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from editorial.domain.entities.notification import Notification
from editorial.domain.ports.notification_sink import INotificationSink
from editorial.infrastructure.notifications.email_backend import EmailBackend
from editorial.infrastructure.persistence.models import NotificationModel
from editorial.shared.exceptions.infrastructure_exceptions import NotificationDeliveryError

logger = logging.getLogger(__name__)


class InAppNotificationSink(INotificationSink):
    """Уведомления внутри приложения (таблица notifications)."""

    def __init__(self, session_factory: async_sessionmaker):
        self._session_factory = session_factory

    async def deliver(self, notification: Notification) -> None:
        try:
            async with self._session_factory() as session:
                session.add(
                    NotificationModel(
                        user_id=notification.user_id,
                        type=notification.type,
                        title=notification.title,
                        message=notification.message,
                        link=notification.link,
                        created_at=notification.created_at,
                    )
                )
                await session.commit()
        except SQLAlchemyError as e:
            raise NotificationDeliveryError(f"In-app notification failed: {e}") from e


class EmailNotificationSink(INotificationSink):
    """Письма получателям с заданным email."""

    def __init__(self, backend: EmailBackend, from_address: str, from_name: str):
        self.backend = backend
        self.from_address = from_address
        self.from_name = from_name

    async def deliver(self, notification: Notification) -> None:
        if not notification.email:
            logger.debug(f"[Notify] No email for user {notification.user_id}, skipping email")
            return

        body = notification.message
        if notification.link:
            body = f"{body}\n\n{notification.link}"

        sent = await self.backend.send_email(
            to=notification.email,
            subject=notification.title,
            text_body=body,
            from_address=self.from_address,
            from_name=self.from_name,
        )
        if not sent:
            raise NotificationDeliveryError(f"Email to {notification.email} was not sent")


class CompositeNotificationSink(INotificationSink):
    """Доставка во все каналы; если хотя бы один упал, ошибка поднимается после всех попыток."""

    def __init__(self, sinks: Sequence[INotificationSink]):
        self.sinks: List[INotificationSink] = list(sinks)

    async def deliver(self, notification: Notification) -> None:
        errors = []
        for sink in self.sinks:
            try:
                await sink.deliver(notification)
            except NotificationDeliveryError as e:
                logger.warning(f"[Notify] {type(sink).__name__} failed for {notification.user_id}: {e}")
                errors.append(str(e))

        if errors:
            raise NotificationDeliveryError("; ".join(errors))


class RecordingNotificationSink(INotificationSink):
    """Запоминает доставленные уведомления (для тестов)."""

    def __init__(self):
        self.delivered: List[Notification] = []

    async def deliver(self, notification: Notification) -> None:
        self.delivered.append(notification)

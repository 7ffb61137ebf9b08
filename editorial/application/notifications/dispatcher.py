# -*- coding: utf-8 -*-
"""
Notification Dispatcher.

Доменные события попадают в очередь только после фиксации транзакции.
Фоновый обработчик разрешает получателей и вызывает канал доставки.
Ошибки доставки логируются и никогда не доходят до вызывающего.
"""

import asyncio
import logging
from typing import Iterable, Optional

from editorial.application.notifications.recipients import RecipientResolver
from editorial.domain.entities.notification import Notification
from editorial.domain.events.workflow_events import DomainEvent
from editorial.domain.ports.notification_sink import INotificationSink
from editorial.shared.exceptions.infrastructure_exceptions import NotificationDeliveryError

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """
    Очередь уведомлений с одним фоновым обработчиком.

    Использование:
        dispatcher = NotificationDispatcher(resolver, sink)
        await dispatcher.start()

        dispatcher.publish(events)    # не блокирует и не бросает исключений
        await dispatcher.drain()      # дождаться обработки (тесты, остановка)

        await dispatcher.stop()

    Доставка "не более одного раза" при max_attempts=1; большее значение
    включает повторы с экспоненциальной задержкой.
    """

    def __init__(
        self,
        resolver: RecipientResolver,
        sink: INotificationSink,
        max_attempts: int = 1,
        queue_size: int = 1000,
        retry_delay: float = 0.5
    ):
        self.resolver = resolver
        self.sink = sink
        self.max_attempts = max(1, max_attempts)
        self.retry_delay = retry_delay
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
        self._worker: Optional[asyncio.Task] = None

        # Статистика
        self.delivered = 0
        self.failed = 0
        self.dropped = 0

    @property
    def is_running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    async def start(self) -> None:
        if self.is_running:
            return
        self._worker = asyncio.create_task(self._run(), name="notification-dispatcher")
        logger.info("[Notify] Dispatcher started")

    async def stop(self) -> None:
        """Обработать очередь и остановить обработчик."""
        if not self.is_running:
            return
        await self.drain()
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
        logger.info(
            f"[Notify] Dispatcher stopped (delivered={self.delivered}, "
            f"failed={self.failed}, dropped={self.dropped})"
        )

    def publish(self, events: Iterable[DomainEvent]) -> None:
        """Поставить события в очередь. Никогда не бросает исключений."""
        for event in events:
            try:
                self._queue.put_nowait(event)
            except asyncio.QueueFull:
                self.dropped += 1
                logger.error(f"[Notify] Queue full, dropped {type(event).__name__} for {event.article_id}")

    async def drain(self) -> None:
        """Дождаться обработки всех событий в очереди."""
        if self.is_running:
            await self._queue.join()

    async def _run(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self._handle(event)
            except Exception as e:
                # Обработчик не должен умирать из-за одного события
                logger.error(f"[Notify] Unexpected error for {type(event).__name__}: {e}", exc_info=True)
            finally:
                self._queue.task_done()

    async def _handle(self, event: DomainEvent) -> None:
        notifications = await self.resolver.resolve(event)
        for notification in notifications:
            await self._deliver(notification)

    async def _deliver(self, notification: Notification) -> None:
        for attempt in range(1, self.max_attempts + 1):
            try:
                await self.sink.deliver(notification)
                self.delivered += 1
                return
            except NotificationDeliveryError as e:
                if attempt >= self.max_attempts:
                    self.failed += 1
                    logger.warning(
                        f"[Notify] Delivery of '{notification.type}' to {notification.user_id} "
                        f"failed after {attempt} attempt(s): {e}"
                    )
                    return
                await asyncio.sleep(self.retry_delay * (2 ** (attempt - 1)))

"""
Тесты диспетчера уведомлений.
"""

from uuid import uuid4

import pytest

from editorial.application.notifications.dispatcher import NotificationDispatcher
from editorial.domain.entities.notification import Notification
from editorial.domain.events.workflow_events import ArticleStatusChanged
from editorial.domain.ports.notification_sink import INotificationSink
from editorial.domain.value_objects.article_status import ArticleStatus
from editorial.shared.exceptions.infrastructure_exceptions import NotificationDeliveryError


# ============================================================================
# Заглушки
# ============================================================================

class StaticResolver:
    """Одно уведомление на событие."""

    def __init__(self, fail: bool = False):
        self.fail = fail

    async def resolve(self, event):
        if self.fail:
            raise RuntimeError("directory is down")
        return [Notification(user_id=event.author_id, type="test", title=event.title, message="")]


class FlakySink(INotificationSink):
    """Падает первые failures раз."""

    def __init__(self, failures: int = 0):
        self.failures = failures
        self.calls = 0
        self.delivered = []

    async def deliver(self, notification):
        self.calls += 1
        if self.calls <= self.failures:
            raise NotificationDeliveryError("smtp unavailable")
        self.delivered.append(notification)


def make_event(title: str = "Story") -> ArticleStatusChanged:
    return ArticleStatusChanged(
        article_id=uuid4(),
        actor_id=uuid4(),
        author_id=uuid4(),
        title=title,
        from_status=ArticleStatus.DRAFT,
        to_status=ArticleStatus.SUBMITTED,
    )


# ============================================================================
# Тесты
# ============================================================================

class TestDispatcher:
    """Фоновая доставка."""

    @pytest.mark.asyncio
    async def test_events_delivered_after_drain(self):
        sink = FlakySink()
        dispatcher = NotificationDispatcher(StaticResolver(), sink)
        await dispatcher.start()

        dispatcher.publish([make_event("One"), make_event("Two")])
        await dispatcher.drain()

        assert [n.title for n in sink.delivered] == ["One", "Two"]
        assert dispatcher.delivered == 2
        await dispatcher.stop()

    @pytest.mark.asyncio
    async def test_failed_delivery_not_retried_by_default(self):
        sink = FlakySink(failures=1)
        dispatcher = NotificationDispatcher(StaticResolver(), sink)
        await dispatcher.start()

        dispatcher.publish([make_event()])
        await dispatcher.drain()

        assert sink.calls == 1
        assert dispatcher.failed == 1
        await dispatcher.stop()

    @pytest.mark.asyncio
    async def test_retries_when_configured(self):
        sink = FlakySink(failures=2)
        dispatcher = NotificationDispatcher(StaticResolver(), sink, max_attempts=3, retry_delay=0)
        await dispatcher.start()

        dispatcher.publish([make_event()])
        await dispatcher.drain()

        assert sink.calls == 3
        assert dispatcher.delivered == 1
        assert dispatcher.failed == 0
        await dispatcher.stop()

    @pytest.mark.asyncio
    async def test_resolver_error_does_not_kill_worker(self):
        sink = FlakySink()
        dispatcher = NotificationDispatcher(StaticResolver(fail=True), sink)
        await dispatcher.start()

        dispatcher.publish([make_event()])
        await dispatcher.drain()
        assert dispatcher.is_running

        dispatcher.resolver = StaticResolver()
        dispatcher.publish([make_event("After")])
        await dispatcher.drain()
        assert [n.title for n in sink.delivered] == ["After"]
        await dispatcher.stop()

    @pytest.mark.asyncio
    async def test_full_queue_drops_without_raising(self):
        dispatcher = NotificationDispatcher(StaticResolver(), FlakySink(), queue_size=1)

        dispatcher.publish([make_event(), make_event(), make_event()])

        assert dispatcher.dropped == 2

    @pytest.mark.asyncio
    async def test_stop_processes_pending_events(self):
        sink = FlakySink()
        dispatcher = NotificationDispatcher(StaticResolver(), sink)
        await dispatcher.start()

        dispatcher.publish([make_event()])
        await dispatcher.stop()

        assert len(sink.delivered) == 1
        assert not dispatcher.is_running

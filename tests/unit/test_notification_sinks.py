"""
Тесты каналов доставки уведомлений.
"""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import aiosmtplib
import pytest

from editorial.domain.entities.notification import Notification
from editorial.infrastructure.notifications.email_backend import ConsoleEmailBackend, SMTPEmailBackend
from editorial.infrastructure.notifications.sinks import (
    CompositeNotificationSink,
    EmailNotificationSink,
    RecordingNotificationSink,
)
from editorial.shared.exceptions.infrastructure_exceptions import NotificationDeliveryError


def make_notification(email="author@example.com") -> Notification:
    return Notification(
        user_id=uuid4(),
        email=email,
        type="article_approved",
        title="Article approved",
        message='"Story" was approved.',
        link="/articles/1",
    )


@pytest.mark.asyncio
async def test_email_sink_appends_link():
    backend = ConsoleEmailBackend()
    sink = EmailNotificationSink(backend, "noreply@example.com", "Editorial")

    await sink.deliver(make_notification())

    assert backend.sent[0]["to"] == "author@example.com"
    assert backend.sent[0]["body"].endswith("/articles/1")


@pytest.mark.asyncio
async def test_email_sink_skips_users_without_email():
    backend = AsyncMock()
    sink = EmailNotificationSink(backend, "noreply@example.com", "Editorial")

    await sink.deliver(make_notification(email=None))

    backend.send_email.assert_not_called()


@pytest.mark.asyncio
async def test_email_sink_raises_when_not_sent():
    backend = AsyncMock()
    backend.send_email.return_value = False
    sink = EmailNotificationSink(backend, "noreply@example.com", "Editorial")

    with pytest.raises(NotificationDeliveryError):
        await sink.deliver(make_notification())


@pytest.mark.asyncio
async def test_composite_tries_every_channel():
    broken = AsyncMock()
    broken.deliver.side_effect = NotificationDeliveryError("smtp down")
    recording = RecordingNotificationSink()
    sink = CompositeNotificationSink([broken, recording])

    with pytest.raises(NotificationDeliveryError):
        await sink.deliver(make_notification())

    assert len(recording.delivered) == 1


@pytest.mark.asyncio
async def test_smtp_backend_reports_failure():
    backend = SMTPEmailBackend("smtp.local", 587, "user", "secret")

    with patch("aiosmtplib.send", new=AsyncMock(side_effect=aiosmtplib.SMTPException("refused"))):
        sent = await backend.send_email("a@example.com", "Hi", "Body", "noreply@example.com", "Editorial")

    assert sent is False


@pytest.mark.asyncio
async def test_smtp_backend_sends_message():
    backend = SMTPEmailBackend("smtp.local", 587, None, None, use_tls=False)

    with patch("aiosmtplib.send", new=AsyncMock()) as send:
        sent = await backend.send_email("a@example.com", "Hi", "Body", "noreply@example.com", "Editorial")

    assert sent is True
    message = send.call_args.args[0]
    assert message["To"] == "a@example.com"
    assert send.call_args.kwargs["start_tls"] is False

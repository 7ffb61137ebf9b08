"""
Email backends.

- ConsoleEmailBackend: пишет письмо в лог (разработка, тесты)
- SMTPEmailBackend: отправка через aiosmtplib
"""

import logging
from abc import ABC, abstractmethod
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import List, Optional

import aiosmtplib

logger = logging.getLogger(__name__)


class EmailBackend(ABC):
    """Базовый класс email backend."""

    @abstractmethod
    async def send_email(
        self,
        to: str,
        subject: str,
        text_body: str,
        from_address: str,
        from_name: str,
    ) -> bool:
        """
        Отправить письмо.

        Returns:
            True если письмо принято к отправке
        """
        pass


class ConsoleEmailBackend(EmailBackend):
    """Пишет письма в лог и запоминает их (удобно в тестах)."""

    def __init__(self):
        self.sent: List[dict] = []

    async def send_email(
        self,
        to: str,
        subject: str,
        text_body: str,
        from_address: str,
        from_name: str,
    ) -> bool:
        logger.info("=" * 80)
        logger.info("EMAIL (Console Backend)")
        logger.info(f"To: {to}")
        logger.info(f"From: {from_name} <{from_address}>")
        logger.info(f"Subject: {subject}")
        logger.info("-" * 80)
        logger.info(text_body)
        logger.info("=" * 80)
        self.sent.append({"to": to, "subject": subject, "body": text_body})
        return True


class SMTPEmailBackend(EmailBackend):
    """
    Отправка писем через SMTP (aiosmtplib), при необходимости со STARTTLS.

    Аргументы:
        host, port: Адрес SMTP сервера
        username, password: Учётные данные (None без авторизации)
        use_tls: Включить STARTTLS
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: Optional[str],
        password: Optional[str],
        use_tls: bool = True,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls

    async def send_email(
        self,
        to: str,
        subject: str,
        text_body: str,
        from_address: str,
        from_name: str,
    ) -> bool:
        """Отправить письмо; False если сервер отклонил или недоступен."""
        message = MIMEMultipart("alternative")
        message["From"] = f"{from_name} <{from_address}>"
        message["To"] = to
        message["Subject"] = subject
        message.attach(MIMEText(text_body, "plain"))

        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self.username,
                password=self.password,
                start_tls=self.use_tls,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(f"[Notify] Failed to send email via SMTP to {to}: {e}")
            return False

        logger.info(f"[Notify] Email sent via SMTP to {to}")
        return True

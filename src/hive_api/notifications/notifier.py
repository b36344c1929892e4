"""
Notification Delivery

Email delivery for harvest notices. The harvest orchestrator only depends on
`Notifier.notify(recipient, subject, body)`.
"""

import asyncio
import smtplib
from abc import ABC
from abc import abstractmethod
from email.message import EmailMessage
from typing import Optional

from loguru import logger

from hive_api.settings import Settings


class Notifier(ABC):
    """Delivers one notification to one address."""

    @abstractmethod
    async def notify(self, recipient: str, subject: str, body: str) -> None:
        """Deliver the notification or raise."""


class SmtpNotifier(Notifier):
    """Sends notifications through an SMTP relay."""

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: Optional[str] = None,
        password: Optional[str] = None,
        from_email: str = "hive-noreply@example.com",
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_email = from_email
        self.timeout = timeout

    async def notify(self, recipient: str, subject: str, body: str) -> None:
        # smtplib blocks; keep it off the event loop
        await asyncio.to_thread(self._send, recipient, subject, body)

    def _send(self, recipient: str, subject: str, body: str) -> None:
        email = EmailMessage()
        email["From"] = self.from_email
        email["To"] = recipient
        email["Subject"] = subject
        email.set_content(body)

        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.username and self.password:
                smtp.starttls()
                smtp.login(self.username, self.password)
            smtp.send_message(email)


class LogOnlyNotifier(Notifier):
    """Stand-in used when no SMTP host is configured (local development)."""

    async def notify(self, recipient: str, subject: str, body: str) -> None:
        logger.info("SMTP not configured - notification logged only", recipient=recipient, subject=subject)


def build_notifier(settings: Settings) -> Notifier:
    """Pick the notifier for the configured environment."""
    if not settings.smtp_host:
        logger.warning("smtp_host not set - harvest notifications will be logged, not sent")
        return LogOnlyNotifier()

    return SmtpNotifier(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_username,
        password=settings.smtp_password,
        from_email=settings.notification_from_email,
        timeout=settings.notification_timeout_seconds,
    )

"""E-mail transports: the "send one message, succeed or fail" capability.

Each transport raises ``TransportError`` when a message is not accepted.
``build_transport`` checks the settings a transport needs and fails at
startup instead of silently dropping mail.
"""

import asyncio
import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Protocol

import httpx

from order_intake.core.config import Settings
from order_intake.core.exceptions import ConfigurationError, TransportError
from order_intake.schemas.notification import NotificationMessage

logger = logging.getLogger(__name__)


class EmailTransport(Protocol):
    async def send(self, message: NotificationMessage) -> None: ...

    async def close(self) -> None: ...


def build_email_message(message: NotificationMessage) -> EmailMessage:
    """Plain text part first, HTML as the preferred alternative."""
    email = EmailMessage()
    email["From"] = message.sender
    email["To"] = message.to
    email["Subject"] = message.subject
    email.set_content(message.text_body)
    email.add_alternative(message.html_body, subtype="html")
    return email


class SmtpTransport:
    """One SMTP connection per message, run off the event loop."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        starttls: bool = True,
        timeout: float = 30.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.starttls = starttls
        self.timeout = timeout

    def _send_sync(self, email: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
            if self.starttls:
                smtp.starttls(context=ssl.create_default_context())
            smtp.login(self.username, self.password)
            smtp.send_message(email)

    async def send(self, message: NotificationMessage) -> None:
        email = build_email_message(message)
        try:
            await asyncio.to_thread(self._send_sync, email)
        except (smtplib.SMTPException, OSError) as exc:
            raise TransportError(f"SMTP delivery to {message.to} failed: {exc}") from exc

    async def close(self) -> None:
        return None


class HttpTransport:
    """POST each envelope as JSON to a mail relay webhook."""

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.url = url
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def send(self, message: NotificationMessage) -> None:
        payload = {
            "from": message.sender,
            "to": message.to,
            "subject": message.subject,
            "text": message.text_body,
            "html": message.html_body,
        }
        try:
            resp = await self._client.post(self.url, json=payload)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise TransportError(f"Mail relay rejected message to {message.to}: {exc}") from exc

    async def close(self) -> None:
        await self._client.aclose()


class ConsoleTransport:
    """Log messages instead of sending them. Development only."""

    async def send(self, message: NotificationMessage) -> None:
        logger.info(
            "Console e-mail to=%s subject=%r\n%s", message.to, message.subject, message.text_body
        )

    async def close(self) -> None:
        return None


def build_transport(settings: Settings) -> EmailTransport:
    kind = settings.EMAIL_TRANSPORT.lower()
    if kind == "console":
        if settings.ENVIRONMENT == "production":
            raise ConfigurationError("EMAIL_TRANSPORT=console is not allowed in production")
        return ConsoleTransport()

    if not settings.sender_address:
        raise ConfigurationError("EMAIL_FROM or SMTP_USERNAME must be set")
    if not settings.BUSINESS_EMAIL:
        raise ConfigurationError("BUSINESS_EMAIL must be set")

    if kind == "smtp":
        missing = [
            name
            for name in ("SMTP_HOST", "SMTP_USERNAME", "SMTP_PASSWORD")
            if not getattr(settings, name)
        ]
        if missing:
            raise ConfigurationError(f"SMTP transport requires {', '.join(missing)}")
        return SmtpTransport(
            host=settings.SMTP_HOST,
            port=settings.SMTP_PORT,
            username=settings.SMTP_USERNAME,
            password=settings.SMTP_PASSWORD,
            starttls=settings.SMTP_STARTTLS,
            timeout=settings.DISPATCH_TIMEOUT_SECONDS,
        )
    if kind == "http":
        if not settings.EMAIL_WEBHOOK_URL:
            raise ConfigurationError("HTTP transport requires EMAIL_WEBHOOK_URL")
        return HttpTransport(settings.EMAIL_WEBHOOK_URL, timeout=settings.DISPATCH_TIMEOUT_SECONDS)
    raise ConfigurationError(f"Unknown EMAIL_TRANSPORT: {settings.EMAIL_TRANSPORT!r}")

"""
Notifiers
=========
Transports that actually deliver a :class:`Message`.
"""

import asyncio
import mimetypes
import smtplib
import ssl
from email.message import EmailMessage
from pathlib import Path
from typing import Optional

import structlog

from ..errors import ConfigurationError
from .models import Message

logger = structlog.get_logger(__name__)


class Notifier:
    """Interface for an outbound delivery transport."""

    name = "base"

    def validate(self) -> None:
        """
        Check the transport can be used at all.

        Raises:
            ConfigurationError: If required settings are missing
        """

    async def send(self, message: Message) -> None:
        """Deliver ``message``; raise on failure."""
        raise NotImplementedError


def build_email(message: Message) -> EmailMessage:
    """Render a :class:`Message` as a MIME email with its attachments."""
    email = EmailMessage()
    email["From"] = message.sender
    email["To"] = message.to
    email["Subject"] = message.subject
    email.set_content(message.body_text)

    for attachment in message.attachments:
        ctype, encoding = mimetypes.guess_type(attachment.filename)
        if ctype is None or encoding is not None:
            ctype = "application/octet-stream"
        maintype, subtype = ctype.split("/", 1)
        email.add_attachment(
            Path(attachment.path).read_bytes(),
            maintype=maintype,
            subtype=subtype,
            filename=attachment.filename,
        )
    return email


class SMTPNotifier(Notifier):
    """
    SMTP transport.

    Implicit TLS when ``secure`` is set (port 465), STARTTLS otherwise. The
    blocking smtplib session runs in the default executor.
    """

    name = "smtp"

    def __init__(
        self,
        host: Optional[str],
        port: int = 465,
        user: Optional[str] = None,
        password: Optional[str] = None,
        secure: bool = True,
        timeout: float = 30.0,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.secure = secure
        self.timeout = timeout

    @classmethod
    def from_config(cls, config) -> "SMTPNotifier":
        return cls(
            host=config.smtp_host,
            port=config.smtp_port,
            user=config.smtp_user,
            password=config.smtp_password,
            secure=config.smtp_secure,
            timeout=config.smtp_timeout,
        )

    def validate(self) -> None:
        if not self.host or not self.user or not self.password:
            raise ConfigurationError("SMTP credentials missing in env")

    async def send(self, message: Message) -> None:
        self.validate()
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._send_sync, message)
        logger.info(
            "smtp_message_sent",
            to=message.to,
            subject=message.subject,
            attachments=len(message.attachments),
        )

    def _send_sync(self, message: Message) -> None:
        email = build_email(message)
        context = ssl.create_default_context()

        if self.secure:
            with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout, context=context) as server:
                server.login(self.user, self.password)
                server.send_message(email)
        else:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.starttls(context=context)
                server.login(self.user, self.password)
                server.send_message(email)

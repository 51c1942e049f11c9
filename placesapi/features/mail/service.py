"""
Outbound mail over SMTP.

Port 465 uses implicit TLS; other ports upgrade with STARTTLS when
credentials are configured.
"""
import logging
import smtplib
import ssl
from email.message import EmailMessage
from html import escape
from typing import Optional, Protocol

from placesapi.core.config import settings
from placesapi.core.errors import ConfigurationError

logger = logging.getLogger("placesapi")


class Mailer(Protocol):
    def ensure_configured(self) -> None:
        ...

    def send(self, to: str, subject: str, text: str, html: Optional[str] = None) -> None:
        ...


class SmtpMailer:
    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        sender: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.host = host or settings.SMTP_HOST
        self.port = port or settings.SMTP_PORT
        self.user = user or settings.SMTP_USER
        self.password = password or settings.SMTP_PASS
        self.sender = sender or settings.SMTP_FROM or self.user
        self.timeout = timeout or settings.UPSTREAM_TIMEOUT_SECONDS

    def ensure_configured(self) -> None:
        if not self.host:
            raise ConfigurationError("Email transport is not configured.")
        if not self.sender:
            raise ConfigurationError("SMTP_FROM is not configured.")

    def send(self, to: str, subject: str, text: str, html: Optional[str] = None) -> None:
        self.ensure_configured()

        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to
        msg.set_content(text)
        if html:
            msg.add_alternative(html, subtype="html")

        if self.port == 465:
            with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout, context=ssl.create_default_context()) as server:
                self._deliver(server, msg)
        else:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.user:
                    server.starttls(context=ssl.create_default_context())
                self._deliver(server, msg)

        logger.info("mail.sent", extra={"event_type": "mail.sent"})

    def _deliver(self, server: smtplib.SMTP, msg: EmailMessage) -> None:
        if self.user:
            server.login(self.user, self.password or "")
        server.send_message(msg)


def send_signup_confirmation(mailer: Mailer, to: str, confirm_url: str) -> None:
    link = escape(confirm_url, quote=True)
    mailer.send(
        to,
        "Confirm your account",
        f"Please confirm your account by opening this link: {confirm_url}",
        f'<p>Please confirm your account by clicking the link below:</p><p><a href="{link}">Confirm account</a></p>',
    )

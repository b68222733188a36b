"""Outbound email over SMTP."""

import logging
import smtplib
from email.message import EmailMessage
from typing import Protocol

from wemanage.config import Settings, get_settings

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    """Anything that can deliver a plain-text email."""

    def send(self, to: str, subject: str, body: str) -> bool: ...


class SmtpMailer:
    """Service for sending email through the configured SMTP relay."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    @property
    def configured(self) -> bool:
        return bool(self.settings.smtp_host)

    def _connect(self) -> smtplib.SMTP:
        if self.settings.smtp_use_ssl:
            return smtplib.SMTP_SSL(
                self.settings.smtp_host,
                self.settings.smtp_port,
                timeout=self.settings.smtp_timeout,
            )
        server = smtplib.SMTP(
            self.settings.smtp_host,
            self.settings.smtp_port,
            timeout=self.settings.smtp_timeout,
        )
        server.starttls()
        return server

    def send(self, to: str, subject: str, body: str) -> bool:
        """
        Send a plain-text email.

        Returns True if the relay accepted the message.
        """
        if not self.configured:
            logger.warning("SMTP not configured, email not sent")
            return False

        message = EmailMessage()
        message["From"] = self.settings.email_from
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)

        try:
            with self._connect() as server:
                if self.settings.smtp_username and self.settings.smtp_password:
                    server.login(self.settings.smtp_username, self.settings.smtp_password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Email delivery failed: {e}")
            return False

        logger.info("Email sent")
        return True


def get_mailer() -> Mailer:
    """Get mailer instance."""
    return SmtpMailer(get_settings())

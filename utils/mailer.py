"""
Mail transports used by the notification dispatcher

MAIL_BACKEND selects the transport:
    smtp    - deliver through SMTP_HOST (default)
    console - log the message instead of sending it (local development)
"""
import logging
import os
import smtplib
from email.message import EmailMessage
from typing import Optional

logger = logging.getLogger(__name__)

MAIL_BACKEND = os.getenv("MAIL_BACKEND", "smtp")
SMTP_HOST = os.getenv("SMTP_HOST", "")
SMTP_PORT = int(os.getenv("SMTP_PORT", 587))
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASS = os.getenv("SMTP_PASS", "")
SMTP_FROM = os.getenv("SMTP_FROM", SMTP_USER)
SMTP_TIMEOUT = float(os.getenv("SMTP_TIMEOUT", 10))


class MailDeliveryError(Exception):
    """Raised when a transport could not hand a message over"""


def build_message(sender: str, to: str, subject: str, html: Optional[str] = None,
                  text: Optional[str] = None) -> EmailMessage:
    message = EmailMessage()
    message["From"] = sender
    message["To"] = to
    message["Subject"] = subject
    message.set_content(text or "")
    if html:
        message.add_alternative(html, subtype="html")
    return message


class SmtpMailer:
    """
    SMTP transport
    Port 465 uses implicit TLS, any other port upgrades with STARTTLS when the server offers it
    """

    def __init__(self, host: str = SMTP_HOST, port: int = SMTP_PORT, username: str = SMTP_USER,
                 password: str = SMTP_PASS, sender: str = SMTP_FROM, timeout: float = SMTP_TIMEOUT):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender
        self.timeout = timeout

    def send(self, to: str, subject: str, html: Optional[str] = None, text: Optional[str] = None) -> None:
        if not self.host:
            raise MailDeliveryError("SMTP_HOST is not configured")

        message = build_message(self.sender, to, subject, html=html, text=text)
        try:
            if self.port == 465:
                with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout) as server:
                    self._deliver(server, message)
            else:
                with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                    server.ehlo()
                    if server.has_extn("starttls"):
                        server.starttls()
                        server.ehlo()
                    self._deliver(server, message)
        except (smtplib.SMTPException, OSError) as e:
            raise MailDeliveryError(str(e)) from e

    def _deliver(self, server: smtplib.SMTP, message: EmailMessage) -> None:
        if self.username:
            server.login(self.username, self.password)
        server.send_message(message)


class ConsoleMailer:
    """Logs messages instead of sending them"""

    def send(self, to: str, subject: str, html: Optional[str] = None, text: Optional[str] = None) -> None:
        logger.info("Mail to %s: %s", to, subject)


def get_mailer():
    if MAIL_BACKEND == "console":
        return ConsoleMailer()
    if MAIL_BACKEND == "smtp":
        return SmtpMailer()
    raise ValueError(f"Unknown MAIL_BACKEND: {MAIL_BACKEND}")

# contact_relay/email/client.py
from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from typing import Optional, Protocol

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail
from starlette.concurrency import run_in_threadpool

from contact_relay.config import Settings
from contact_relay.schemas.contact import OutboundMessage

logger = logging.getLogger("contact_relay.email.client")


class DeliveryError(Exception):
    """The mail transport refused the message or could not be reached."""


class MailDispatcher(Protocol):
    """
    Anything that can deliver an OutboundMessage.

    Both methods make a single attempt; retrying is up to the caller.
    """

    async def verify(self) -> None:
        """Raise DeliveryError if the transport cannot authenticate."""

    async def send(self, message: OutboundMessage) -> None:
        """Deliver one message or raise DeliveryError."""


def _require_recipient(message: OutboundMessage) -> str:
    if not message.to_address:
        raise DeliveryError("No recipient address configured")
    return message.to_address


class SmtpDispatcher:
    """SMTP submission (STARTTLS + login), e.g. smtp.gmail.com:587."""

    def __init__(
        self,
        *,
        host: str,
        port: int,
        username: Optional[str],
        password: Optional[str],
        use_tls: bool = True,
        timeout: float = 30.0,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmtpDispatcher":
        return cls(
            host=settings.email_smtp_host,
            port=settings.email_smtp_port,
            username=settings.email_user,
            password=settings.email_pass,
            use_tls=settings.email_use_tls,
            timeout=settings.smtp_timeout,
        )

    def _connect(self) -> smtplib.SMTP:
        if not self.username or not self.password:
            raise DeliveryError("Missing SMTP credentials (EMAIL_USER / EMAIL_PASS)")

        server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        try:
            if self.use_tls:
                server.starttls()
            server.login(self.username, self.password)
        except Exception:
            server.close()
            raise
        return server

    def _verify_sync(self) -> None:
        try:
            with self._connect() as server:
                server.noop()
        except (smtplib.SMTPException, OSError) as exc:
            raise DeliveryError(str(exc)) from exc

    def _send_sync(self, message: OutboundMessage) -> None:
        recipient = _require_recipient(message)

        try:
            # EmailMessage raises ValueError for headers it can't encode.
            msg = EmailMessage()
            msg["From"] = message.from_address
            msg["To"] = recipient
            msg["Subject"] = message.subject
            msg.set_content(message.body)

            with self._connect() as server:
                server.send_message(msg)
        except (smtplib.SMTPException, OSError, ValueError) as exc:
            raise DeliveryError(str(exc)) from exc

        logger.info("SMTP accepted message for %s via %s", msg["To"], self.host)

    async def verify(self) -> None:
        await run_in_threadpool(self._verify_sync)

    async def send(self, message: OutboundMessage) -> None:
        await run_in_threadpool(self._send_sync, message)


class SendGridDispatcher:
    """Thin wrapper around the SendGrid API client."""

    def __init__(self, api_key: str, client: Optional[SendGridAPIClient] = None) -> None:
        self._sg = client or SendGridAPIClient(api_key)

    def _verify_sync(self) -> None:
        # GET /v3/scopes only succeeds with a valid key.
        try:
            response = self._sg.client.scopes.get()
        except Exception as exc:
            raise DeliveryError(f"SendGrid API key rejected: {exc}") from exc
        if response.status_code >= 400:
            raise DeliveryError(f"SendGrid API key rejected: status={response.status_code}")

    def _send_sync(self, message: OutboundMessage) -> None:
        mail = Mail(
            from_email=message.from_address,
            to_emails=_require_recipient(message),
            subject=message.subject,
            plain_text_content=message.body,
        )

        try:
            response = self._sg.send(mail)
        except Exception as exc:  # python_http_client raises per status class
            raise DeliveryError(str(exc)) from exc

        if response.status_code >= 400:
            raise DeliveryError(f"SendGrid responded with status {response.status_code}")

        logger.info(
            "SendGrid accepted message for %s with status %s",
            message.to_address,
            response.status_code,
        )

    async def verify(self) -> None:
        await run_in_threadpool(self._verify_sync)

    async def send(self, message: OutboundMessage) -> None:
        await run_in_threadpool(self._send_sync, message)


def build_dispatcher(settings: Settings) -> MailDispatcher:
    """SendGrid when an API key is configured, SMTP otherwise."""
    if settings.sendgrid_api_key:
        logger.info("Using SendGrid mail dispatcher")
        return SendGridDispatcher(settings.sendgrid_api_key)

    logger.info(
        "Using SMTP mail dispatcher (host=%s, port=%s, use_tls=%s)",
        settings.email_smtp_host,
        settings.email_smtp_port,
        settings.email_use_tls,
    )
    return SmtpDispatcher.from_settings(settings)

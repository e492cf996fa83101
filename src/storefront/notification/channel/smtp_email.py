"""SMTP email adapter backed by aiosmtplib.

Delivery is fire-and-forget: inside a running event loop (the web process)
the send is spawned as a background task and ``send`` returns "queued"
immediately; outside one it runs to completion. Delivery failures are logged
and never propagate to the caller.
"""

import asyncio
from email.message import EmailMessage
from email.utils import make_msgid

import aiosmtplib
import structlog

from storefront.notification.channel.email_port import DeliveryReceipt, DeliveryStatus, EmailPort

logger = structlog.get_logger(__name__)


class SmtpEmailAdapter(EmailPort):
    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        use_ssl: bool = False,
        sender: str = "Storefront <no-reply@storefront.local>",
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_ssl = use_ssl
        self.sender = sender
        self.timeout = timeout
        self._pending: set[asyncio.Task] = set()

    def _build_message(self, to: str, subject: str, body: str, html_body: str | None) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = to
        message["Subject"] = subject
        message["Message-ID"] = make_msgid(domain="storefront.local")
        message.set_content(body)
        if html_body:
            message.add_alternative(html_body, subtype="html")
        return message

    async def _deliver(self, message: EmailMessage) -> bool:
        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self.username,
                password=self.password,
                use_tls=self.use_ssl,
                timeout=self.timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as exc:
            logger.error("SMTP delivery failed", to=message["To"], subject=message["Subject"], error=str(exc))
            return False
        logger.info("Email delivered", to=message["To"], message_id=message["Message-ID"])
        return True

    def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> DeliveryReceipt:
        message = self._build_message(to, subject, body, html_body)
        message_id = message["Message-ID"]

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None:
            task = loop.create_task(self._deliver(message))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
            return DeliveryReceipt(DeliveryStatus.QUEUED, message_id=message_id)

        if asyncio.run(self._deliver(message)):
            return DeliveryReceipt(DeliveryStatus.SENT, message_id=message_id)
        return DeliveryReceipt(DeliveryStatus.FAILED, error="SMTP delivery failed")

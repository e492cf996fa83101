"""In-memory email adapter used in development and tests."""

from dataclasses import dataclass
from uuid import uuid4

from storefront.notification.channel.email_port import DeliveryReceipt, DeliveryStatus, EmailPort


@dataclass(frozen=True)
class SentEmail:
    message_id: str
    to: str
    subject: str
    body: str
    html_body: str | None = None


class FakeEmailAdapter(EmailPort):
    """Keeps every accepted message in ``outbox``; can be told to refuse them."""

    def __init__(self):
        self.outbox: list[SentEmail] = []
        self.failure: str | None = None

    def fail_with(self, reason: str = "Mailbox unavailable") -> None:
        self.failure = reason

    def send(self, to: str, subject: str, body: str, html_body: str | None = None) -> DeliveryReceipt:
        if self.failure is not None:
            return DeliveryReceipt(DeliveryStatus.FAILED, error=self.failure)

        email = SentEmail(f"<{uuid4().hex}@storefront.local>", to, subject, body, html_body)
        self.outbox.append(email)
        return DeliveryReceipt(DeliveryStatus.SENT, message_id=email.message_id)

    def emails_to(self, address: str) -> list[SentEmail]:
        return [email for email in self.outbox if email.to == address]

    def clear(self) -> None:
        self.outbox.clear()
        self.failure = None

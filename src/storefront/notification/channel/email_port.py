"""Email channel port and the receipt every adapter hands back."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum


class DeliveryStatus(Enum):
    SENT = "sent"
    QUEUED = "queued"  # handed to a background task, outcome logged later
    FAILED = "failed"


@dataclass(frozen=True)
class DeliveryReceipt:
    status: DeliveryStatus
    message_id: str | None = None
    error: str | None = None

    @property
    def accepted(self) -> bool:
        return self.status is not DeliveryStatus.FAILED


class EmailPort(ABC):
    """Outbound transactional email."""

    @abstractmethod
    def send(self, to: str, subject: str, body: str, html_body: str | None = None) -> DeliveryReceipt: ...

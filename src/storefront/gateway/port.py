"""Payment gateway port (abstract interface).

Defines the contract that all payment gateway adapters must implement.
This enables swapping between FakeGateway (dev/test) and RazorpayGateway
(production) without changing any domain or application code.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from storefront.exceptions import ConfigError
from storefront.payment.signature import signature_matches


@dataclass(frozen=True)
class GatewayOrder:
    """A hosted-checkout session created on the gateway."""

    id: str
    amount: int  # minor units
    currency: str
    receipt: str | None = None
    status: str = "created"


class PaymentGateway(ABC):
    """Abstract payment gateway interface.

    Adapters hold the merchant credentials: ``key_id`` is public and handed
    to the checkout client; ``key_secret`` signs payment callbacks.
    """

    key_id: str | None = None
    key_secret: str | None = None

    @abstractmethod
    def create_order(self, amount: int, currency: str, receipt: str) -> GatewayOrder:
        """Create a remote order for ``amount`` minor units."""
        ...

    def require_credentials(self) -> None:
        if not self.key_id or not self.key_secret:
            raise ConfigError("Payment gateway credentials are not configured")

    def verify_payment_signature(self, gateway_order_id: str, gateway_payment_id: str, signature: str) -> bool:
        """Verify that a payment callback was signed with our key secret."""
        if not self.key_secret:
            raise ConfigError("Payment gateway secret is not configured")
        return signature_matches(self.key_secret, gateway_order_id, gateway_payment_id, signature)

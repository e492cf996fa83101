"""Configurable fake payment gateway for development and testing.

This adapter simulates a hosted-checkout gateway without any external calls.
It signs callbacks with a known secret so tests and manual API sessions can
produce valid signatures, and it can be configured to fail.
"""

from uuid import uuid4

from storefront.exceptions import GatewayError
from storefront.gateway.port import GatewayOrder, PaymentGateway
from storefront.payment.signature import compute_signature

FAKE_KEY_ID = "rzp_test_fake_key"
FAKE_KEY_SECRET = "fake_key_secret"


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self, key_id: str | None = FAKE_KEY_ID, key_secret: str | None = FAKE_KEY_SECRET) -> None:
        self.key_id = key_id
        self.key_secret = key_secret
        self.should_succeed: bool = True
        self.failure_reason: str = "Gateway unavailable"
        self.failure_code: str = "GATEWAY_ERROR"
        self.failure_status: int = 502
        self.calls: list[dict] = []

    def configure(
        self,
        should_succeed: bool,
        failure_reason: str = "Gateway unavailable",
        failure_code: str = "GATEWAY_ERROR",
        failure_status: int = 502,
    ) -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.failure_code = failure_code
        self.failure_status = failure_status

    def create_order(self, amount: int, currency: str, receipt: str) -> GatewayOrder:
        self.require_credentials()
        self.calls.append(
            {
                "method": "create_order",
                "amount": amount,
                "currency": currency,
                "receipt": receipt,
            }
        )

        if not self.should_succeed:
            raise GatewayError(
                self.failure_reason,
                code=self.failure_code,
                status_code=self.failure_status,
                details=self.failure_reason,
            )
        return GatewayOrder(
            id=f"order_fake{uuid4().hex[:14]}",
            amount=amount,
            currency=currency,
            receipt=receipt,
        )

    def sign(self, gateway_order_id: str, gateway_payment_id: str) -> str:
        """Produce the signature the hosted checkout would send back."""
        return compute_signature(self.key_secret, gateway_order_id, gateway_payment_id)

"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeGateway for development and testing
- RazorpayGateway for production (selected with PAYMENT_GATEWAY=razorpay)
"""

from storefront.config import get_settings
from storefront.gateway.fake_adapter import FakeGateway
from storefront.gateway.port import PaymentGateway
from storefront.gateway.razorpay_adapter import RazorpayGateway

_current_gateway: PaymentGateway | None = None


def build_gateway(settings) -> PaymentGateway:
    """Build the adapter named by ``settings.payment_gateway``."""
    if settings.payment_gateway == "razorpay":
        return RazorpayGateway(
            key_id=settings.gateway_key_id,
            key_secret=settings.gateway_key_secret,
            base_url=settings.gateway_base_url,
            timeout=settings.gateway_timeout_seconds,
        )
    if settings.payment_gateway == "fake":
        return FakeGateway()
    raise ValueError(f"Unknown payment gateway: {settings.payment_gateway}")


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway. Defaults to the configured adapter."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = build_gateway(get_settings())
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None

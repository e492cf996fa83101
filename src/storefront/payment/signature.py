"""HMAC signatures for hosted-checkout payment callbacks.

The gateway signs ``"<gateway order id>|<gateway payment id>"`` with the
merchant's key secret using HMAC-SHA256 and sends the lowercase hex digest.
"""

import hashlib
import hmac

from storefront.exceptions import ConfigError


def compute_signature(secret: str, gateway_order_id: str, gateway_payment_id: str) -> str:
    if not secret:
        raise ConfigError("Payment gateway secret is not configured")
    message = f"{gateway_order_id}|{gateway_payment_id}".encode()
    return hmac.new(secret.encode(), message, hashlib.sha256).hexdigest()


def signature_matches(secret: str, gateway_order_id: str, gateway_payment_id: str, signature: str) -> bool:
    """Constant-time comparison of the expected and supplied signatures."""
    expected = compute_signature(secret, gateway_order_id, gateway_payment_id)
    return hmac.compare_digest(expected.encode(), (signature or "").encode())

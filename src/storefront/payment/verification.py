"""Payment verification — command, handler and the serialized entry point.

A hosted-checkout callback carries the gateway order id, the gateway payment
id and an HMAC signature over both. Verification resolves the local order,
authenticates the signature, and marks the order paid.

Repeated callbacks for an order that is already paid with the same payment
id succeed without writing; a different payment id is rejected.

``verify_payment`` serializes verifications per gateway order id around the
whole unit of work and the handler re-checks ``paid`` inside it, so duplicate
or concurrent callbacks complete a payment at most once in this process.
"""

import threading
from contextlib import contextmanager

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String
from protean.utils.globals import current_domain

from storefront.config import get_settings
from storefront.domain import storefront
from storefront.exceptions import InvalidSignatureError, NotFoundError
from storefront.gateway import get_gateway
from storefront.order.lookup import resolve_order_for_payment
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class VerifyPayment:
    """Authenticate a payment callback and mark the order paid."""

    gateway_order_id = String(required=True, max_length=64)
    gateway_payment_id = String(required=True, max_length=64)
    signature = String(required=True, max_length=255)
    order_ref = String(required=True, max_length=255)
    email_address = String(max_length=254)


@storefront.command_handler(part_of=Order)
class VerifyPaymentHandler:
    @handle(VerifyPayment)
    def verify_payment(self, command):
        missing = [
            name
            for name in ("gateway_order_id", "gateway_payment_id", "signature", "order_ref")
            if not getattr(command, name)
        ]
        if missing:
            raise ValidationError({name: ["Missing payment verification data"] for name in missing})

        resolved = resolve_order_for_payment(
            command.order_ref,
            command.gateway_order_id,
            allow_timestamp_match=get_settings().timestamp_lookup_enabled,
        )
        if resolved is None:
            logger.error(
                "Order not found with any lookup strategy",
                order_ref=command.order_ref,
                gateway_order_id=command.gateway_order_id,
            )
            raise NotFoundError("Order not found")

        order = resolved.order
        logger.info("Resolved order for payment", order_id=str(order.id), strategy=resolved.strategy)

        gateway = get_gateway()
        if not gateway.verify_payment_signature(
            command.gateway_order_id,
            command.gateway_payment_id,
            command.signature,
        ):
            logger.warning(
                "Invalid payment signature",
                order_id=str(order.id),
                gateway_order_id=command.gateway_order_id,
            )
            raise InvalidSignatureError("Invalid payment signature")

        if order.paid:
            if order.is_paid_by(command.gateway_payment_id, command.gateway_order_id):
                logger.info("Payment already verified", order_id=str(order.id))
                return order.summary()
            raise ValidationError({"paid": ["Order is already paid"]})

        order.mark_paid(
            gateway_payment_id=command.gateway_payment_id,
            gateway_order_id=command.gateway_order_id,
            email_address=command.email_address,
        )
        current_domain.repository_for(Order).add(order)
        logger.info(
            "Payment verified",
            order_id=str(order.id),
            gateway_order_id=command.gateway_order_id,
            gateway_payment_id=command.gateway_payment_id,
        )
        return order.summary()


# gateway order id -> [lock, holders]; entries go away with their last holder
_locks: dict[str, list] = {}
_locks_guard = threading.Lock()


@contextmanager
def _serialized(key: str):
    with _locks_guard:
        entry = _locks.setdefault(key, [threading.Lock(), 0])
        entry[1] += 1
    try:
        with entry[0]:
            yield
    finally:
        with _locks_guard:
            entry[1] -= 1
            if entry[1] == 0:
                del _locks[key]


def verify_payment(
    gateway_order_id: str | None,
    gateway_payment_id: str | None,
    signature: str | None,
    order_ref: str | None,
    email_address: str | None = None,
) -> dict:
    """Process a ``VerifyPayment`` command, one at a time per gateway order."""
    command = VerifyPayment(
        gateway_order_id=gateway_order_id,
        gateway_payment_id=gateway_payment_id,
        signature=signature,
        order_ref=order_ref,
        email_address=email_address,
    )
    with _serialized(command.gateway_order_id):
        return current_domain.process(command, asynchronous=False)

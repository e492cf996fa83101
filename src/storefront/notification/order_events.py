"""Order event handler — sends transactional email for order events.

Notifications are a side channel: a missing recipient or a failed send is
logged and never raised, so the order operation that produced the event is
unaffected.
"""

import structlog
from protean.utils.mixins import handle

from storefront.domain import storefront
from storefront.notification.channel import get_email_channel
from storefront.notification.templates import (
    OrderConfirmationTemplate,
    PaymentReceiptTemplate,
    ReturnConfirmationTemplate,
)
from storefront.order.events import OrderPlaced, OrderReturned, PaymentVerified
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


def send_order_email(to: str | None, template, context: dict, order_id: str) -> bool:
    """Render ``template`` and send it; returns whether the send was accepted."""
    if not to:
        logger.info("No recipient for order email, skipping", order_id=order_id)
        return False

    rendered = template.render(context)
    try:
        receipt = get_email_channel().send(to=to, subject=rendered["subject"], body=rendered["body"])
    except Exception as exc:
        logger.error("Order email dispatch failed", order_id=order_id, error=str(exc))
        return False

    if not receipt.accepted:
        logger.error("Order email not sent", order_id=order_id, error=receipt.error)
        return False
    return True


@storefront.event_handler(part_of=Order)
class OrderNotificationsHandler:
    """Emails the customer when an order is placed, paid or returned."""

    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        send_order_email(
            event.customer_email,
            OrderConfirmationTemplate,
            {
                "order_code": event.order_code,
                "total_price": event.total_price,
                "payment_method": event.payment_method,
            },
            order_id=str(event.order_id),
        )

    @handle(PaymentVerified)
    def on_payment_verified(self, event: PaymentVerified) -> None:
        send_order_email(
            event.email_address,
            PaymentReceiptTemplate,
            {
                "order_code": event.order_code,
                "total_price": event.total_price,
                "payment_id": event.gateway_payment_id,
            },
            order_id=str(event.order_id),
        )

    @handle(OrderReturned)
    def on_order_returned(self, event: OrderReturned) -> None:
        send_order_email(
            event.customer_email,
            ReturnConfirmationTemplate,
            {"order_code": event.order_code},
            order_id=str(event.order_id),
        )

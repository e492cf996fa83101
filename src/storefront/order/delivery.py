"""Order delivery — fulfillment command, handler and the demo delivery clock.

Delivery is recorded from a fulfillment event (``RecordDelivery``). The
simulated clock in ``deliver_due_orders`` marks orders delivered a fixed time
after placement; it is a demo stand-in for a shipping integration and only
runs when ``STOREFRONT_SIMULATE_DELIVERY`` is enabled.
"""

from datetime import UTC, datetime, timedelta

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.config import get_settings
from storefront.domain import storefront
from storefront.order.lookup import load_order
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class RecordDelivery:
    """A carrier or fulfillment system confirmed the order was delivered."""

    order_id = Identifier(required=True)


@storefront.command_handler(part_of=Order)
class RecordDeliveryHandler:
    @handle(RecordDelivery)
    def record_delivery(self, command):
        order = load_order(command.order_id)
        order.mark_delivered()
        current_domain.repository_for(Order).add(order)
        return str(order.id)


def delivery_countdown(order: Order, now: datetime | None = None, window_seconds: float | None = None) -> float:
    """Seconds left before the simulated clock delivers ``order``."""
    if order.delivered:
        return 0.0
    now = now or datetime.now(UTC)
    if window_seconds is None:
        window_seconds = get_settings().delivery_window_seconds
    elapsed = (now - order.created_at).total_seconds()
    return max(0.0, window_seconds - elapsed)


def deliver_due_orders(now: datetime | None = None, settings=None, customer_id: str | None = None) -> list[str]:
    """Record delivery for every undelivered order older than the window.

    With ``customer_id`` only that customer's orders are swept. Returns the
    ids of orders delivered. Does nothing unless simulated delivery is enabled.
    """
    settings = settings or get_settings()
    if not settings.simulate_delivery:
        return []

    now = now or datetime.now(UTC)
    cutoff = now - timedelta(seconds=settings.delivery_window_seconds)
    repo = current_domain.repository_for(Order)

    delivered = []
    for order in repo.find_undelivered_created_before(cutoff, customer_id=customer_id):
        try:
            current_domain.process(RecordDelivery(order_id=str(order.id)), asynchronous=False)
        except ValidationError as exc:
            logger.warning("Simulated delivery skipped", order_id=str(order.id), error=str(exc))
            continue
        delivered.append(str(order.id))

    if delivered:
        logger.info("Simulated delivery recorded", count=len(delivered))
    return delivered

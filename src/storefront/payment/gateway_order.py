"""Gateway order creation — command and handler.

Opens a hosted-checkout order on the payment gateway and links it to the
local order. The linkage is best-effort: when the local order cannot be
resolved (or saving it fails) the gateway order is still returned so the
customer can pay, and verification later falls back to other lookups.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, String
from protean.utils.globals import current_domain

from storefront.config import get_settings
from storefront.domain import storefront
from storefront.gateway import get_gateway
from storefront.order.lookup import resolve_local_order
from storefront.order.order import Order
from storefront.payment.money import to_minor_units

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class CreateGatewayOrder:
    """Open a hosted-checkout session for an order."""

    amount = Float(required=True)  # major currency units
    order_ref = String(required=True, max_length=255)  # order id or order code
    email_address = String(max_length=254)  # caller's email, when known


@storefront.command_handler(part_of=Order)
class CreateGatewayOrderHandler:
    @handle(CreateGatewayOrder)
    def create_gateway_order(self, command):
        if not command.order_ref:
            raise ValidationError({"order_ref": ["Order reference is required"]})
        amount_minor = to_minor_units(command.amount)

        gateway = get_gateway()
        currency = get_settings().gateway_currency
        gateway_order = gateway.create_order(
            amount=amount_minor,
            currency=currency,
            receipt=str(command.order_ref),
        )
        logger.info(
            "Gateway order created",
            gateway_order_id=gateway_order.id,
            order_ref=command.order_ref,
            amount=gateway_order.amount,
        )

        _link_local_order(command.order_ref, gateway_order.id, command.email_address)

        return {
            "id": gateway_order.id,
            "amount": gateway_order.amount,
            "currency": gateway_order.currency,
            "key": gateway.key_id,
        }


def _link_local_order(order_ref: str, gateway_order_id: str, email_address: str | None) -> None:
    try:
        resolved = resolve_local_order(order_ref)
        if resolved is None:
            logger.warning(
                "Could not find local order to link gateway order",
                order_ref=order_ref,
                gateway_order_id=gateway_order_id,
            )
            return

        order = resolved.order
        order.link_gateway_order(gateway_order_id, email_address=email_address)
        current_domain.repository_for(Order).add(order)
        logger.info(
            "Order linked to gateway order",
            order_id=str(order.id),
            order_code=order.order_code,
            gateway_order_id=gateway_order_id,
            strategy=resolved.strategy,
        )
    except Exception as exc:
        logger.error(
            "Failed to link gateway order to local order",
            order_ref=order_ref,
            gateway_order_id=gateway_order_id,
            error=str(exc),
        )

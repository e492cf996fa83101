"""Order placement — command and handler.

Totals are always computed here from the submitted line items; the client's
own cart summary is display-only.
"""

import json
from datetime import UTC, datetime, timedelta

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order, PaymentMethod, generate_order_code


@storefront.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    customer_email = String(max_length=254)
    items = Text(required=True)  # JSON: list of {product_id, name, quantity, unit_price, image}
    shipping_address = Text(required=True)  # JSON: address dict
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.CASH_ON_DELIVERY.value)
    order_code = String(max_length=64)


def _load_json(value):
    return json.loads(value) if isinstance(value, str) else value


def _unused_order_code(repo, now: datetime) -> str:
    """Generated codes have millisecond resolution; step past collisions."""
    code = generate_order_code(now)
    while repo.find_by_code(code) is not None:
        now += timedelta(milliseconds=1)
        code = generate_order_code(now)
    return code


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        repo = current_domain.repository_for(Order)

        now = datetime.now(UTC)
        order_code = command.order_code
        if order_code:
            if repo.find_by_code(order_code) is not None:
                raise ValidationError({"order_code": [f"Order code {order_code} is already in use"]})
        else:
            order_code = _unused_order_code(repo, now)

        order = Order.place(
            customer_id=command.customer_id,
            customer_email=command.customer_email,
            items_data=_load_json(command.items),
            shipping_address=_load_json(command.shipping_address),
            payment_method=command.payment_method or PaymentMethod.CASH_ON_DELIVERY.value,
            order_code=order_code,
            now=now,
        )

        repo.add(order)
        return str(order.id)

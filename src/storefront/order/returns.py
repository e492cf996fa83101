"""Order returns — command and handler.

A return is customer-initiated and irreversible. Only the owner may return an
order, and only once it has been delivered.
"""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.exceptions import NotFoundError
from storefront.order.lookup import load_order
from storefront.order.order import Order


@storefront.command(part_of="Order")
class ReturnOrder:
    """Return a delivered order on behalf of its owner."""

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)


@storefront.command_handler(part_of=Order)
class ReturnOrderHandler:
    @handle(ReturnOrder)
    def return_order(self, command):
        order = load_order(command.order_id)
        if str(order.customer_id) != str(command.customer_id):
            raise NotFoundError("Order not found")

        order.mark_returned()
        current_domain.repository_for(Order).add(order)
        return str(order.id)

"""Domain events for the Order aggregate.

Events are immutable facts raised by the aggregate and consumed by the
notification handler. They never carry line items or addresses; handlers
reload the order when they need more.
"""

from protean.fields import DateTime, Float, Identifier, String

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A checkout was submitted and persisted as an unpaid order."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_code = String(required=True)
    customer_id = Identifier(required=True)
    customer_email = String()
    payment_method = String(required=True)
    total_price = Float(required=True)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class GatewayOrderLinked:
    """A hosted-checkout gateway order was attached to the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    gateway_order_id = String(required=True)
    linked_at = DateTime(required=True)


@storefront.event(part_of="Order")
class PaymentVerified:
    """A signed payment callback was verified and the order marked paid."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_code = String(required=True)
    customer_id = Identifier(required=True)
    email_address = String()
    gateway_order_id = String(required=True)
    gateway_payment_id = String(required=True)
    total_price = Float(required=True)
    paid_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderDelivered:
    """A fulfillment event confirmed the order was delivered."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    delivered_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderReturned:
    """The customer returned a delivered order."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_code = String(required=True)
    customer_id = Identifier(required=True)
    customer_email = String()
    total_price = Float(required=True)
    returned_at = DateTime(required=True)

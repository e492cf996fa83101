"""Order aggregate — the persisted record of a checkout.

An order is created unpaid and undelivered at checkout. Line items, the
shipping address and the computed totals are snapshots taken at placement
and are never rewritten. The remaining state moves forward only:

Status (derived from flags):
    PLACED → DELIVERED → RETURNED

Payment:
    unpaid → (gateway order linked, status "created") → paid (status "completed")
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from storefront.cart.pricing import CartLine, price_cart
from storefront.domain import storefront
from storefront.order.events import (
    GatewayOrderLinked,
    OrderDelivered,
    OrderPlaced,
    OrderReturned,
    PaymentVerified,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PLACED = "Placed"
    DELIVERED = "Delivered"
    RETURNED = "Returned"


class PaymentMethod(Enum):
    CASH_ON_DELIVERY = "COD"
    ONLINE = "Online"


class PaymentResultStatus(Enum):
    CREATED = "created"
    COMPLETED = "completed"


def generate_order_code(now: datetime) -> str:
    """Human-facing order code: ``order_<epoch milliseconds>``."""
    return f"order_{int(now.timestamp() * 1000)}"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Free-form postal address captured at checkout."""

    line1: String(required=True, max_length=255)
    line2: String(max_length=255)
    city: String(required=True, max_length=100)
    state: String(max_length=100)
    postal_code: String(required=True, max_length=20)
    country: String(required=True, max_length=100)


@storefront.value_object(part_of="Order")
class PaymentResult:
    """Gateway-side payment details, filled in as the payment proceeds."""

    payment_id: String(max_length=64)
    gateway_order_id: String(max_length=64)
    status: String(choices=PaymentResultStatus)
    update_time: DateTime()
    email_address: String(max_length=254)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A line item snapshot; later catalogue edits never touch it."""

    product_id: Identifier(required=True)
    name: String(required=True, max_length=255)
    quantity: Integer(required=True, min_value=1)
    unit_price: Float(required=True, min_value=0.0)
    image: String(max_length=1000)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_code: String(required=True, max_length=64, unique=True)
    customer_id: Identifier(required=True)
    customer_email: String(max_length=254)

    items: HasMany(OrderItem)
    shipping_address: ValueObject(ShippingAddress)

    payment_method: String(choices=PaymentMethod, default=PaymentMethod.CASH_ON_DELIVERY.value)
    payment_result: ValueObject(PaymentResult)
    gateway_order_id: String(max_length=64)

    # Totals, fixed at placement
    items_price: Float(default=0.0)
    tax_price: Float(default=0.0)
    shipping_price: Float(default=0.0)
    total_price: Float(default=0.0)

    paid: Boolean(default=False)
    paid_at: DateTime()
    delivered: Boolean(default=False)
    delivered_at: DateTime()
    returned: Boolean(default=False)
    returned_at: DateTime()

    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def paid_orders_have_payment_time(self):
        if self.paid and self.paid_at is None:
            raise ValidationError({"paid_at": ["Paid orders must record when they were paid"]})

    @invariant.post
    def only_delivered_orders_can_be_returned(self):
        if self.returned and not self.delivered:
            raise ValidationError({"returned": ["Only delivered orders can be returned"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        customer_id: str,
        items_data: list[dict],
        shipping_address: dict,
        payment_method: str = PaymentMethod.CASH_ON_DELIVERY.value,
        customer_email: str | None = None,
        order_code: str | None = None,
        now: datetime | None = None,
    ):
        """Create a new unpaid order, computing its totals from the line items."""
        if not items_data:
            raise ValidationError({"items": ["An order needs at least one item"]})

        now = now or datetime.now(UTC)
        summary = price_cart(CartLine.of(item.get("unit_price"), item.get("quantity")) for item in items_data)

        order = cls(
            order_code=order_code or generate_order_code(now),
            customer_id=customer_id,
            customer_email=customer_email,
            shipping_address=ShippingAddress(**shipping_address),
            payment_method=payment_method,
            created_at=now,
            updated_at=now,
            **summary.as_floats(),
        )
        for item in items_data:
            order.add_items(
                OrderItem(
                    product_id=item.get("product_id"),
                    name=item.get("name"),
                    quantity=item.get("quantity"),
                    unit_price=item.get("unit_price"),
                    image=item.get("image"),
                )
            )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_code=order.order_code,
                customer_id=str(customer_id),
                customer_email=customer_email,
                payment_method=order.payment_method,
                total_price=order.total_price,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------
    @property
    def status(self) -> str:
        if self.returned:
            return OrderStatus.RETURNED.value
        if self.delivered:
            return OrderStatus.DELIVERED.value
        return OrderStatus.PLACED.value

    def is_paid_by(self, gateway_payment_id: str, gateway_order_id: str | None = None) -> bool:
        """True when this exact payment completed the order.

        With ``gateway_order_id`` the payment must also belong to that gateway order.
        """
        result = self.payment_result
        if not self.paid or result is None or result.payment_id != gateway_payment_id:
            return False
        return gateway_order_id is None or result.gateway_order_id == gateway_order_id

    def summary(self) -> dict:
        """Minimal view returned after payment verification."""
        return {
            "id": str(self.id),
            "order_code": self.order_code,
            "paid": bool(self.paid),
            "paid_at": self.paid_at,
        }

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def link_gateway_order(self, gateway_order_id: str, email_address: str | None = None) -> None:
        """Remember the hosted-checkout order opened for this order.

        Re-linking is allowed while unpaid (a fresh checkout attempt); once
        paid the payment result is frozen.
        """
        if self.paid:
            raise ValidationError({"paid": ["Order is already paid"]})

        now = datetime.now(UTC)
        previous = self.payment_result
        with atomic_change(self):
            self.payment_method = PaymentMethod.ONLINE.value
            self.payment_result = PaymentResult(
                gateway_order_id=gateway_order_id,
                status=PaymentResultStatus.CREATED.value,
                update_time=now,
                email_address=email_address or (previous.email_address if previous else None),
            )
            self.gateway_order_id = gateway_order_id
            self.updated_at = now

        self.raise_(
            GatewayOrderLinked(
                order_id=str(self.id),
                gateway_order_id=gateway_order_id,
                linked_at=now,
            )
        )

    def mark_paid(
        self,
        gateway_payment_id: str,
        gateway_order_id: str,
        email_address: str | None = None,
        now: datetime | None = None,
    ) -> None:
        """Record a verified payment. Callers verify the signature first."""
        if self.paid:
            raise ValidationError({"paid": ["Order is already paid"]})

        now = now or datetime.now(UTC)
        payer_email = email_address or self.customer_email
        with atomic_change(self):
            self.paid_at = now
            self.paid = True
            self.payment_result = PaymentResult(
                payment_id=gateway_payment_id,
                gateway_order_id=gateway_order_id,
                status=PaymentResultStatus.COMPLETED.value,
                update_time=now,
                email_address=payer_email,
            )
            self.gateway_order_id = gateway_order_id
            self.updated_at = now

        self.raise_(
            PaymentVerified(
                order_id=str(self.id),
                order_code=self.order_code,
                customer_id=str(self.customer_id),
                email_address=payer_email,
                gateway_order_id=gateway_order_id,
                gateway_payment_id=gateway_payment_id,
                total_price=self.total_price,
                paid_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def mark_delivered(self, now: datetime | None = None) -> None:
        if self.delivered:
            raise ValidationError({"delivered": ["Order is already delivered"]})

        now = now or datetime.now(UTC)
        with atomic_change(self):
            self.delivered_at = now
            self.delivered = True
            self.updated_at = now

        self.raise_(
            OrderDelivered(
                order_id=str(self.id),
                customer_id=str(self.customer_id),
                delivered_at=now,
            )
        )

    def mark_returned(self, now: datetime | None = None) -> None:
        if not self.delivered:
            raise ValidationError({"returned": ["Only delivered orders can be returned"]})
        if self.returned:
            raise ValidationError({"returned": ["Order is already returned"]})

        now = now or datetime.now(UTC)
        with atomic_change(self):
            self.returned_at = now
            self.returned = True
            self.updated_at = now

        self.raise_(
            OrderReturned(
                order_id=str(self.id),
                order_code=self.order_code,
                customer_id=str(self.customer_id),
                customer_email=self.customer_email,
                total_price=self.total_price,
                returned_at=now,
            )
        )

"""Cart pricing — derives item, tax, shipping and grand totals from line items.

Pure functions over ``(unit_price, quantity)`` pairs. Arithmetic runs on
``Decimal`` so that the published identity ``total == items + tax + shipping``
holds exactly; callers convert to float only at the persistence boundary.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from protean.exceptions import ValidationError

TAX_RATE = Decimal("0.10")
FREE_SHIPPING_THRESHOLD = Decimal("1000")
FLAT_SHIPPING_FEE = Decimal("100")

_CENTS = Decimal("0.01")


def to_decimal(value) -> Decimal:
    """Convert a price to Decimal through its string form (0.1 stays 0.1)."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Decimal) -> Decimal:
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class CartLine:
    unit_price: Decimal
    quantity: int

    @classmethod
    def of(cls, unit_price, quantity) -> "CartLine":
        if unit_price is None or quantity is None:
            raise ValidationError({"items": ["Every line item needs a unit price and a quantity"]})
        try:
            return cls(unit_price=to_decimal(unit_price), quantity=int(quantity))
        except (ArithmeticError, ValueError, TypeError):
            raise ValidationError({"items": [f"Invalid line item: {unit_price!r} x {quantity!r}"]}) from None

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class CartSummary:
    items_price: Decimal
    tax_price: Decimal
    shipping_price: Decimal
    total_price: Decimal

    def as_floats(self) -> dict:
        return {
            "items_price": float(self.items_price),
            "tax_price": float(self.tax_price),
            "shipping_price": float(self.shipping_price),
            "total_price": float(self.total_price),
        }


def shipping_for(items_price: Decimal) -> Decimal:
    """Shipping is free strictly above the threshold; 1000.00 still pays."""
    return Decimal("0") if items_price > FREE_SHIPPING_THRESHOLD else FLAT_SHIPPING_FEE


def price_cart(lines: Iterable[CartLine]) -> CartSummary:
    """Compute the cart summary for a sequence of line items."""
    items_price = Decimal("0")
    for line in lines:
        if line.unit_price < 0:
            raise ValidationError({"items": ["Unit price cannot be negative"]})
        if line.quantity < 0:
            raise ValidationError({"items": ["Quantity cannot be negative"]})
        items_price += line.line_total

    items_price = round_money(items_price)
    tax_price = round_money(items_price * TAX_RATE)
    shipping_price = shipping_for(items_price)
    total_price = round_money(items_price + tax_price + shipping_price)

    return CartSummary(
        items_price=items_price,
        tax_price=tax_price,
        shipping_price=shipping_price,
        total_price=total_price,
    )

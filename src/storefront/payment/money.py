"""Major/minor currency unit conversion for the payment gateway."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from protean.exceptions import ValidationError

MINOR_UNITS_PER_MAJOR = 100


def to_minor_units(amount) -> int:
    """Convert a major-unit amount to the gateway's integer minor unit.

    The amount goes through its string form, so inputs with at most two
    decimals convert exactly (499.99 -> 49999). Extra precision is rounded
    half-up to the nearest minor unit (10.005 -> 1001).
    """
    if amount is None or isinstance(amount, bool):
        raise ValidationError({"amount": ["Amount is required"]})
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        raise ValidationError({"amount": [f"Amount is not a number: {amount!r}"]}) from None
    if not value.is_finite():
        raise ValidationError({"amount": [f"Amount is not a number: {amount!r}"]})

    minor = (value * MINOR_UNITS_PER_MAJOR).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    if minor <= 0:
        raise ValidationError({"amount": ["Amount must be greater than zero"]})
    return int(minor)


def to_major_units(minor: int) -> float:
    return float(Decimal(minor) / MINOR_UNITS_PER_MAJOR)

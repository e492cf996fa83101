"""Order resolution for gateway linkage and payment callbacks.

Callers identify an order by a loose reference that may be the primary id,
the human-facing order code, or (in legacy clients) a ``<prefix>_<millis>``
string generated on the client. Strategies are tried in a fixed order and the
first hit wins:

    1. primary id        (only when the reference parses as a UUID)
    2. order code
    3. gateway order id  (verification only)
    4. creation time     (verification only, ``<prefix>_<millis>`` within ±2s)

The creation-time match is a best-effort fallback: two orders created within
four seconds of each other are indistinguishable to it. It can be switched
off with ``STOREFRONT_TIMESTAMP_LOOKUP=false``.
"""

import re
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from uuid import UUID

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.exceptions import NotFoundError
from storefront.order.order import Order

logger = structlog.get_logger(__name__)

TIMESTAMP_WINDOW = timedelta(seconds=2)

_TIMESTAMP_REFERENCE = re.compile(r"^.+_(-?\d+)$")


@dataclass(frozen=True)
class ResolvedOrder:
    order: Order
    strategy: str


def is_valid_order_id(reference) -> bool:
    """Whether ``reference`` is syntactically a primary id."""
    if not isinstance(reference, str) or not reference:
        return False
    try:
        UUID(reference)
    except ValueError:
        return False
    return True


def timestamp_from_reference(reference) -> datetime | None:
    """Parse ``<prefix>_<epoch millis>`` into an aware datetime."""
    if not isinstance(reference, str):
        return None
    match = _TIMESTAMP_REFERENCE.match(reference)
    if match is None:
        return None
    try:
        return datetime.fromtimestamp(int(match.group(1)) / 1000, tz=UTC)
    except (OverflowError, OSError, ValueError):
        return None


def _by_id(repo, reference):
    if not is_valid_order_id(reference):
        return None
    try:
        return repo.get(reference)
    except ObjectNotFoundError:
        return None


def _by_code(repo, reference):
    if not reference:
        return None
    return repo.find_by_code(str(reference))


def _by_gateway_order(repo, gateway_order_id):
    if not gateway_order_id:
        return None
    return repo.find_by_gateway_order_id(gateway_order_id)


def _by_creation_time(repo, reference):
    moment = timestamp_from_reference(reference)
    if moment is None:
        return None

    candidates = repo.find_created_between(moment - TIMESTAMP_WINDOW, moment + TIMESTAMP_WINDOW)
    if not candidates:
        return None
    if len(candidates) > 1:
        logger.warning(
            "Ambiguous creation-time order match, using the earliest",
            reference=reference,
            candidates=[str(order.id) for order in candidates],
        )
    return candidates[0]


def resolve_local_order(reference) -> ResolvedOrder | None:
    """Resolve by primary id, then order code."""
    repo = current_domain.repository_for(Order)
    for strategy, finder in (("id", _by_id), ("order_code", _by_code)):
        order = finder(repo, reference)
        if order is not None:
            return ResolvedOrder(order=order, strategy=strategy)
    return None


def resolve_order_for_payment(
    reference,
    gateway_order_id: str | None,
    allow_timestamp_match: bool = True,
) -> ResolvedOrder | None:
    """Resolve the order a payment callback refers to, most exact match first."""
    resolved = resolve_local_order(reference)
    if resolved is not None:
        return resolved

    repo = current_domain.repository_for(Order)
    order = _by_gateway_order(repo, gateway_order_id)
    if order is not None:
        return ResolvedOrder(order=order, strategy="gateway_order_id")

    if allow_timestamp_match:
        order = _by_creation_time(repo, reference)
        if order is not None:
            return ResolvedOrder(order=order, strategy="created_at")

    return None


def load_order(order_id) -> Order:
    """Load an order by primary id or raise ``NotFoundError``."""
    repo = current_domain.repository_for(Order)
    order = _by_id(repo, order_id)
    if order is None:
        raise NotFoundError("Order not found")
    return order

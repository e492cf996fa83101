"""Repository for the Order aggregate.

The base repository provides get/add. The finders below back the order
resolution strategies used by payment linkage and verification.

Queries that return lists lift the default page size; ``limit(None)`` has to
be the last clone because every other builder step restores the default.
"""

from datetime import datetime

from storefront.domain import storefront
from storefront.order.order import Order


@storefront.repository(part_of=Order)
class OrderRepository:
    def find_by_code(self, order_code: str) -> Order | None:
        """Find an order by its human-facing code."""
        items = self._dao.query.filter(order_code=order_code).all().items
        return items[0] if items else None

    def find_by_gateway_order_id(self, gateway_order_id: str) -> Order | None:
        """Find the order linked to a hosted-checkout gateway order."""
        items = self._dao.query.filter(gateway_order_id=gateway_order_id).all().items
        return items[0] if items else None

    def find_created_between(self, start: datetime, end: datetime) -> list[Order]:
        """Orders created in ``[start, end)``, oldest first."""
        query = self._dao.query.filter(created_at__gte=start, created_at__lt=end)
        return query.order_by("created_at").limit(None).all().items

    def find_for_customer(self, customer_id: str) -> list[Order]:
        """A customer's orders, newest first."""
        query = self._dao.query.filter(customer_id=str(customer_id))
        return query.order_by("-created_at").limit(None).all().items

    def find_undelivered_created_before(self, cutoff: datetime, customer_id: str | None = None) -> list[Order]:
        query = self._dao.query.filter(delivered=False, created_at__lte=cutoff)
        if customer_id is not None:
            query = query.filter(customer_id=str(customer_id))
        return query.order_by("created_at").limit(None).all().items

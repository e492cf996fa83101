"""Storefront bounded context — Checkout, Payments and Order Lifecycle.

Handles order placement, hosted payment-gateway checkout and verification,
the server-authoritative delivery/return lifecycle, and transactional
email notifications.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)

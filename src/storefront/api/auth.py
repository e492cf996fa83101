"""Caller identity for API requests.

Authentication itself happens upstream (API gateway or auth service), which
forwards the verified identity in ``X-User-Id`` / ``X-User-Email`` headers.

Fulfillment callbacks come from a carrier or warehouse integration, never a
customer; they present the shared ``X-Service-Token`` instead.
"""

import hmac
from dataclasses import dataclass

import structlog
from fastapi import Header, HTTPException

from storefront.config import get_settings

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Caller:
    user_id: str
    email: str | None = None


def current_caller(
    x_user_id: str = Header(default=""),
    x_user_email: str = Header(default=""),
) -> Caller:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Not authorized, identity missing")
    return Caller(user_id=x_user_id, email=x_user_email or None)


def fulfillment_service(x_service_token: str = Header(default="")) -> None:
    """Admit only callers holding the configured fulfillment token."""
    if not x_service_token:
        raise HTTPException(status_code=401, detail="Not authorized, service token missing")

    expected = get_settings().fulfillment_token
    if not expected:
        logger.error("Fulfillment callback rejected, STOREFRONT_FULFILLMENT_TOKEN is not configured")
        raise HTTPException(status_code=403, detail="Fulfillment callbacks are disabled")
    if not hmac.compare_digest(expected.encode(), x_service_token.encode()):
        raise HTTPException(status_code=403, detail="Invalid service token")

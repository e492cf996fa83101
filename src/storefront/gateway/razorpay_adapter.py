"""Razorpay payment gateway adapter.

Creates orders through the Razorpay Orders REST API with HTTP basic auth
(key id / key secret). Order creation is the one synchronous external call
on the checkout path, so it runs with an explicit timeout and is retried
exactly once on timeouts, transport errors and 5xx responses.
"""

import httpx
import structlog

from storefront.exceptions import GatewayError
from storefront.gateway.port import GatewayOrder, PaymentGateway

logger = structlog.get_logger(__name__)

MAX_ATTEMPTS = 2


class RazorpayGateway(PaymentGateway):
    """Production Razorpay adapter."""

    def __init__(
        self,
        key_id: str | None,
        key_secret: str | None,
        base_url: str = "https://api.razorpay.com/v1",
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.key_id = key_id
        self.key_secret = key_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            auth=(self.key_id, self.key_secret),
            timeout=self.timeout,
            transport=self._transport,
        )

    def create_order(self, amount: int, currency: str, receipt: str) -> GatewayOrder:
        self.require_credentials()
        payload = {
            "amount": amount,
            "currency": currency,
            "receipt": str(receipt),
            "payment_capture": 1,
        }

        with self._client() as client:
            response = self._post_with_retry(client, "/orders", payload)

        body = response.json()
        return GatewayOrder(
            id=body["id"],
            amount=int(body.get("amount", amount)),
            currency=body.get("currency", currency),
            receipt=body.get("receipt"),
            status=body.get("status", "created"),
        )

    def _post_with_retry(self, client: httpx.Client, path: str, payload: dict) -> httpx.Response:
        for attempt in range(1, MAX_ATTEMPTS + 1):
            try:
                response = client.post(path, json=payload)
            except httpx.TimeoutException as exc:
                logger.warning("Gateway request timed out", path=path, attempt=attempt)
                if attempt == MAX_ATTEMPTS:
                    raise GatewayError("Payment gateway timed out", code="GATEWAY_TIMEOUT", status_code=504) from exc
                continue
            except httpx.TransportError as exc:
                logger.warning("Gateway transport error", path=path, attempt=attempt, error=str(exc))
                if attempt == MAX_ATTEMPTS:
                    raise GatewayError(
                        "Payment gateway unreachable", code="GATEWAY_UNREACHABLE", status_code=502
                    ) from exc
                continue

            if response.status_code >= 500 and attempt < MAX_ATTEMPTS:
                logger.warning("Gateway server error, retrying", path=path, status=response.status_code)
                continue
            if response.is_error:
                raise _gateway_error_from(response)
            return response

        raise GatewayError("Payment gateway request failed")


def _gateway_error_from(response: httpx.Response) -> GatewayError:
    """Forward the gateway's own error description and code verbatim."""
    description = None
    code = None
    try:
        error = response.json().get("error") or {}
        description = error.get("description")
        code = error.get("code")
    except ValueError:
        pass
    return GatewayError(
        description or f"Payment gateway returned HTTP {response.status_code}",
        code=code,
        status_code=response.status_code,
        details=description,
    )

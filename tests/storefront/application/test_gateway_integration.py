"""Tests for gateway port/adapter integration."""

import json

import httpx
import pytest

from storefront.config import Settings
from storefront.exceptions import ConfigError, GatewayError
from storefront.gateway import build_gateway, get_gateway, reset_gateway, set_gateway
from storefront.gateway.fake_adapter import FakeGateway
from storefront.gateway.port import GatewayOrder
from storefront.gateway.razorpay_adapter import RazorpayGateway
from storefront.payment.signature import compute_signature


def _razorpay(handler):
    return RazorpayGateway(
        key_id="rzp_test_key",
        key_secret="rzp_secret",
        base_url="https://gateway.test/v1",
        timeout=1.0,
        transport=httpx.MockTransport(handler),
    )


def _order_body(request):
    payload = json.loads(request.content)
    return {
        "id": "order_Nx1",
        "entity": "order",
        "amount": payload["amount"],
        "currency": payload["currency"],
        "receipt": payload["receipt"],
        "status": "created",
    }


class TestFakeGateway:
    def test_create_order(self):
        gateway = FakeGateway()
        order = gateway.create_order(amount=49999, currency="INR", receipt="ord_1")
        assert isinstance(order, GatewayOrder)
        assert order.amount == 49999
        assert order.currency == "INR"
        assert order.receipt == "ord_1"

    def test_configured_failure(self):
        gateway = FakeGateway()
        gateway.configure(should_succeed=False, failure_reason="Authentication failed", failure_status=401)
        with pytest.raises(GatewayError) as exc_info:
            gateway.create_order(amount=100, currency="INR", receipt="ord_1")
        assert exc_info.value.status_code == 401

    def test_signs_with_its_secret(self):
        gateway = FakeGateway()
        signature = gateway.sign("order_1", "pay_1")
        assert signature == compute_signature(gateway.key_secret, "order_1", "pay_1")
        assert gateway.verify_payment_signature("order_1", "pay_1", signature) is True


class TestRazorpayGateway:
    def test_create_order_posts_minor_units_with_basic_auth(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=_order_body(request))

        order = _razorpay(handler).create_order(amount=149900, currency="INR", receipt="ord_123")

        assert order.id == "order_Nx1"
        assert order.amount == 149900
        request = seen[0]
        assert request.url == "https://gateway.test/v1/orders"
        assert request.headers["authorization"].startswith("Basic ")
        assert json.loads(request.content)["receipt"] == "ord_123"

    def test_retries_once_on_server_error(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            if len(attempts) == 1:
                return httpx.Response(503, json={"error": {"description": "busy"}})
            return httpx.Response(200, json=_order_body(request))

        order = _razorpay(handler).create_order(amount=100, currency="INR", receipt="ord_1")
        assert order.id == "order_Nx1"
        assert len(attempts) == 2

    def test_second_server_error_is_raised(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            return httpx.Response(502, json={"error": {"code": "SERVER_ERROR", "description": "Bad gateway"}})

        with pytest.raises(GatewayError) as exc_info:
            _razorpay(handler).create_order(amount=100, currency="INR", receipt="ord_1")

        assert len(attempts) == 2
        assert exc_info.value.status_code == 502
        assert exc_info.value.message == "Bad gateway"

    def test_retries_once_on_timeout(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            if len(attempts) == 1:
                raise httpx.ReadTimeout("timed out", request=request)
            return httpx.Response(200, json=_order_body(request))

        assert _razorpay(handler).create_order(amount=100, currency="INR", receipt="ord_1").id == "order_Nx1"
        assert len(attempts) == 2

    def test_repeated_timeout_is_a_gateway_timeout(self):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        with pytest.raises(GatewayError) as exc_info:
            _razorpay(handler).create_order(amount=100, currency="INR", receipt="ord_1")
        assert exc_info.value.status_code == 504
        assert exc_info.value.code == "GATEWAY_TIMEOUT"

    def test_repeated_transport_error_is_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(GatewayError) as exc_info:
            _razorpay(handler).create_order(amount=100, currency="INR", receipt="ord_1")
        assert exc_info.value.code == "GATEWAY_UNREACHABLE"

    def test_client_error_forwarded_without_retry(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            return httpx.Response(
                400,
                json={"error": {"code": "BAD_REQUEST_ERROR", "description": "The amount must be at least INR 1.00"}},
            )

        with pytest.raises(GatewayError) as exc_info:
            _razorpay(handler).create_order(amount=1, currency="INR", receipt="ord_1")

        assert len(attempts) == 1
        assert exc_info.value.status_code == 400
        assert exc_info.value.code == "BAD_REQUEST_ERROR"
        assert exc_info.value.message == "The amount must be at least INR 1.00"

    def test_non_json_error_body(self):
        def handler(request):
            return httpx.Response(401, text="Unauthorized")

        with pytest.raises(GatewayError) as exc_info:
            _razorpay(handler).create_order(amount=100, currency="INR", receipt="ord_1")
        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Payment gateway returned HTTP 401"

    def test_missing_credentials(self):
        gateway = RazorpayGateway(key_id=None, key_secret=None)
        with pytest.raises(ConfigError):
            gateway.create_order(amount=100, currency="INR", receipt="ord_1")


class TestGatewayFactory:
    def test_set_and_reset(self):
        custom = FakeGateway(key_id="custom")
        set_gateway(custom)
        assert get_gateway() is custom
        reset_gateway()
        assert get_gateway() is not custom

    def test_build_razorpay(self):
        gateway = build_gateway(Settings(payment_gateway="razorpay", gateway_key_id="k", gateway_key_secret="s"))
        assert isinstance(gateway, RazorpayGateway)
        assert gateway.key_id == "k"

    def test_build_fake(self):
        assert isinstance(build_gateway(Settings(payment_gateway="fake")), FakeGateway)

    def test_unknown_gateway(self):
        with pytest.raises(ValueError):
            build_gateway(Settings(payment_gateway="paypal"))

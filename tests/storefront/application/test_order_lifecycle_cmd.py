"""Application tests for delivery and return commands."""

import json
from datetime import UTC, datetime, timedelta

import pytest
from protean import current_domain
from protean.exceptions import ValidationError

from storefront.config import Settings
from storefront.exceptions import NotFoundError
from storefront.order.delivery import RecordDelivery, deliver_due_orders, delivery_countdown
from storefront.order.order import Order
from storefront.order.placement import PlaceOrder
from storefront.order.returns import ReturnOrder


def _place_order(order_payload, customer_id="cust-001"):
    return current_domain.process(
        PlaceOrder(
            customer_id=customer_id,
            customer_email="asha@example.com",
            items=json.dumps(order_payload["items"]),
            shipping_address=json.dumps(order_payload["shipping_address"]),
        ),
        asynchronous=False,
    )


def _deliver(order_id):
    current_domain.process(RecordDelivery(order_id=order_id), asynchronous=False)


def _return(order_id, customer_id="cust-001"):
    current_domain.process(ReturnOrder(order_id=order_id, customer_id=customer_id), asynchronous=False)


def _get(order_id):
    return current_domain.repository_for(Order).get(order_id)


class TestRecordDelivery:
    def test_marks_delivered(self, order_payload):
        order_id = _place_order(order_payload)
        _deliver(order_id)
        order = _get(order_id)
        assert order.delivered is True
        assert order.status == "Delivered"

    def test_delivering_twice_rejected(self, order_payload):
        order_id = _place_order(order_payload)
        _deliver(order_id)
        with pytest.raises(ValidationError):
            _deliver(order_id)

    def test_unknown_order(self):
        with pytest.raises(NotFoundError):
            _deliver("5f0c6c1e-4b7e-4f2b-9a6c-1d2e3f4a5b6c")


class TestReturnOrder:
    def test_owner_returns_delivered_order(self, order_payload, email_channel):
        order_id = _place_order(order_payload)
        _deliver(order_id)
        email_channel.clear()

        _return(order_id)

        order = _get(order_id)
        assert order.returned is True
        assert order.returned_at is not None
        assert order.status == "Returned"
        assert email_channel.outbox[0].subject.startswith("Return Confirmed")

    def test_undelivered_order_rejected(self, order_payload):
        order_id = _place_order(order_payload)
        with pytest.raises(ValidationError):
            _return(order_id)
        assert _get(order_id).returned is False

    def test_second_return_rejected(self, order_payload):
        order_id = _place_order(order_payload)
        _deliver(order_id)
        _return(order_id)
        with pytest.raises(ValidationError):
            _return(order_id)

    def test_other_customer_cannot_return(self, order_payload):
        order_id = _place_order(order_payload)
        _deliver(order_id)
        with pytest.raises(NotFoundError):
            _return(order_id, customer_id="cust-intruder")
        assert _get(order_id).returned is False


class TestSimulatedDelivery:
    def test_disabled_by_default(self, order_payload):
        order_id = _place_order(order_payload)
        assert deliver_due_orders(now=datetime.now(UTC) + timedelta(hours=1)) == []
        assert _get(order_id).delivered is False

    def test_delivers_orders_past_the_window(self, order_payload):
        settings = Settings(simulate_delivery=True, delivery_window_seconds=60)
        due = _place_order(order_payload)
        already = _place_order(order_payload)
        _deliver(already)

        delivered = deliver_due_orders(now=datetime.now(UTC) + timedelta(seconds=61), settings=settings)

        assert delivered == [due]
        assert _get(due).delivered is True

    def test_leaves_recent_orders(self, order_payload):
        settings = Settings(simulate_delivery=True, delivery_window_seconds=60)
        order_id = _place_order(order_payload)

        assert deliver_due_orders(now=datetime.now(UTC) + timedelta(seconds=30), settings=settings) == []
        assert _get(order_id).delivered is False

    def test_countdown(self, order_payload):
        order = _get(_place_order(order_payload))
        remaining = delivery_countdown(order, now=order.created_at + timedelta(seconds=45), window_seconds=60)
        assert remaining == pytest.approx(15.0)
        assert delivery_countdown(order, now=order.created_at + timedelta(seconds=90), window_seconds=60) == 0.0

    def test_sweep_scoped_to_one_customer(self, order_payload):
        settings = Settings(simulate_delivery=True, delivery_window_seconds=60)
        mine = _place_order(order_payload)
        theirs = _place_order(order_payload, customer_id="cust-other")

        delivered = deliver_due_orders(
            now=datetime.now(UTC) + timedelta(seconds=61), settings=settings, customer_id="cust-001"
        )

        assert delivered == [mine]
        assert _get(theirs).delivered is False

    def test_sweep_is_not_truncated(self, order_payload):
        settings = Settings(simulate_delivery=True, delivery_window_seconds=60)
        for _ in range(105):
            _place_order(order_payload)

        delivered = deliver_due_orders(now=datetime.now(UTC) + timedelta(seconds=61), settings=settings)

        assert len(delivered) == 105

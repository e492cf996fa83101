import pytest
from protean.integrations.pytest import DomainFixture

from storefront.config import reset_settings
from storefront.gateway import reset_gateway, set_gateway
from storefront.gateway.fake_adapter import FakeGateway
from storefront.notification.channel import reset_channels, set_email_channel
from storefront.notification.channel.fake_email import FakeEmailAdapter


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def gateway():
    """A fresh fake gateway for every test."""
    reset_settings()
    fake = FakeGateway()
    set_gateway(fake)
    yield fake
    reset_gateway()
    reset_settings()


@pytest.fixture(autouse=True)
def email_channel():
    fake = FakeEmailAdapter()
    set_email_channel(fake)
    yield fake
    reset_channels()


@pytest.fixture()
def order_payload():
    return {
        "items": [
            {"product_id": "prod-001", "name": "Wireless Mouse", "quantity": 2, "unit_price": 499.5},
            {"product_id": "prod-002", "name": "USB Cable", "quantity": 1, "unit_price": 150.0},
        ],
        "shipping_address": {
            "line1": "12 MG Road",
            "city": "Bengaluru",
            "state": "KA",
            "postal_code": "560001",
            "country": "IN",
        },
    }

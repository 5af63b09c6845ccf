import pytest
from protean.integrations.pytest import DomainFixture

from checkout.cart import reset_cart_service, set_cart_service
from checkout.cart.fake_adapter import FakeCart
from checkout.cart.port import Cart, CartLine
from checkout.flow.requests import CustomerInfo, DeliveryDetails
from checkout.gateway import reset_gateway, set_gateway
from checkout.gateway.fake_adapter import FakeGateway
from checkout.settings import CheckoutSettings, reset_settings, set_settings
from checkout.store import reset_order_store


@pytest.fixture(scope="session")
def checkout_bed():
    from checkout.domain import checkout

    bed = DomainFixture(checkout)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(checkout_bed):
    with checkout_bed.domain_context():
        yield

        from protean import current_domain

        for _, provider in current_domain.providers.items():
            provider._data_reset()

        for _, broker in current_domain.brokers.items():
            broker._data_reset()

        current_domain.event_store.store._data_reset()


@pytest.fixture(autouse=True)
def settings():
    """Default settings, independent of the developer's environment."""
    checkout_settings = CheckoutSettings()
    set_settings(checkout_settings)
    yield checkout_settings
    reset_settings()


@pytest.fixture(autouse=True)
def gateway():
    fake = FakeGateway()
    set_gateway(fake)
    yield fake
    reset_gateway()


@pytest.fixture(autouse=True)
def cart_service():
    fake = FakeCart()
    set_cart_service(fake)
    yield fake
    reset_cart_service()


@pytest.fixture(autouse=True)
def _fresh_store():
    reset_order_store()
    yield
    reset_order_store()


@pytest.fixture
def default_methods():
    from checkout.payment_method.management import seed_default_payment_methods

    seed_default_payment_methods()


@pytest.fixture
def customer():
    return CustomerInfo(email="ada@example.com", name="Ada Obi", phone="08030000000")


@pytest.fixture
def delivery():
    return DeliveryDetails(address_ref="addr-001", method="home_delivery")


@pytest.fixture
def make_cart():
    def _make_cart(*prices, owner_id="cart-001"):
        """A cart with one unit of a product per price given (minor units)."""
        return Cart(
            owner_id=owner_id,
            lines=tuple(
                CartLine(product_id=f"prod-{index}", name=f"Product {index}", unit_price=price, quantity=1)
                for index, price in enumerate(prices, start=1)
            ),
        )

    return _make_cart

"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeGateway for development and testing (the default)
- PaystackGateway when ``CHECKOUT_GATEWAY=paystack``
"""

from checkout.gateway.fake_adapter import FakeGateway
from checkout.gateway.paystack_adapter import PaystackGateway
from checkout.gateway.port import PaymentGateway
from checkout.settings import get_settings

_current_gateway: PaymentGateway | None = None


def _build_gateway() -> PaymentGateway:
    settings = get_settings()
    if settings.gateway == "paystack":
        return PaystackGateway(
            secret_key=settings.paystack_secret_key,
            base_url=settings.paystack_base_url,
            currency=settings.currency,
            timeout=settings.gateway_timeout_seconds,
            verify_max_attempts=settings.verify_max_attempts,
        )
    return FakeGateway()


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway, building it from settings on first use."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _build_gateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None

"""Cart collaborator factory. Defaults to FakeCart."""

from checkout.cart.fake_adapter import FakeCart
from checkout.cart.port import CartService

_current_cart: CartService | None = None


def get_cart_service() -> CartService:
    global _current_cart
    if _current_cart is None:
        _current_cart = FakeCart()
    return _current_cart


def set_cart_service(cart: CartService) -> None:
    """Override the active cart collaborator (useful for tests)."""
    global _current_cart
    _current_cart = cart


def reset_cart_service() -> None:
    global _current_cart
    _current_cart = None
